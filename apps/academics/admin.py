# apps/academics/admin.py

from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from apps.core.exceptions import SchedulingError
from .models import (
    AttendanceRecord, Class, ClassScheduleEntry, Classroom, ClassTestMark, ClassWeek, Enrollment,
    HomeworkGrade, Term,
)
from .services import TermClock


@admin.register(Term)
class TermAdmin(admin.ModelAdmin):
    """
    Admin interface for Term model.
    """
    list_display = ('name', 'term_type', 'start_date', 'weeks', 'is_first_term_of_year', 'is_current')
    list_filter = ('term_type', 'is_current', 'is_first_term_of_year')
    search_fields = ('name',)
    readonly_fields = ('is_current', 'created_at', 'updated_at')
    date_hierarchy = 'start_date'
    actions = ['activate_term']

    fieldsets = (
        (_('Term Information'), {
            'fields': ('name', 'term_type', 'start_date', 'weeks', 'is_first_term_of_year')
        }),
        (_('System Metadata'), {
            'fields': ('is_current', 'created_by', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    @admin.action(description=_('Activate selected term'))
    def activate_term(self, request, queryset):
        if queryset.count() != 1:
            self.message_user(request, _('Select exactly one term to activate.'), messages.ERROR)
            return
        result = TermClock.activate(queryset.get().pk, initiated_by=request.user)
        message = _('%(term)s is now the current term.') % {'term': result.term.name}
        if result.rollover:
            message += ' ' + _('%(advanced)d students advanced, %(graduated)d graduated.') % {
                'advanced': result.rollover.advanced,
                'graduated': result.rollover.graduated,
            }
        self.message_user(request, message, messages.SUCCESS)

    def delete_model(self, request, obj):
        try:
            TermClock.delete_term(obj.pk, actor=request.user)
        except SchedulingError as e:
            self.message_user(request, e.message, messages.ERROR)


@admin.register(Classroom)
class ClassroomAdmin(admin.ModelAdmin):
    list_display = ('name', 'capacity', 'is_active')
    list_filter = ('is_active',)
    search_fields = ('name',)


class ClassScheduleEntryInline(admin.TabularInline):
    """
    Inline admin for the weekly meetings of a class.
    """
    model = ClassScheduleEntry
    extra = 0
    fields = ('order', 'day_of_week', 'start_time', 'duration_minutes')


class EnrollmentInline(admin.TabularInline):
    model = Enrollment
    extra = 0
    fields = ('student', 'joined_week', 'school_test_results')
    raw_id_fields = ('student',)


@admin.register(Class)
class ClassAdmin(admin.ModelAdmin):
    """
    Admin interface for Class model.
    """
    list_display = ('name', 'year', 'teacher', 'classroom', 'term', 'is_active')
    list_filter = ('term', 'classroom', 'year', 'is_active')
    search_fields = ('name', 'teacher__first_name', 'teacher__last_name', 'teacher__email')
    readonly_fields = ('created_at', 'updated_at')
    raw_id_fields = ('teacher', 'progress')
    inlines = [ClassScheduleEntryInline, EnrollmentInline]


class AttendanceRecordInline(admin.TabularInline):
    model = AttendanceRecord
    extra = 0
    raw_id_fields = ('student',)


class HomeworkGradeInline(admin.TabularInline):
    model = HomeworkGrade
    extra = 0
    raw_id_fields = ('student',)


class ClassTestMarkInline(admin.TabularInline):
    model = ClassTestMark
    extra = 0
    raw_id_fields = ('student',)


@admin.register(ClassWeek)
class ClassWeekAdmin(admin.ModelAdmin):
    """
    Attendance, homework and test marks recorded for one week of a class.
    """
    list_display = ('class_ref', 'week', 'test')
    list_filter = ('class_ref__term', 'week')
    search_fields = ('class_ref__name',)
    raw_id_fields = ('class_ref', 'test')
    inlines = [AttendanceRecordInline, HomeworkGradeInline, ClassTestMarkInline]
