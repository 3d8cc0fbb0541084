# apps/curriculum/admin.py

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import Topic, ClassTest, Progress, ProgressWeek


@admin.register(Topic)
class TopicAdmin(admin.ModelAdmin):
    list_display = ('name', 'year', 'term_label', 'created_by')
    list_filter = ('year', 'term_label')
    search_fields = ('name', 'content')


@admin.register(ClassTest)
class ClassTestAdmin(admin.ModelAdmin):
    list_display = ('name', 'year', 'term_label', 'created_by')
    list_filter = ('year', 'term_label')
    search_fields = ('name',)


class ProgressWeekInline(admin.StackedInline):
    """
    Inline admin for the weekly content of a progress plan.
    """
    model = ProgressWeek
    extra = 0
    fields = ('week', 'topics', 'test', 'comments')
    filter_horizontal = ('topics',)


@admin.register(Progress)
class ProgressAdmin(admin.ModelAdmin):
    list_display = ('name', 'term', 'year')
    list_filter = ('term', 'year')
    search_fields = ('name',)
    inlines = [ProgressWeekInline]

    fieldsets = (
        (_('Progress Plan'), {
            'fields': ('name', 'term', 'year')
        }),
    )
