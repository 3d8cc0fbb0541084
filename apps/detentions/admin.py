# apps/detentions/admin.py

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import DetentionSlot, Detention
from .services import DetentionLifecycle


@admin.register(DetentionSlot)
class DetentionSlotAdmin(admin.ModelAdmin):
    """
    Admin interface for DetentionSlot model.

    Seat counts are maintained by bookings and are read-only here.
    """
    list_display = ('date', 'start_time', 'end_time', 'classroom', 'term', 'week', 'booked_count', 'capacity')
    list_filter = ('classroom', 'term', 'date')
    date_hierarchy = 'date'
    readonly_fields = ('capacity', 'booked_count', 'created_by', 'created_at', 'updated_at')

    fieldsets = (
        (_('Session'), {
            'fields': ('date', 'start_time', 'end_time', 'classroom')
        }),
        (_('Grid Position'), {
            'fields': ('term', 'week'),
        }),
        (_('Seats'), {
            'fields': ('capacity', 'booked_count'),
        }),
        (_('System Metadata'), {
            'fields': ('created_by', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def save_model(self, request, obj, form, change):
        if not change:
            obj.capacity = obj.classroom.capacity
            obj.created_by = request.user
        super().save_model(request, obj, form, change)

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.booked_count > 0:
            return False
        return super().has_delete_permission(request, obj)


@admin.register(Detention)
class DetentionAdmin(admin.ModelAdmin):
    list_display = ('student', 'class_ref', 'week', 'status', 'completion_status', 'attempts', 'assigned_at')
    list_filter = ('status', 'completion_status')
    search_fields = ('student__email', 'student__first_name', 'student__last_name', 'class_ref__name', 'reason')
    raw_id_fields = ('student', 'class_ref', 'booked_slot', 'assigned_by')
    readonly_fields = ('status', 'booked_slot', 'completion_status', 'attempts', 'assigned_at')

    def delete_model(self, request, obj):
        DetentionLifecycle.delete(obj.pk, actor=request.user)

    def delete_queryset(self, request, queryset):
        # Each deletion gives its seat back.
        for detention in queryset:
            DetentionLifecycle.delete(detention.pk, actor=request.user)
