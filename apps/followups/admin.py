# apps/followups/admin.py

from django.contrib import admin
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from .models import Followup
from .services import FollowupService


@admin.register(Followup)
class FollowupAdmin(admin.ModelAdmin):
    list_display = ('issue', 'due_date', 'is_completed', 'completed_at', 'created_by')
    list_filter = ('is_completed', 'due_date')
    search_fields = ('issue', 'solution')
    readonly_fields = ('completed_at', 'created_at', 'updated_at')
    actions = ['mark_complete']

    @admin.action(description=_('Mark selected follow-ups complete'))
    def mark_complete(self, request, queryset):
        for followup in queryset.filter(is_completed=False):
            FollowupService.mark_complete(followup.pk, actor=request.user)

    def save_model(self, request, obj, form, change):
        if not change:
            obj.created_by = request.user
        if obj.is_completed and obj.completed_at is None:
            obj.completed_at = timezone.now()
        elif not obj.is_completed:
            obj.completed_at = None
        super().save_model(request, obj, form, change)
