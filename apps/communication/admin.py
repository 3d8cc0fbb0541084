from django.contrib import admin
from django.utils.translation import gettext_lazy as _
from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    """
    Admin interface for Notification model.
    """
    list_display = ('title', 'recipient', 'notification_type', 'is_read', 'email_sent', 'push_sent', 'created_at')
    list_filter = ('notification_type', 'is_read', 'email_sent', 'created_at')
    search_fields = ('title', 'message', 'recipient__email')
    readonly_fields = ('created_at', 'updated_at', 'read_at')

    fieldsets = (
        (_('Notification'), {
            'fields': ('recipient', 'notification_type', 'title', 'message')
        }),
        (_('Delivery'), {
            'fields': ('is_read', 'read_at', 'email_sent', 'push_sent'),
        }),
        (_('System Metadata'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
