# apps/users/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Custom admin interface for User model.
    """
    list_display = ('email', 'full_name', 'year', 'is_student', 'is_teacher', 'is_admin', 'is_active')
    list_filter = ('is_student', 'is_teacher', 'is_admin', 'is_active', 'year')
    search_fields = ('email', 'first_name', 'last_name', 'phone', 'school')
    ordering = ('first_name', 'last_name')
    readonly_fields = ('last_login', 'date_joined')

    fieldsets = (
        (None, {
            'fields': ('email', 'password')
        }),
        (_('Personal Info'), {
            'fields': ('first_name', 'last_name', 'phone')
        }),
        (_('Roles'), {
            'fields': ('is_student', 'is_teacher', 'is_admin')
        }),
        (_('Student Details'), {
            'fields': ('school', 'year', 'notes'),
            'classes': ('collapse',)
        }),
        (_('Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',)
        }),
        (_('Important Dates'), {
            'fields': ('last_login', 'date_joined'),
            'classes': ('collapse',)
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'password1', 'password2', 'first_name', 'last_name', 'is_student', 'year'),
        }),
    )

    actions = ['deactivate_users']

    def full_name(self, obj):
        return obj.full_name
    full_name.short_description = _('Full Name')

    def deactivate_users(self, request, queryset):
        """Admin action to deactivate selected users."""
        updated = queryset.update(is_active=False)
        self.message_user(request, _('%(count)d users deactivated.') % {'count': updated})
    deactivate_users.short_description = _('Deactivate selected users')
