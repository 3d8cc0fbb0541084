# apps/core/permissions.py
"""
Role checks for the API. The roster supplies the flags; views only ask.
"""

from rest_framework import permissions


def is_admin(user):
    return bool(user and user.is_authenticated and (user.is_superuser or getattr(user, 'is_admin', False)))


def is_staff_member(user):
    """Admins and teachers."""
    return is_admin(user) or bool(user and user.is_authenticated and getattr(user, 'is_teacher', False))


class IsAdmin(permissions.BasePermission):
    """
    Allow access to administrators only.
    """
    message = 'Administrator privileges are required.'

    def has_permission(self, request, view):
        return is_admin(request.user)


class IsAdminOrReadOnly(permissions.BasePermission):
    """
    Authenticated users may read; only administrators may write.
    """

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_admin(request.user)


class IsStaffMember(permissions.BasePermission):
    """
    Allow access to teachers and administrators.
    """
    message = 'Teacher or administrator privileges are required.'

    def has_permission(self, request, view):
        return is_staff_member(request.user)
