from rest_framework.permissions import BasePermission


class IsAdminCaller(BasePermission):
    """Only admins (and superadmins) may plan assignments and issue numbers."""
    message = 'Only administrators can perform this action.'

    def has_permission(self, request, view):
        return bool(getattr(request.user, 'is_admin', False))
