from rest_framework import permissions


class RolePermission(permissions.IsAuthenticated):
    """Authenticated user whose role is in `roles`."""
    roles = ()
    message = 'Access denied. Insufficient permissions.'

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        return request.user.role in self.roles


class IsAdmin(RolePermission):
    roles = ('admin',)
    message = 'Only admins can perform this action'


class IsDonor(RolePermission):
    roles = ('donor',)
    message = 'Only donors can perform this action'


class IsRecipient(RolePermission):
    roles = ('recipient',)
    message = 'Only recipients can perform this action'
