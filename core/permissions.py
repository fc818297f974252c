from rest_framework import permissions


class IsAdmin(permissions.BasePermission):
    """
    Allows access only to active foundation admins.
    """
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_active)


class IsAdminOrReadOnly(permissions.BasePermission):
    """
    Public read access for the transparency pages, writes for admins only.
    """
    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_authenticated and request.user.is_active)


class IsSelfOrSuperAdmin(permissions.BasePermission):
    message = "You can only modify your own account."

    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        if getattr(user, 'is_super_admin', False):
            return True
        return obj.pk == user.pk
