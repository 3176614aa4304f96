"""
Role-based permissions shared by every app.
"""

from rest_framework import permissions


class IsAdmin(permissions.BasePermission):
    """
    Permission for write operations reserved to administrators.
    """
    message = "Unauthorized - Admin access required"

    def has_permission(self, request, view):
        return (
            request.user and
            request.user.is_authenticated and
            request.user.role == 'ADMIN'
        )


class IsAdminOrSubAdmin(permissions.BasePermission):
    """
    Permission for cross-farm read access.
    """
    message = "Unauthorized - Admin access required"

    def has_permission(self, request, view):
        return (
            request.user and
            request.user.is_authenticated and
            request.user.role in ['ADMIN', 'SUB_ADMIN']
        )


class IsFarmer(permissions.BasePermission):
    """
    Permission for farmer-only endpoints.
    """
    message = "Unauthorized - Farmer access required"

    def has_permission(self, request, view):
        return (
            request.user and
            request.user.is_authenticated and
            request.user.role == 'FARMER'
        )


class IsAdminOrFarmer(permissions.BasePermission):
    """
    Permission for operations both admins and farmers perform
    (farmers are further scoped to their own warehouse by the view).
    """
    message = "Unauthorized - Access denied"

    def has_permission(self, request, view):
        return (
            request.user and
            request.user.is_authenticated and
            request.user.role in ['ADMIN', 'FARMER']
        )


class IsAdminOrReadOnly(permissions.BasePermission):
    """
    Any authenticated user may read; only administrators may write.
    """
    message = "Unauthorized - Admin access required"

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return request.user.role == 'ADMIN'


class IsNotFarmer(permissions.BasePermission):
    """
    Permission for review actions (checking, deleting reports) that
    farmers may not perform on their own records.
    """
    message = "Unauthorized - Farmers cannot perform this action"

    def has_permission(self, request, view):
        return (
            request.user and
            request.user.is_authenticated and
            request.user.role != 'FARMER'
        )
