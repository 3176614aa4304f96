"""
Farm scoping helpers shared by every app whose records hang off a warehouse.

Admins and sub-admins see every farm. A farmer only sees the farm assigned
to them and the warehouse(s) of that farm.
"""

from django.core.exceptions import PermissionDenied

from .models import Farm, Warehouse


def get_user_farm(user):
    """Return the farm assigned to ``user`` or None."""
    if not user or not user.is_authenticated:
        return None
    return Farm.objects.filter(user=user).first()


def get_user_warehouses(user):
    """Warehouses visible to ``user``."""
    if user.role in ('ADMIN', 'SUB_ADMIN'):
        return Warehouse.objects.select_related('farm')
    return Warehouse.objects.select_related('farm').filter(farm__user=user)


def user_owns_warehouse(user, warehouse) -> bool:
    return warehouse.farm.user_id == user.pk


def check_warehouse_access(user, warehouse, message=None):
    """
    Raise PermissionDenied unless ``user`` may write to ``warehouse``.

    Admins may write anywhere; farmers only to their own farm's warehouse.
    """
    if user.role == 'ADMIN':
        return
    if user.role == 'FARMER' and user_owns_warehouse(user, warehouse):
        return
    raise PermissionDenied(message or 'Unauthorized - Warehouse does not belong to your farm')


class FarmScopedMixin:
    """
    Mixin that filters querysets down to the requesting user's warehouses.

    Views set ``warehouse_lookup`` to the ORM path from their model to
    Warehouse (``'warehouse'`` by default).
    """
    warehouse_lookup = 'warehouse'

    def get_queryset(self):
        queryset = super().get_queryset()
        user = self.request.user
        if user.role in ('ADMIN', 'SUB_ADMIN'):
            return queryset
        return queryset.filter(**{f'{self.warehouse_lookup}__farm__user': user})


def check_warehouse_read_access(user, warehouse, message=None):
    """Raise PermissionDenied unless ``user`` may read records of ``warehouse``."""
    if user.role in ('ADMIN', 'SUB_ADMIN'):
        return
    if warehouse is not None and user_owns_warehouse(user, warehouse):
        return
    raise PermissionDenied(message or 'Unauthorized - Warehouse does not belong to your farm')
