"""Orders API permissions.

Object- and request-level permission classes used by the orders endpoints:
customers reach their own orders, staff reach every order and alone may move
an order through its fulfilment statuses.
"""

from rest_framework.permissions import BasePermission


def _is_staff(user) -> bool:
    return bool(user and user.is_authenticated and user.is_staff)


class IsOrderOwnerOrStaff(BasePermission):
    """Allows access to an Order only for its customer or staff users."""

    message = "You do not have access to this order."

    def has_object_permission(self, request, view, obj):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return _is_staff(user) or obj.user_id == user.id


class IsAdminStaff(BasePermission):
    """Allows access only to authenticated staff (admin) users."""

    message = "Only admin staff users may change order status."

    def has_permission(self, request, view):
        return _is_staff(request.user)
