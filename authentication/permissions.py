from rest_framework import permissions

from .models import User
from .services import get_accessible_restaurant, has_role


class IsOwner(permissions.BasePermission):
    """
    Permission to only allow restaurant owners
    """
    message = 'Only an owner can perform this action'

    def has_permission(self, request, view):
        return has_role(request.user, [User.OWNER])


class IsManagerOrOwner(permissions.BasePermission):
    """
    Permission for any authenticated staff account. Owners are allowed
    wherever managers are.
    """
    message = 'A manager or owner account is required'

    def has_permission(self, request, view):
        return has_role(request.user, [User.MANAGER])


class HasRestaurantAccess(IsManagerOrOwner):
    """
    Permission to check the caller may work with the restaurant named in the
    URL (``restaurant_id`` kwarg). The resolved restaurant is attached to
    the request for later use.
    """

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False

        restaurant_id = view.kwargs.get('restaurant_id')
        if restaurant_id is None:
            return True

        # Raises Forbidden / NotFound so the caller gets the right status
        request.restaurant = get_accessible_restaurant(request.user, restaurant_id)
        return True
