"""
Auth service: credential checks, token issue/verify/revoke and role predicates.

Tokens are stateless simplejwt access tokens carrying the user id, username,
role and restaurant id. The only server-side state is the revocation list
written at logout.
"""
import logging
from datetime import datetime, timezone as dt_timezone

from django.contrib.auth import authenticate
from django.db import transaction
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.tokens import AccessToken

from .authentication import RestaurantJWTAuthentication
from .exceptions import Forbidden, InvalidCredentials, InvalidRequest, NotFound, RoleMismatch
from .models import Restaurant, RevokedToken, User

logger = logging.getLogger(__name__)

# Roles implied by each role: an owner may act wherever a manager may.
ROLE_HIERARCHY = {
    User.OWNER: {User.OWNER, User.MANAGER},
    User.MANAGER: {User.MANAGER},
}


def issue_token(user):
    token = AccessToken.for_user(user)
    # simplejwt >= 5.5 stores the user claim as a string; keep it an int
    token['id'] = user.id
    token['username'] = user.username
    token['role'] = user.role
    token['restaurant_id'] = user.restaurant_id
    return str(token)


def login(username, password, expected_role=None):
    """
    Return ``(user, token)`` for a valid username/password pair.

    Unknown user, wrong password and role mismatch all surface as the same
    InvalidCredentials error.
    """
    user = authenticate(username=username, password=password)
    if user is None:
        logger.warning(f"Failed login for username={username!r}")
        raise InvalidCredentials()

    if expected_role and user.role != expected_role:
        logger.warning(
            f"Role mismatch on login: user_id={user.id} role={user.role} expected={expected_role}"
        )
        raise RoleMismatch()

    return user, issue_token(user)


def verify(raw_token):
    """Return the token's user, or None if the token is unusable for any reason."""
    backend = RestaurantJWTAuthentication()
    try:
        validated_token = backend.get_validated_token(raw_token)
        return backend.get_user(validated_token)
    except (InvalidToken, AuthenticationFailed):
        return None


def revoke(raw_token, user):
    """Put a token on the revocation list until its own expiry."""
    try:
        token = AccessToken(raw_token)
    except TokenError:
        return None

    expires_at = datetime.fromtimestamp(token['exp'], tz=dt_timezone.utc)
    RevokedToken.purge_expired()
    revoked, _ = RevokedToken.objects.get_or_create(
        token_hash=RevokedToken.hash_token(raw_token),
        defaults={'user': user, 'expires_at': expires_at},
    )
    logger.info(f"Token revoked for user_id={user.id}")
    return revoked


def has_role(user, allowed_roles):
    if user is None or not getattr(user, 'is_authenticated', False):
        return False
    implied = ROLE_HIERARCHY.get(getattr(user, 'role', None), set())
    return any(role in implied for role in allowed_roles)


def require_role(user, allowed_roles):
    if not has_role(user, allowed_roles):
        raise Forbidden()


def get_accessible_restaurant(user, restaurant_id):
    """
    Resolve a restaurant the caller may work with.

    A manager addressing another restaurant is Forbidden; an owner
    addressing a restaurant they do not own gets NotFound, same as a
    restaurant that does not exist.
    """
    require_role(user, [User.MANAGER])
    try:
        restaurant_id = int(restaurant_id)
    except (TypeError, ValueError):
        raise NotFound()

    if user.role == User.MANAGER:
        if user.restaurant_id != restaurant_id:
            raise Forbidden('Access to this restaurant is not allowed')
        lookup = {'id': restaurant_id}
    else:
        lookup = {'id': restaurant_id, 'owner': user}

    try:
        return Restaurant.objects.get(**lookup)
    except Restaurant.DoesNotExist:
        raise NotFound('Restaurant not found')


def accessible_restaurants(user):
    if user.role == User.OWNER:
        return Restaurant.objects.filter(owner=user)
    return Restaurant.objects.filter(id=user.restaurant_id)


@transaction.atomic
def create_manager(owner, username, password, restaurant_id):
    require_role(owner, [User.OWNER])
    try:
        restaurant = Restaurant.objects.get(id=restaurant_id, owner=owner)
    except (Restaurant.DoesNotExist, ValueError, TypeError):
        raise NotFound('Restaurant not found')

    if User.objects.filter(username=username).exists():
        raise InvalidRequest('This username is already taken')

    manager = User.objects.create_manager(
        username=username, password=password, restaurant=restaurant, created_by=owner
    )
    logger.info(
        f"Manager created: manager_id={manager.id} restaurant_id={restaurant.id} owner_id={owner.id}"
    )
    return manager


def delete_manager(owner, manager_id):
    require_role(owner, [User.OWNER])
    deleted, _ = User.objects.filter(
        id=manager_id, role=User.MANAGER, created_by=owner
    ).delete()
    if not deleted:
        raise NotFound('Manager not found')
    logger.info(f"Manager removed: manager_id={manager_id} owner_id={owner.id}")


def change_password(user, current_password, new_password):
    if not user.check_password(current_password):
        raise InvalidRequest('Current password is incorrect')
    user.set_password(new_password)
    user.save(update_fields=['password'])
    logger.info(f"Password changed for user_id={user.id}")
