from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken

from .models import RevokedToken


class RestaurantJWTAuthentication(JWTAuthentication):
    """
    Bearer token authentication.

    On top of simplejwt's signature and expiry checks, a token that was
    revoked at logout is rejected, and the user row is always re-read so a
    deleted account's still-valid token stops working.
    """

    def get_validated_token(self, raw_token):
        validated_token = super().get_validated_token(raw_token)
        if settings.RESTAURANTPRO['TOKEN_REVOCATION'] and RevokedToken.is_revoked(raw_token):
            raise InvalidToken({
                'detail': 'Token has been revoked',
                'code': 'token_revoked',
            })
        return validated_token
