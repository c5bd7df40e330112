# exceptions.py
from rest_framework import exceptions, status
from rest_framework.views import exception_handler
from rest_framework.response import Response
from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError
import logging
from django.conf import settings

logger = logging.getLogger(__name__)


# =============== ERROR TAXONOMY ===============

class InvalidCredentials(exceptions.AuthenticationFailed):
    default_detail = 'Invalid credentials'
    default_code = 'invalid_credentials'


class RoleMismatch(InvalidCredentials):
    """
    Raised when the account exists but does not hold the expected role.
    Callers see exactly what they would see for a wrong password.
    """


class Forbidden(exceptions.PermissionDenied):
    default_detail = 'You do not have access to this resource'
    default_code = 'forbidden'


class NotFound(exceptions.NotFound):
    """Entity absent, or present but owned by another tenant."""
    default_detail = 'Resource not found'
    default_code = 'not_found'


class InvalidRequest(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request'
    default_code = 'invalid_request'


class InvalidOrder(InvalidRequest):
    default_detail = 'Invalid order'
    default_code = 'invalid_order'


class InsufficientStock(InvalidOrder):
    default_detail = 'Insufficient stock'
    default_code = 'insufficient_stock'


class InvalidStockChange(InvalidRequest):
    default_detail = 'A valid product and quantity are required'
    default_code = 'invalid_stock_change'


class StoreError(exceptions.APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'The data store could not complete the operation'
    default_code = 'store_error'


def _error_context(context):
    view = context.get('view') if context else None
    request = context.get('request') if context else None
    user = getattr(request, 'user', None)
    return {
        'view': view.__class__.__name__ if view is not None else None,
        'user_id': getattr(user, 'id', None),
        'kwargs': getattr(view, 'kwargs', None),
    }


def custom_exception_handler(exc, context):
    """
    Custom exception handler for the restaurant API
    """
    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    # Add custom handling for specific exceptions
    if response is not None:
        custom_response_data = {
            'error': True,
            'message': 'An error occurred',
            'code': getattr(exc, 'default_code', None),
            'details': response.data,
            'status_code': response.status_code
        }

        # Handle specific error types
        if isinstance(exc, StoreError):
            logger.error(f"Store error: {exc} {_error_context(context)}")
            custom_response_data['message'] = 'Internal server error'
            if not settings.DEBUG:
                custom_response_data['details'] = {}
        elif response.status_code == 400:
            custom_response_data['message'] = 'Validation error'
        elif response.status_code == 401:
            custom_response_data['message'] = 'Authentication required'
        elif response.status_code == 403:
            custom_response_data['message'] = 'Permission denied'
        elif response.status_code == 404:
            custom_response_data['message'] = 'Resource not found'
        elif response.status_code == 500:
            custom_response_data['message'] = 'Internal server error'

        response.data = custom_response_data

    # Handle Django ValidationError
    elif isinstance(exc, ValidationError):
        logger.error(f"Validation Error: {exc}")
        response = Response({
            'error': True,
            'message': 'Validation error',
            'code': 'invalid',
            'details': {'non_field_errors': exc.messages},
            'status_code': 400
        }, status=status.HTTP_400_BAD_REQUEST)

    # Handle Django IntegrityError
    elif isinstance(exc, IntegrityError):
        logger.error(f"Integrity Error: {exc} {_error_context(context)}")
        response = Response({
            'error': True,
            'message': 'Database integrity error',
            'code': 'integrity_error',
            'details': {'error': 'This operation violates database constraints'},
            'status_code': 400
        }, status=status.HTTP_400_BAD_REQUEST)

    # Any other backing-store failure
    elif isinstance(exc, DatabaseError):
        logger.exception(f"Store error: {exc} {_error_context(context)}")
        response = Response({
            'error': True,
            'message': 'Internal server error',
            'code': StoreError.default_code,
            'details': {'error': str(exc)} if settings.DEBUG else {},
            'status_code': 500
        }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    # Handle unexpected errors
    else:
        logger.exception(f"Unexpected Error: {exc} {_error_context(context)}")
        response = Response({
            'error': True,
            'message': 'An unexpected error occurred',
            'code': 'internal_error',
            'details': {'error': str(exc)} if settings.DEBUG else {},
            'status_code': 500
        }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return response
