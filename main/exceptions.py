"""
API error types and the exception handler that renders every error in one
envelope: ``{code, message, errors, status}``.
"""
import logging
from collections.abc import Mapping, Sequence

from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    AuthenticationFailed,
    MethodNotAllowed,
    NotAuthenticated,
    NotFound,
    ParseError,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR_MESSAGE = 'An unexpected error occurred.'


class Conflict(APIException):
    """Request clashes with existing state (duplicate key, record still referenced)."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The request conflicts with the current state of the resource.'
    default_code = 'conflict'


class InsufficientStock(ValidationError):
    """Raised when a stock decrement would take a product below zero."""
    default_detail = 'Insufficient stock.'
    default_code = 'insufficient_stock'


EXCEPTION_CODE_MAP = {
    InsufficientStock: 'insufficient_stock',
    ValidationError: 'validation_error',
    NotAuthenticated: 'not_authenticated',
    AuthenticationFailed: 'authentication_failed',
    PermissionDenied: 'permission_denied',
    NotFound: 'not_found',
    MethodNotAllowed: 'method_not_allowed',
    ParseError: 'parse_error',
    Conflict: 'conflict',
}


def build_error_envelope(*, code, message, errors, status_code):
    return {
        'code': code,
        'message': message,
        'errors': errors,
        'status': status_code,
    }


def error_response(*, code, message, errors=None, status_code=status.HTTP_400_BAD_REQUEST):
    return Response(
        build_error_envelope(code=code, message=message, errors=errors, status_code=status_code),
        status=status_code,
    )


def custom_exception_handler(exc, context):
    response = drf_exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        view_name = view.__class__.__name__ if view else 'unknown'
        logger.exception('Unhandled API exception in %s', view_name)
        return error_response(
            code='internal_server_error',
            message=GENERIC_SERVER_ERROR_MESSAGE,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response.data = build_error_envelope(
        code=_build_code(exc),
        message=_build_message(exc, response.data),
        errors=_normalize_errors(response.data),
        status_code=response.status_code,
    )
    return response


def _build_code(exc):
    for exception_type, stable_code in EXCEPTION_CODE_MAP.items():
        if isinstance(exc, exception_type):
            return stable_code
    if isinstance(exc, APIException):
        return str(getattr(exc, 'default_code', 'api_error'))
    return 'internal_server_error'


def _build_message(exc, data):
    if isinstance(exc, InsufficientStock):
        detail = exc.detail
        if isinstance(detail, Sequence) and not isinstance(detail, str) and detail:
            return str(detail[0])
        return str(detail)

    if isinstance(exc, ValidationError):
        return 'Validation failed.'

    detail = None
    if isinstance(data, Mapping):
        detail = data.get('detail')
    elif isinstance(data, str):
        detail = data

    if detail:
        return str(detail)
    if isinstance(exc, APIException):
        return str(getattr(exc, 'detail', 'Request failed.'))
    return GENERIC_SERVER_ERROR_MESSAGE


def _normalize_errors(data):
    if isinstance(data, Mapping):
        if set(data.keys()) == {'detail'}:
            return None
        return data
    if isinstance(data, Sequence) and not isinstance(data, str):
        return data
    return None
