# shared/common/exceptions.py
"""
Custom Exception Classes and Exception Handler

Every error leaves the API as::

    {"success": false, "error": {"code", "message", "details", "request_id"}}
"""

import logging
import traceback
from typing import Dict, Any, Optional
from rest_framework import status
from rest_framework.views import exception_handler
from rest_framework.response import Response
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from django.conf import settings

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTIONS
# =============================================================================

class BaseServiceException(Exception):
    """
    Base class for service-layer errors.

    Carries a stable ``error_code`` callers can branch on, and the HTTP
    status the API layer maps it to.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'An unexpected error occurred.'
    error_code = 'INTERNAL_ERROR'

    def __init__(
        self,
        message: Optional[str] = None,
        error_code: Optional[str] = None,
        extra_data: Optional[Dict[str, Any]] = None
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.error_code = error_code or self.error_code
        self.extra_data = extra_data or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.error_code,
            'message': self.message,
            'details': self.extra_data,
        }


# =============================================================================
# EXCEPTION HANDLER
# =============================================================================

STATUS_CODES = {
    status.HTTP_400_BAD_REQUEST: 'VALIDATION_ERROR',
    status.HTTP_401_UNAUTHORIZED: 'UNAUTHORIZED',
    status.HTTP_403_FORBIDDEN: 'FORBIDDEN',
    status.HTTP_404_NOT_FOUND: 'NOT_FOUND',
    status.HTTP_405_METHOD_NOT_ALLOWED: 'METHOD_NOT_ALLOWED',
    status.HTTP_429_TOO_MANY_REQUESTS: 'RATE_LIMITED',
}


def _error_response(
    code: str,
    message: str,
    status_code: int,
    request_id: Optional[str],
    details: Any = None
) -> Response:
    error = {'code': code, 'message': message, 'request_id': request_id}
    if details is not None:
        error['details'] = details
    return Response({'success': False, 'error': error}, status=status_code)


def custom_exception_handler(exc, context) -> Optional[Response]:
    """
    DRF exception handler.

    Service errors render from their own ``to_dict``; DRF and Django errors
    are mapped onto the same envelope; anything else is logged and becomes
    a 500.
    """
    request = context.get('request')
    request_id = getattr(request, 'request_id', None) if request else None

    if isinstance(exc, BaseServiceException):
        payload = exc.to_dict()
        payload['request_id'] = request_id
        return Response({'success': False, 'error': payload}, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        details = response.data if isinstance(response.data, dict) and 'detail' not in response.data else None
        return _error_response(
            STATUS_CODES.get(response.status_code, 'ERROR'),
            get_error_message(exc, response),
            response.status_code,
            request_id,
            details,
        )

    if isinstance(exc, DjangoValidationError):
        details = exc.message_dict if hasattr(exc, 'message_dict') else {'detail': exc.messages}
        return _error_response('VALIDATION_ERROR', 'Validation error', status.HTTP_400_BAD_REQUEST, request_id, details)

    if isinstance(exc, Http404):
        return _error_response('NOT_FOUND', str(exc) or 'Resource not found', status.HTTP_404_NOT_FOUND, request_id)

    logger.exception(
        f"Unhandled exception: {exc}",
        extra={
            'request_id': request_id,
            'exception_type': type(exc).__name__,
            'traceback': traceback.format_exc(),
        }
    )

    message = str(exc) if settings.DEBUG else 'An unexpected error occurred. Please try again later.'
    return _error_response('INTERNAL_ERROR', message, status.HTTP_500_INTERNAL_SERVER_ERROR, request_id)


def get_error_message(exc, response: Response) -> str:
    """First human-readable message of a DRF error."""
    detail = getattr(exc, 'detail', None)
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list) and detail:
        return str(detail[0])
    if isinstance(detail, dict):
        return str(detail.get('detail', 'Validation error'))
    return str(response.data)
