# shared/common/permissions.py
"""
Custom Permission Classes
"""

import hmac
import logging

from django.conf import settings
from rest_framework import permissions
from rest_framework.request import Request
from rest_framework.views import APIView

logger = logging.getLogger(__name__)


def has_valid_api_key(request: Request) -> bool:
    """
    Check the ``X-API-Key`` header against ``settings.ADMIN_API_KEY``.

    An unset key means development mode and every request passes.
    """
    expected = getattr(settings, 'ADMIN_API_KEY', '') or ''
    if not expected:
        logger.warning("ADMIN_API_KEY is not configured, admin endpoints are open")
        return True

    provided = request.headers.get('X-API-Key') or request.query_params.get('api_key')
    if not provided:
        return False

    if not hmac.compare_digest(str(provided), str(expected)):
        logger.warning(
            "Rejected request with invalid API key",
            extra={'key_prefix': str(provided)[:8], 'path': request.path}
        )
        return False

    return True


class HasAdminAPIKey(permissions.BasePermission):
    """Allow only operator requests carrying the admin API key"""

    message = 'A valid admin API key is required.'

    def has_permission(self, request: Request, view: APIView) -> bool:
        return has_valid_api_key(request)
