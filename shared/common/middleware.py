# shared/common/middleware.py
"""
Request Tracing Middleware
"""

import re
import time
import uuid
import logging
from typing import Callable

from django.conf import settings
from django.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

# Incoming IDs are echoed into logs and headers; keep them short and plain
REQUEST_ID_PATTERN = re.compile(r'^[A-Za-z0-9._:-]{1,64}$')

DEFAULT_QUIET_PATHS = ('/health/',)


class RequestIDMiddleware:
    """
    Tag every request with an ID for tracing.

    A well-formed ``X-Request-ID`` from the caller is kept; anything else is
    replaced with a fresh UUID.
    """

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        incoming = request.headers.get('X-Request-ID', '')
        request.request_id = incoming if REQUEST_ID_PATTERN.match(incoming) else str(uuid.uuid4())

        response = self.get_response(request)
        response['X-Request-ID'] = request.request_id
        return response


class LoggingMiddleware:
    """
    Log one line when a request starts and one when it completes.

    Paths listed in ``settings.LOGGING_QUIET_PATHS`` (health probes by
    default) are passed through silently.
    """

    def __init__(self, get_response: Callable):
        self.get_response = get_response
        self.quiet_paths = tuple(getattr(settings, 'LOGGING_QUIET_PATHS', DEFAULT_QUIET_PATHS))

    def __call__(self, request: HttpRequest) -> HttpResponse:
        if request.path.startswith(self.quiet_paths):
            return self.get_response(request)

        started = time.monotonic()
        context = {
            'request_id': getattr(request, 'request_id', None),
            'method': request.method,
            'path': request.path,
            'operator': 'X-API-Key' in request.headers,
        }

        logger.info(
            f"Request started: {request.method} {request.path}",
            extra={**context, 'ip_address': self.get_client_ip(request)}
        )

        response = self.get_response(request)
        duration_ms = (time.monotonic() - started) * 1000

        log_method = logger.warning if response.status_code >= 400 else logger.info
        log_method(
            f"Request completed: {request.method} {request.path} - {response.status_code}",
            extra={**context, 'status_code': response.status_code, 'duration_ms': round(duration_ms, 2)}
        )

        response['X-Response-Time'] = f"{duration_ms:.2f}ms"
        return response

    def get_client_ip(self, request: HttpRequest) -> str:
        forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
        if forwarded:
            return forwarded.split(',')[0].strip()
        return request.META.get('REMOTE_ADDR', '')
