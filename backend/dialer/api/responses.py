"""Shared response helpers for the API views."""
from rest_framework.response import Response

from dialer.exceptions import DialerError


def error_response(exc: DialerError) -> Response:
    """Render an engine error with the HTTP status its class maps to."""
    return Response({"detail": exc.detail, "code": exc.code}, status=exc.status_code)
