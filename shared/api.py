"""
HTTP mapping of engine outcomes

Views never decide status codes themselves: each ErrorKind maps to
exactly one code here.
"""

from __future__ import annotations

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.domain.base import ErrorKind

ERROR_STATUS_CODES = {
    ErrorKind.INVALID_RANGE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.START_TOO_FAR_IN_PAST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_TRANSITION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.ROOM_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_STATUS: status.HTTP_409_CONFLICT,
    ErrorKind.GATEWAY_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.STORAGE_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(kind: ErrorKind, message: str = "") -> Response:
    return Response(
        {"detail": message or kind.value, "code": kind.value},
        status=ERROR_STATUS_CODES[kind],
    )
