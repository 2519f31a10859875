# core/results.py
"""
Result values returned by the service layer.

Services never raise for expected failures; they return
``{"success": False, "error": <message>, "code": <kind>}`` and the caller
(view, API, websocket consumer) decides how to surface it.
"""
from rest_framework import status


class ErrorCode:
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    VALIDATION = "validation_error"
    INVALID_OPERATION = "invalid_operation"


HTTP_STATUS = {
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_OPERATION: status.HTTP_400_BAD_REQUEST,
}


def failure(code, message):
    return {"success": False, "error": message, "code": code}


def http_status_for(result):
    return HTTP_STATUS.get(result.get("code"), status.HTTP_400_BAD_REQUEST)


def is_authenticated(user):
    """True for a real, logged-in identity (not None, not AnonymousUser)."""
    return bool(user is not None and getattr(user, "is_authenticated", False))


def parse_id(value):
    """Integer primary key from a path or query value, or None when it is not one."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    # ASCII digits only
    if not text.isascii():
        return None
    try:
        return int(text)
    except ValueError:
        return None
