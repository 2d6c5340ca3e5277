"""Uniform JSON envelope for API responses.

Every endpoint answers with ``{"message", "error", "success", "data"?}``.
Successful views build it with :func:`envelope`; failures are translated in
one place by :func:`api_exception_handler`, registered as DRF's
``EXCEPTION_HANDLER``.
"""

import logging

from rest_framework import serializers, status
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback
from users.errors import AccountError

logger = logging.getLogger("storefront.api")


class EnvelopeSerializer(serializers.Serializer):
    """Schema of the response envelope (used for OpenAPI docs)."""

    message = serializers.CharField()
    error = serializers.BooleanField()
    success = serializers.BooleanField()
    data = serializers.JSONField(required=False)


def envelope(message: str, data=None, *, error: bool = False, status_code: int = status.HTTP_200_OK) -> Response:
    """Return a Response wrapping ``data`` in the standard envelope.

    ``data`` is omitted from the body when None.
    """
    body = {"message": message, "error": error, "success": not error}
    if data is not None:
        body["data"] = data
    return Response(body, status=status_code)


def _first_message(detail) -> str:
    """Flatten a DRF error detail into a single human readable string."""
    if isinstance(detail, dict):
        if not detail:
            return "Invalid request"
        key, value = next(iter(detail.items()))
        text = _first_message(value)
        if key in ("non_field_errors", "detail"):
            return text
        return f"{key}: {text}"
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else "Invalid request"
    return str(detail)


def api_exception_handler(exc, context):
    """Translate any exception raised in a view into an envelope response.

    - Account errors and validation errors become 400s.
    - DRF API exceptions (authentication, permissions, 404, 405) keep their status.
    - Everything else is an unexpected failure: 500 with the raw message.
    """
    if isinstance(exc, AccountError):
        set_rollback()
        return envelope(exc.message, error=True, status_code=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        response.data = {
            "message": _first_message(response.data),
            "error": True,
            "success": False,
        }
        return response

    view = context.get("view")
    logger.exception(
        "api.unhandled_error",
        extra={"event": "api.unhandled_error", "view": type(view).__name__ if view else None},
    )
    set_rollback()
    return envelope(str(exc) or exc.__class__.__name__, error=True, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
