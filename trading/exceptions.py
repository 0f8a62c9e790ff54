import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class InsufficientStock(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Insufficient stock."
    default_code = "insufficient_stock"

    def __init__(self, available: int, requested: int | None = None):
        self.available = int(available)
        self.requested = requested
        super().__init__(f"Insufficient stock. Available: {self.available}kg", self.default_code)


def _flatten(detail, prefix=""):
    """ValidationError detail -> [{"field", "message"}, ...]"""
    if isinstance(detail, dict):
        out = []
        for key, value in detail.items():
            name = key if key != "non_field_errors" else ""
            out.extend(_flatten(value, f"{prefix}.{name}" if prefix and name else (name or prefix)))
        return out
    if isinstance(detail, list):
        out = []
        for item in detail:
            out.extend(_flatten(item, prefix))
        return out
    return [{"field": prefix or None, "message": str(detail)}]


def api_exception_handler(exc, context):
    response = drf_exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.error(
            "unhandled error in %s", view.__class__.__name__ if view else "unknown view",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        return Response(
            {"message": "Server error", "code": "server_error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, exceptions.ValidationError):
        response.data = {
            "message": "Validation failed",
            "code": "invalid",
            "errors": _flatten(exc.detail),
        }
        return response

    detail = getattr(exc, "detail", None)
    codes = exc.get_codes() if isinstance(exc, exceptions.APIException) else None
    if isinstance(detail, dict):
        # simplejwt reports token problems as {"detail", "code", "messages"}
        codes = codes.get("code", codes) if isinstance(codes, dict) else codes
        detail = detail.get("detail", detail)
    payload = {
        "message": str(detail) if detail is not None else str(exc),
        "code": codes if isinstance(codes, str) else "error",
    }
    if isinstance(exc, InsufficientStock):
        payload["available"] = exc.available
        if exc.requested is not None:
            payload["requested"] = exc.requested
    response.data = payload
    return response
