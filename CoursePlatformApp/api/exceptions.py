"""DRF exception handler rendering every error as ``{"error": {"code", "message", "details"?}}``."""

import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.db import IntegrityError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from CoursePlatformApp.core.exceptions import AuthorizationError, ConflictError, DomainError, NotFoundError

logger = logging.getLogger(__name__)

# DRF's own exceptions mapped onto the domain error codes.
DRF_CODES: dict[type[exceptions.APIException], str] = {
    exceptions.ValidationError: "validation_error",
    exceptions.ParseError: "validation_error",
    exceptions.UnsupportedMediaType: "validation_error",
    exceptions.NotAuthenticated: "not_authenticated",
    exceptions.AuthenticationFailed: "not_authenticated",
    exceptions.PermissionDenied: "authorization_error",
    exceptions.NotFound: "not_found",
    exceptions.MethodNotAllowed: "method_not_allowed",
    exceptions.Throttled: "throttled",
}


def _translate(exc: Exception) -> Exception:
    if isinstance(exc, IntegrityError):
        logger.warning("Integrity error mapped to conflict: %s", exc)
        return ConflictError("The write conflicted with a concurrent change; retry.")
    if isinstance(exc, Http404):
        return NotFoundError()
    if isinstance(exc, DjangoPermissionDenied):
        return AuthorizationError()
    return exc


def _code_for(exc: exceptions.APIException) -> str:
    if isinstance(exc, DomainError):
        return exc.default_code
    for cls in type(exc).__mro__:
        if cls in DRF_CODES:
            return DRF_CODES[cls]
    return exc.default_code


def _message_and_details(exc: exceptions.APIException) -> tuple[str, object | None]:
    detail = exc.detail
    if isinstance(detail, (dict, list)):
        return "Invalid input." if isinstance(exc, exceptions.ValidationError) else str(exc.default_detail), detail
    return str(detail), None


def api_exception_handler(exc: Exception, context: dict) -> Response | None:
    """Render domain and DRF errors in the uniform envelope; log unexpected ones."""
    exc = _translate(exc)
    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.exception("Unhandled error in %s", type(view).__name__ if view else "API view", exc_info=exc)
        return Response(
            {"error": {"code": "internal_error", "message": "Internal server error."}},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    message, details = _message_and_details(exc)
    body = {"code": _code_for(exc), "message": message}
    if details is not None:
        body["details"] = details
    if isinstance(exc, DomainError):
        logger.info("%s: %s", body["code"], message)
    response.data = {"error": body}
    return response
