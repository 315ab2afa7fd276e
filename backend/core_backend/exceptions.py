"""
Domain error taxonomy and the API exception handler.

Services raise DomainError subclasses; views never catch them. The DRF
exception handler below renders every failure with the same envelope:

    {"error": {"code": "...", "message": "...", "details": {...}}}
"""
import logging

from django.db import DatabaseError
from django.http import Http404
from django_ratelimit.exceptions import Ratelimited
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Base class for every error the domain layer raises on purpose."""

    code = "INTERNAL_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "An unexpected error occurred"

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self):
        payload = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationFailedError(DomainError):
    code = "VALIDATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request data"


class PermissionDeniedError(DomainError):
    code = "AUTH_UNAUTHORIZED"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action"


class ResourceNotFoundError(DomainError):
    code = "RESOURCE_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class DatabaseOperationError(DomainError):
    code = "DATABASE_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "A database error occurred"


def _error_response(code, message, status_code, details=None):
    body = {"code": code, "message": message}
    if details:
        body["details"] = details
    return Response({"error": body}, status=status_code)


def api_exception_handler(exc, context):
    """
    DRF exception handler that maps domain and framework errors onto the
    error taxonomy.
    """
    request = context.get("request")
    path = getattr(request, "path", "")

    if isinstance(exc, DomainError):
        if exc.status_code >= 500:
            logger.error(f"{exc.code} on {path}: {exc.message}", exc_info=exc)
        else:
            logger.info(f"{exc.code} on {path}: {exc.message}")
        return Response({"error": exc.to_dict()}, status=exc.status_code)

    if isinstance(exc, drf_exceptions.ValidationError):
        return _error_response(
            "VALIDATION_ERROR", "Invalid request data", status.HTTP_400_BAD_REQUEST, exc.detail
        )

    if isinstance(exc, (drf_exceptions.NotAuthenticated, drf_exceptions.AuthenticationFailed)):
        response = exception_handler(exc, context)
        return _error_response(
            "AUTH_UNAUTHORIZED",
            str(exc.detail),
            response.status_code if response is not None else status.HTTP_401_UNAUTHORIZED,
        )

    if isinstance(exc, Ratelimited):
        return _error_response("RATE_LIMITED", "Too many requests", status.HTTP_429_TOO_MANY_REQUESTS)

    if isinstance(exc, drf_exceptions.PermissionDenied):
        return _error_response("AUTH_UNAUTHORIZED", str(exc.detail), status.HTTP_403_FORBIDDEN)

    if isinstance(exc, (Http404, drf_exceptions.NotFound)):
        return _error_response("RESOURCE_NOT_FOUND", "Resource not found", status.HTTP_404_NOT_FOUND)

    # Throttled, MethodNotAllowed, ParseError and friends keep DRF's status code.
    response = exception_handler(exc, context)
    if response is not None:
        code = getattr(exc, "default_code", "error")
        detail = getattr(exc, "detail", str(exc))
        return _error_response(str(code).upper(), str(detail), response.status_code)

    if isinstance(exc, DatabaseError):
        logger.error(f"Database error on {path}: {exc}", exc_info=exc)
        error = DatabaseOperationError()
        return Response({"error": error.to_dict()}, status=error.status_code)

    logger.error(f"Unhandled error on {path}: {exc}", exc_info=exc)
    return _error_response(
        "INTERNAL_ERROR", "An unexpected error occurred", status.HTTP_500_INTERNAL_SERVER_ERROR
    )
