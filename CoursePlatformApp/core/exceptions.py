"""Domain error taxonomy.

Every error is a DRF ``APIException`` so services can raise it directly and the
API layer renders it with a stable ``code`` (see ``api.exceptions``).
"""

from rest_framework import status
from rest_framework.exceptions import APIException


class DomainError(APIException):
    """Base class for errors raised by the domain services."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be processed."
    default_code = "domain_error"


class ValidationError(DomainError):
    """Malformed input (score out of range, missing material payload, ...)."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "validation_error"


class AuthorizationError(DomainError):
    """Actor role or ownership does not permit the operation."""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not allowed to perform this action."
    default_code = "authorization_error"


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class ConflictError(DomainError):
    """Concurrent modification detected, or state forbids the write."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The resource was modified concurrently."
    default_code = "conflict"


class InvalidTransitionError(DomainError):
    """Lifecycle event has no edge from the course's current status."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Transition is not allowed from the current status."
    default_code = "invalid_transition"
