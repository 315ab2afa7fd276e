from rest_framework import status

from core_backend.exceptions import DomainError


class InsufficientPointsError(DomainError):
    code = "INSUFFICIENT_POINTS"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Not enough loyalty points"
