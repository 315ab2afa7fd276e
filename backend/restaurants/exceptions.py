from rest_framework import status

from core_backend.exceptions import DomainError


class RestaurantClosedError(DomainError):
    code = "RESTAURANT_CLOSED"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Restaurant is not accepting orders"
