from rest_framework import status

from core_backend.exceptions import DomainError


class InvalidStatusTransitionError(DomainError):
    code = "ORDER_INVALID_STATUS"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Order status does not allow this change"


class OrderAlreadyAssignedError(DomainError):
    code = "ORDER_ALREADY_ASSIGNED"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Order has already been accepted by another driver"


class DriverInactiveError(DomainError):
    code = "DRIVER_INACTIVE"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Driver account is not active"


class PickupZoneMismatchError(DomainError):
    code = "PICKUP_ZONE_MISMATCH"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Order is outside the driver's pickup zone"


class InvalidDeliveryCodeError(DomainError):
    code = "INVALID_DELIVERY_CODE"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Delivery code does not match"


class DeliveryUnavailableError(DomainError):
    code = "DELIVERY_UNAVAILABLE"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Delivery address is outside the delivery area"
