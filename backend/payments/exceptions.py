from rest_framework import status

from core_backend.exceptions import DomainError


class PaymentProviderError(DomainError):
    code = "PAYMENT_PROVIDER_ERROR"
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Payment provider request failed"


class OrderAlreadyPaidError(DomainError):
    code = "ORDER_ALREADY_PAID"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Order has already been paid"
