from rest_framework import status

from core_backend.exceptions import DomainError


class VoucherError(DomainError):
    """A voucher could not be applied to the order."""

    code = "VOUCHER_INVALID"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Voucher cannot be applied"


class VoucherNotFoundError(VoucherError):
    code = "VOUCHER_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Voucher not found"


class VoucherInactiveError(VoucherError):
    code = "VOUCHER_INACTIVE"
    default_message = "Voucher is not active"


class VoucherExhaustedError(VoucherError):
    code = "VOUCHER_EXHAUSTED"
    default_message = "Voucher usage limit reached"


class VoucherNotYetValidError(VoucherError):
    code = "VOUCHER_NOT_YET_VALID"
    default_message = "Voucher is not yet valid"


class VoucherExpiredError(VoucherError):
    code = "VOUCHER_EXPIRED"
    default_message = "Voucher has expired"


class VoucherMinOrderNotMetError(VoucherError):
    code = "VOUCHER_MIN_ORDER_NOT_MET"
    default_message = "Order subtotal is below the voucher minimum"


class VoucherContentionError(DomainError):
    code = "VOUCHER_CONTENTION"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Voucher is being redeemed concurrently, please retry"


VOUCHER_ERRORS = {
    error.code: error
    for error in (
        VoucherNotFoundError,
        VoucherInactiveError,
        VoucherExhaustedError,
        VoucherNotYetValidError,
        VoucherExpiredError,
        VoucherMinOrderNotMetError,
    )
}
