"""
VoucherLedger: validation and usage accounting for discount vouchers.

Usage is consumed with an optimistic compare-and-swap on ``usage_count``;
there are no row locks, so any number of replicas can redeem concurrently
without exceeding ``usage_limit``.
"""
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Optional
import logging
import time

from django.conf import settings
from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from core_backend.utils.codes import random_base36, to_base36
from payments.money import ZERO, quantize

from .exceptions import VOUCHER_ERRORS, VoucherContentionError
from .models import Voucher

logger = logging.getLogger(__name__)


@dataclass
class VoucherValidationResult:
    valid: bool
    voucher: Optional[Voucher] = None
    discount_amount: Decimal = ZERO
    reason: Optional[str] = None
    message: str = ""

    def raise_error(self):
        error_class = VOUCHER_ERRORS[self.reason]
        details = {"code": self.voucher.code} if self.voucher else {}
        raise error_class(self.message or None, details=details)


@dataclass(frozen=True)
class VoucherRedemption:
    voucher: Voucher
    discount_amount: Decimal


class VoucherLedger:
    @staticmethod
    def normalize_code(code: str) -> str:
        return (code or "").strip().upper()

    @staticmethod
    def calculate_discount(voucher: Voucher, subtotal: Decimal) -> Decimal:
        """
        Discount for ``subtotal``: capped by ``max_discount_amount`` first,
        then by the subtotal itself, then rounded half-up to cents.
        """
        if voucher.discount_type == Voucher.DiscountType.PERCENTAGE:
            raw = subtotal * voucher.percentage
        else:
            raw = voucher.discount_value

        if voucher.max_discount_amount is not None:
            raw = min(raw, voucher.max_discount_amount)
        raw = min(raw, subtotal)
        return quantize(max(raw, ZERO))

    @staticmethod
    def validate(code: str, subtotal: Decimal, now=None) -> VoucherValidationResult:
        """
        Check a voucher against an order subtotal without consuming it.

        Checks run in a fixed order and the first failing one decides the
        reason: existence, status, usage, start, expiry, minimum order.
        """
        now = now or timezone.now()
        normalized = VoucherLedger.normalize_code(code)

        voucher = Voucher.objects.filter(code=normalized).first() if normalized else None
        if voucher is None:
            return VoucherValidationResult(
                valid=False, reason="VOUCHER_NOT_FOUND", message="Voucher not found"
            )

        if voucher.status != Voucher.Status.ACTIVE:
            return VoucherValidationResult(
                valid=False, voucher=voucher, reason="VOUCHER_INACTIVE",
                message="Voucher is not active",
            )

        if voucher.is_exhausted:
            return VoucherValidationResult(
                valid=False, voucher=voucher, reason="VOUCHER_EXHAUSTED",
                message="Voucher usage limit reached",
            )

        if not voucher.is_within_window(now):
            if voucher.valid_from and now < voucher.valid_from:
                return VoucherValidationResult(
                    valid=False, voucher=voucher, reason="VOUCHER_NOT_YET_VALID",
                    message="Voucher is not yet valid",
                )
            return VoucherValidationResult(
                valid=False, voucher=voucher, reason="VOUCHER_EXPIRED",
                message="Voucher has expired",
            )

        if voucher.min_order_amount is not None and subtotal < voucher.min_order_amount:
            return VoucherValidationResult(
                valid=False, voucher=voucher, reason="VOUCHER_MIN_ORDER_NOT_MET",
                message=f"Minimum order amount is {voucher.min_order_amount}",
            )

        return VoucherValidationResult(
            valid=True,
            voucher=voucher,
            discount_amount=VoucherLedger.calculate_discount(voucher, subtotal),
        )

    @staticmethod
    def redeem(voucher_id, expected_usage_count: Optional[int] = None) -> Voucher:
        """
        Consume one use of the voucher.

        The increment only lands if ``usage_count`` still equals the count the
        caller validated against and the limit still has room. Zero rows
        updated means another redemption won; VoucherContentionError tells the
        caller to re-validate.
        """
        if expected_usage_count is None:
            expected_usage_count = (
                Voucher.objects.filter(pk=voucher_id)
                .values_list("usage_count", flat=True)
                .first()
            )
            if expected_usage_count is None:
                raise VOUCHER_ERRORS["VOUCHER_NOT_FOUND"]()

        updated = (
            Voucher.objects.filter(pk=voucher_id, usage_count=expected_usage_count)
            .filter(Q(usage_limit__isnull=True) | Q(usage_limit__gt=expected_usage_count))
            .update(usage_count=F("usage_count") + 1, updated_at=timezone.now())
        )
        if not updated:
            logger.warning(
                f"Voucher {voucher_id} usage changed since read (expected {expected_usage_count})"
            )
            raise VoucherContentionError(details={"voucher_id": voucher_id})

        voucher = Voucher.objects.get(pk=voucher_id)
        logger.info(f"Redeemed voucher {voucher.code} ({voucher.usage_count}/{voucher.usage_limit})")
        return voucher

    @staticmethod
    @transaction.atomic
    def validate_and_redeem(code: str, subtotal: Decimal, now=None) -> VoucherRedemption:
        """
        Validate then consume a voucher, retrying a bounded number of times
        when a concurrent redemption moves the usage count underneath us.

        Runs inside the caller's transaction, so a failure of the surrounding
        order write also rolls the usage back.
        """
        max_attempts = max(getattr(settings, "VOUCHER_REDEEM_MAX_ATTEMPTS", 2), 1)
        for attempt in range(1, max_attempts + 1):
            result = VoucherLedger.validate(code, subtotal, now=now)
            if not result.valid:
                result.raise_error()

            try:
                voucher = VoucherLedger.redeem(
                    result.voucher.pk, expected_usage_count=result.voucher.usage_count
                )
            except VoucherContentionError:
                logger.warning(
                    f"Voucher {result.voucher.code} contention on attempt {attempt}/{max_attempts}"
                )
                continue
            return VoucherRedemption(voucher=voucher, discount_amount=result.discount_amount)

        raise VoucherContentionError(details={"code": VoucherLedger.normalize_code(code)})

    @staticmethod
    def generate_code(prefix: str = "") -> str:
        """``<prefix><base36 millisecond timestamp><4 random base36 chars>``"""
        return f"{prefix}{to_base36(int(time.time() * 1000))}{random_base36(4)}"

    @staticmethod
    def issue_single_use(
        discount_value: Decimal,
        *,
        discount_type: str = Voucher.DiscountType.PERCENTAGE,
        validity_days: int = 30,
        prefix: str = "",
        description: str = "",
    ) -> Voucher:
        """Create a voucher that can be redeemed exactly once, from now on."""
        now = timezone.now()
        voucher = Voucher.objects.create(
            code=VoucherLedger.generate_code(prefix),
            description=description,
            discount_type=discount_type,
            discount_value=discount_value,
            min_order_amount=ZERO,
            usage_limit=1,
            valid_from=now,
            valid_until=now + timedelta(days=validity_days),
        )
        logger.info(f"Issued single-use voucher {voucher.code} ({discount_value} {discount_type})")
        return voucher
