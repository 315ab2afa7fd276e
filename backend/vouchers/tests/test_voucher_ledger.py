"""
VoucherLedger tests: validation order, discount math and usage accounting
under concurrent redemption.
"""
import pytest
from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from vouchers.exceptions import (
    VoucherContentionError,
    VoucherExhaustedError,
    VoucherMinOrderNotMetError,
    VoucherNotFoundError,
)
from vouchers.models import Voucher
from vouchers.services import VoucherLedger


def simulate_concurrent_redemption(times=1):
    """
    Wrap VoucherLedger.redeem so that, before each of the first ``times``
    calls, another request consumes one use of the same voucher.
    """
    original = VoucherLedger.redeem
    state = {"remaining": times}

    def racing_redeem(voucher_id, expected_usage_count=None):
        if state["remaining"] > 0:
            state["remaining"] -= 1
            Voucher.objects.filter(pk=voucher_id).update(usage_count=F("usage_count") + 1)
        return original(voucher_id, expected_usage_count=expected_usage_count)

    return mock.patch.object(VoucherLedger, "redeem", side_effect=racing_redeem)


@pytest.mark.django_db
class TestVoucherValidation:
    def test_percentage_discount_is_capped(self, welcome_voucher):
        result = VoucherLedger.validate("WELCOME10", Decimal("53.00"))

        assert result.valid
        assert result.discount_amount == Decimal("5.00")

    def test_percentage_discount_below_cap(self, welcome_voucher):
        result = VoucherLedger.validate("WELCOME10", Decimal("30.00"))
        assert result.discount_amount == Decimal("3.00")

    def test_min_order_not_met(self, welcome_voucher):
        result = VoucherLedger.validate("WELCOME10", Decimal("9.00"))

        assert not result.valid
        assert result.reason == "VOUCHER_MIN_ORDER_NOT_MET"
        with pytest.raises(VoucherMinOrderNotMetError):
            result.raise_error()

    def test_code_lookup_is_case_insensitive(self, welcome_voucher):
        assert VoucherLedger.validate("  welcome10 ", Decimal("53.00")).valid

    def test_unknown_code(self, db):
        result = VoucherLedger.validate("NOPE", Decimal("53.00"))

        assert result.reason == "VOUCHER_NOT_FOUND"
        with pytest.raises(VoucherNotFoundError):
            result.raise_error()

    def test_blank_code(self, db):
        assert VoucherLedger.validate("", Decimal("53.00")).reason == "VOUCHER_NOT_FOUND"

    def test_inactive_reported_before_expiry(self, welcome_voucher):
        welcome_voucher.status = Voucher.Status.INACTIVE
        welcome_voucher.valid_until = timezone.now() - timedelta(days=1)
        welcome_voucher.save()

        assert VoucherLedger.validate("WELCOME10", Decimal("53.00")).reason == "VOUCHER_INACTIVE"

    def test_exhausted_reported_before_expiry(self, single_use_voucher):
        single_use_voucher.usage_count = 1
        single_use_voucher.valid_until = timezone.now() - timedelta(days=1)
        single_use_voucher.save()

        assert VoucherLedger.validate("FIVEOFF", Decimal("53.00")).reason == "VOUCHER_EXHAUSTED"

    def test_not_yet_valid(self, welcome_voucher):
        welcome_voucher.valid_from = timezone.now() + timedelta(days=2)
        welcome_voucher.save()

        assert VoucherLedger.validate("WELCOME10", Decimal("53.00")).reason == "VOUCHER_NOT_YET_VALID"

    def test_expired(self, welcome_voucher):
        now = timezone.now()
        result = VoucherLedger.validate("WELCOME10", Decimal("53.00"), now=now + timedelta(days=31))
        assert result.reason == "VOUCHER_EXPIRED"

    def test_window_bounds_are_inclusive(self, welcome_voucher):
        assert VoucherLedger.validate("WELCOME10", Decimal("53.00"), now=welcome_voucher.valid_from).valid
        assert VoucherLedger.validate("WELCOME10", Decimal("53.00"), now=welcome_voucher.valid_until).valid

    def test_validation_does_not_consume(self, welcome_voucher):
        VoucherLedger.validate("WELCOME10", Decimal("53.00"))

        welcome_voucher.refresh_from_db()
        assert welcome_voucher.usage_count == 0


class TestDiscountCalculation:
    def test_fixed_amount_never_exceeds_subtotal(self):
        voucher = Voucher(discount_type=Voucher.DiscountType.FIXED_AMOUNT, discount_value=Decimal("5.00"))
        assert VoucherLedger.calculate_discount(voucher, Decimal("3.00")) == Decimal("3.00")

    def test_percentage_rounds_half_up(self):
        voucher = Voucher(discount_type=Voucher.DiscountType.PERCENTAGE, discount_value=Decimal("10"))
        assert VoucherLedger.calculate_discount(voucher, Decimal("33.35")) == Decimal("3.34")

    def test_full_percentage_is_the_subtotal(self):
        voucher = Voucher(discount_type=Voucher.DiscountType.PERCENTAGE, discount_value=Decimal("100"))
        assert VoucherLedger.calculate_discount(voucher, Decimal("18.40")) == Decimal("18.40")

    def test_percentage_only_for_percentage_vouchers(self):
        assert Voucher(discount_type=Voucher.DiscountType.PERCENTAGE, discount_value=Decimal("15")).percentage == Decimal("0.15")
        assert Voucher(discount_type=Voucher.DiscountType.FIXED_AMOUNT, discount_value=Decimal("5.00")).percentage is None


@pytest.mark.django_db
class TestVoucherRedemption:
    def test_redeem_increments_usage(self, welcome_voucher):
        voucher = VoucherLedger.redeem(welcome_voucher.pk, expected_usage_count=0)
        assert voucher.usage_count == 1

    def test_stale_usage_count_loses(self, welcome_voucher):
        VoucherLedger.redeem(welcome_voucher.pk, expected_usage_count=0)

        with pytest.raises(VoucherContentionError):
            VoucherLedger.redeem(welcome_voucher.pk, expected_usage_count=0)

        welcome_voucher.refresh_from_db()
        assert welcome_voucher.usage_count == 1

    def test_redeem_never_exceeds_limit(self, single_use_voucher):
        VoucherLedger.redeem(single_use_voucher.pk)

        with pytest.raises(VoucherContentionError):
            VoucherLedger.redeem(single_use_voucher.pk, expected_usage_count=1)

        single_use_voucher.refresh_from_db()
        assert single_use_voucher.usage_count == 1

    def test_database_rejects_usage_over_limit(self, single_use_voucher):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                Voucher.objects.filter(pk=single_use_voucher.pk).update(usage_count=2)

    def test_validate_and_redeem(self, welcome_voucher):
        redemption = VoucherLedger.validate_and_redeem("welcome10", Decimal("53.00"))

        assert redemption.discount_amount == Decimal("5.00")
        assert redemption.voucher.usage_count == 1

    def test_retries_after_losing_a_race(self, welcome_voucher):
        with simulate_concurrent_redemption(times=1):
            redemption = VoucherLedger.validate_and_redeem("WELCOME10", Decimal("53.00"))

        # One use by the concurrent request, one by us.
        assert redemption.voucher.usage_count == 2

    def test_retry_revalidates_and_sees_exhaustion(self, single_use_voucher):
        with simulate_concurrent_redemption(times=1):
            with pytest.raises(VoucherExhaustedError):
                VoucherLedger.validate_and_redeem("FIVEOFF", Decimal("30.00"))

        single_use_voucher.refresh_from_db()
        assert single_use_voucher.usage_count <= single_use_voucher.usage_limit

    def test_gives_up_after_max_attempts(self, welcome_voucher, settings):
        settings.VOUCHER_REDEEM_MAX_ATTEMPTS = 2

        with simulate_concurrent_redemption(times=5):
            with pytest.raises(VoucherContentionError):
                VoucherLedger.validate_and_redeem("WELCOME10", Decimal("53.00"))

        # The simulated competing uses ran inside the failed redemption and rolled back with it.
        welcome_voucher.refresh_from_db()
        assert welcome_voucher.usage_count == 0

    @pytest.mark.parametrize("requests, limit", [(5, 3), (3, 5)])
    def test_simultaneous_stale_redemptions_stop_at_limit(self, requests, limit):
        voucher = Voucher.objects.create(
            code="RUSH",
            discount_type=Voucher.DiscountType.FIXED_AMOUNT,
            discount_value=Decimal("5.00"),
            usage_limit=limit,
        )
        successes = 0
        pending = requests
        while pending:
            # Every pending request read the same usage count before any of them redeemed.
            snapshot = VoucherLedger.validate("RUSH", Decimal("30.00"))
            if not snapshot.valid:
                assert snapshot.reason == "VOUCHER_EXHAUSTED"
                break

            lost = 0
            for _ in range(pending):
                try:
                    VoucherLedger.redeem(voucher.pk, expected_usage_count=snapshot.voucher.usage_count)
                    successes += 1
                except VoucherContentionError:
                    lost += 1
            assert lost == pending - 1
            pending = lost

        voucher.refresh_from_db()
        assert successes == min(requests, limit)
        assert voucher.usage_count == min(requests, limit)

    def test_competing_use_on_last_slot_leaves_limit_intact(self, db):
        voucher = Voucher.objects.create(
            code="LASTONE",
            discount_type=Voucher.DiscountType.FIXED_AMOUNT,
            discount_value=Decimal("5.00"),
            usage_limit=2,
            usage_count=1,
        )

        with simulate_concurrent_redemption(times=1):
            with pytest.raises(VoucherContentionError):
                VoucherLedger.redeem(voucher.pk, expected_usage_count=1)

        voucher.refresh_from_db()
        assert voucher.usage_count == 2


@pytest.mark.django_db
class TestSingleUseVouchers:
    def test_issue_single_use(self):
        voucher = VoucherLedger.issue_single_use(Decimal("10"), prefix="LOYALTY", validity_days=30)

        assert voucher.code.startswith("LOYALTY")
        assert voucher.usage_limit == 1
        assert voucher.min_order_amount == Decimal("0.00")
        assert voucher.discount_type == Voucher.DiscountType.PERCENTAGE
        assert voucher.valid_until - voucher.valid_from == timedelta(days=30)

    def test_generated_codes_differ(self):
        assert VoucherLedger.generate_code("X") != VoucherLedger.generate_code("X")

    def test_codes_are_stored_uppercase(self):
        voucher = Voucher.objects.create(
            code="summer5",
            discount_type=Voucher.DiscountType.FIXED_AMOUNT,
            discount_value=Decimal("5.00"),
        )
        assert voucher.code == "SUMMER5"
