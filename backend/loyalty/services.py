"""
Loyalty points: accrual per order and redemption into reward vouchers.
"""
from decimal import Decimal, ROUND_FLOOR
from typing import Optional
import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from activity_logs.services import ActivityLogService
from core_backend.exceptions import ResourceNotFoundError, ValidationFailedError
from orders.models import Order
from users.identity import Actor
from vouchers.models import Voucher
from vouchers.services import VoucherLedger

from .exceptions import InsufficientPointsError
from .models import LoyaltyAccount, LoyaltyTransaction

logger = logging.getLogger(__name__)


class LoyaltyService:
    @staticmethod
    def reward_catalog():
        return getattr(settings, "LOYALTY_REWARDS", {})

    @staticmethod
    def points_for_total(total_amount: Decimal) -> int:
        """Whole currency units of the order total, times the accrual rate."""
        per_unit = getattr(settings, "LOYALTY_POINTS_PER_UNIT", 1)
        whole_units = int(Decimal(total_amount).to_integral_value(rounding=ROUND_FLOOR))
        return max(whole_units, 0) * per_unit

    @staticmethod
    def get_or_create_account(customer) -> LoyaltyAccount:
        account, _ = LoyaltyAccount.objects.get_or_create(customer=customer)
        return account

    @staticmethod
    def award_points_for_order(order_id) -> Optional[LoyaltyTransaction]:
        """
        Credit the order's customer with points for its total.

        Safe to call any number of times for the same order: the ledger
        allows only one ``earned`` entry per order, and a second attempt
        returns None without touching the balance. Guest orders earn nothing.
        """
        order = Order.objects.filter(pk=order_id).select_related("customer").first()
        if order is None:
            logger.warning(f"Loyalty award skipped: order {order_id} not found")
            return None
        if order.customer_id is None:
            return None

        points = LoyaltyService.points_for_total(order.total_amount)
        if points <= 0:
            return None

        account = LoyaltyService.get_or_create_account(order.customer)
        try:
            with transaction.atomic():
                entry = LoyaltyTransaction.objects.create(
                    customer_id=order.customer_id,
                    order=order,
                    transaction_type=LoyaltyTransaction.TransactionType.EARNED,
                    points=points,
                    description=f"Points earned for order {order.order_number}",
                )
                LoyaltyAccount.objects.filter(pk=account.pk).update(
                    points_balance=F("points_balance") + points,
                    lifetime_points=F("lifetime_points") + points,
                    updated_at=timezone.now(),
                )
        except IntegrityError:
            logger.info(f"Loyalty points for order {order.order_number} already awarded")
            return None

        ActivityLogService.record(
            Actor.system(), "loyalty_account", account.pk, "points_earned",
            {"order_id": order.pk, "order_number": order.order_number, "points": points},
        )
        logger.info(f"Awarded {points} points to customer {order.customer_id} for order {order.order_number}")
        return entry

    @staticmethod
    @transaction.atomic
    def redeem_points(customer, points: int, reward_type: str) -> Voucher:
        """
        Exchange points for a single-use percentage voucher.

        The balance decrement, the voucher and the ledger entry commit
        together or not at all. The decrement is conditional on the balance
        still covering the cost, so two concurrent redemptions can't take the
        balance below zero.
        """
        catalog = LoyaltyService.reward_catalog()
        reward = catalog.get(reward_type)
        if reward is None:
            raise ValidationFailedError(
                "Unknown reward type",
                details={"reward_type": reward_type, "available": sorted(catalog)},
            )
        if points != reward["points"]:
            raise ValidationFailedError(
                "Points do not match the selected reward",
                details={"reward_type": reward_type, "required": reward["points"]},
            )

        account = LoyaltyAccount.objects.filter(customer=customer).first()
        if account is None:
            raise ResourceNotFoundError("Loyalty account not found")

        updated = LoyaltyAccount.objects.filter(
            pk=account.pk, points_balance__gte=points
        ).update(points_balance=F("points_balance") - points, updated_at=timezone.now())
        if not updated:
            account.refresh_from_db(fields=["points_balance"])
            raise InsufficientPointsError(
                details={"balance": account.points_balance, "required": points}
            )

        voucher = VoucherLedger.issue_single_use(
            reward["discount_value"],
            discount_type=Voucher.DiscountType.PERCENTAGE,
            validity_days=getattr(settings, "LOYALTY_VOUCHER_VALIDITY_DAYS", 30),
            prefix="LOYALTY",
            description=f"Loyalty reward {reward_type}",
        )
        LoyaltyTransaction.objects.create(
            customer=customer,
            voucher=voucher,
            transaction_type=LoyaltyTransaction.TransactionType.REDEEMED,
            points=-points,
            description=f"Redeemed {points} points for {reward_type}",
        )
        ActivityLogService.record(
            Actor.from_user(customer), "loyalty_account", account.pk, "points_redeemed",
            {"reward_type": reward_type, "points": points, "voucher_code": voucher.code},
        )

        logger.info(f"Customer {customer.pk} redeemed {points} points for voucher {voucher.code}")
        return voucher

    @staticmethod
    def summary(customer, recent: int = 10) -> dict:
        account = LoyaltyAccount.objects.filter(customer=customer).first()
        return {
            "points_balance": account.points_balance if account else 0,
            "lifetime_points": account.lifetime_points if account else 0,
            "recent_transactions": list(
                LoyaltyTransaction.objects.filter(customer=customer)
                .select_related("voucher")[:recent]
            ),
            "rewards": [
                {"reward_type": name, **reward}
                for name, reward in sorted(
                    LoyaltyService.reward_catalog().items(), key=lambda item: item[1]["points"]
                )
            ],
        }
