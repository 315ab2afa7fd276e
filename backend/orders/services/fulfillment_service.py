"""
FulfillmentService: order placement and every status change after it.

Status writes are compare-and-swap updates conditioned on the status the
caller observed (and, for driver assignment, on the order having no driver).
Whoever loses a race gets a specific error instead of overwriting the winner.
"""
import logging
import secrets
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Union

from django.db import IntegrityError, transaction
from django.utils import timezone

from activity_logs.services import ActivityLogService
from core_backend.exceptions import (
    PermissionDeniedError,
    ResourceNotFoundError,
    ValidationFailedError,
)
from drivers.models import Driver
from drivers.services import DriverEarningsService
from loyalty.tasks import award_loyalty_points
from payments.money import ZERO
from restaurants.services import MenuLookupService
from users.identity import Actor
from vouchers.services import VoucherLedger

from orders.calculators import PricingEngine
from orders.delivery_fees import DeliveryFeeCalculator
from orders.exceptions import (
    DriverInactiveError,
    InvalidDeliveryCodeError,
    InvalidStatusTransitionError,
    OrderAlreadyAssignedError,
    PickupZoneMismatchError,
)
from orders.identity import GuestCustomer, RegisteredCustomer
from orders.models import Order, OrderItem
from orders.numbering import generate_delivery_code, generate_order_number
from orders.state_machine import OrderStateMachine

from .notification_service import OrderNotificationService

logger = logging.getLogger(__name__)

S = Order.Status


@dataclass(frozen=True)
class DeliveryDetails:
    address: str
    city: str
    postal_code: str = ""
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None
    instructions: str = ""


class FulfillmentService:
    """Core service for the order lifecycle, from placement to delivery."""

    ORDER_NUMBER_ATTEMPTS = 2

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    @staticmethod
    def create_order(
        customer: Union[RegisteredCustomer, GuestCustomer],
        restaurant_id,
        items: List[dict],
        delivery: DeliveryDetails,
        scheduled_delivery_time=None,
        voucher_code: Optional[str] = None,
        payment_method: str = "",
        actor: Optional[Actor] = None,
    ) -> Order:
        """
        Place an order.

        Menu, fee and pricing reads happen up front; the voucher redemption,
        the order row and its items are then written in one transaction, so a
        voucher is never consumed without its order or vice versa. Loyalty
        accrual is queued for after commit.
        """
        restaurant = MenuLookupService.get_orderable_restaurant(restaurant_id)
        lines = MenuLookupService.resolve_items(restaurant, items)

        subtotal = PricingEngine.subtotal(lines)
        if subtotal < restaurant.min_order_amount:
            raise ValidationFailedError(
                f"Minimum order amount is {restaurant.min_order_amount}",
                details={"subtotal": str(subtotal), "min_order_amount": str(restaurant.min_order_amount)},
            )

        delivery_fee = DeliveryFeeCalculator().fee_for(restaurant, delivery.latitude, delivery.longitude)
        pricing = PricingEngine()
        # Rejects a non-positive subtotal before anything is written.
        pricing.price(subtotal, delivery_fee)

        with transaction.atomic():
            voucher = None
            discount_amount = ZERO
            if voucher_code:
                redemption = VoucherLedger.validate_and_redeem(voucher_code, subtotal)
                voucher = redemption.voucher
                discount_amount = redemption.discount_amount

            totals = pricing.price(subtotal, delivery_fee, discount_amount)

            order = FulfillmentService._insert_order(
                restaurant=restaurant,
                voucher=voucher,
                voucher_code=voucher.code if voucher else "",
                delivery_address=delivery.address,
                delivery_city=delivery.city,
                delivery_postal_code=delivery.postal_code or "",
                delivery_latitude=delivery.latitude,
                delivery_longitude=delivery.longitude,
                delivery_instructions=delivery.instructions or "",
                scheduled_delivery_time=scheduled_delivery_time,
                subtotal=totals.subtotal,
                delivery_fee=totals.delivery_fee,
                discount_amount=totals.discount_amount,
                tax_amount=totals.tax_amount,
                payment_method=payment_method or "",
                delivery_code=generate_delivery_code(),
                **customer.order_fields(),
            )

            for line in lines:
                OrderItem.objects.create(
                    order=order,
                    menu_item_id=line.menu_item_id,
                    name=line.name,
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                    special_instructions=line.special_instructions or "",
                )

            if customer.earns_loyalty:
                order_id = order.pk
                transaction.on_commit(lambda: award_loyalty_points.delay(str(order_id)), robust=True)

        logger.info(
            f"Created order {order.order_number} for restaurant {restaurant.pk}: "
            f"total {order.total_amount} (discount {order.discount_amount})"
        )

        FulfillmentService._notify(OrderNotificationService.order_created, order)
        ActivityLogService.record(
            actor,
            "order",
            order.pk,
            "created",
            {
                "order_number": order.order_number,
                "restaurant_id": restaurant.pk,
                "total_amount": order.total_amount,
                "voucher_code": order.voucher_code,
            },
        )
        return order

    @staticmethod
    def _insert_order(**fields) -> Order:
        """
        Insert the order under a fresh order number. A number collision
        (unique violation) gets exactly one regenerate-and-retry.
        """
        for attempt in range(1, FulfillmentService.ORDER_NUMBER_ATTEMPTS + 1):
            order_number = generate_order_number()
            try:
                with transaction.atomic():
                    return Order.objects.create(order_number=order_number, **fields)
            except IntegrityError:
                collided = Order.objects.filter(order_number=order_number).exists()
                if not collided or attempt == FulfillmentService.ORDER_NUMBER_ATTEMPTS:
                    raise
                logger.warning(f"Order number {order_number} collided, regenerating")

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    @staticmethod
    def transition(
        actor: Actor,
        order: Order,
        new_status: str,
        *,
        delivery_code: Optional[str] = None,
        driver_id=None,
    ) -> Order:
        """
        Move ``order`` to ``new_status`` on behalf of ``actor``.

        ``assigned`` goes through driver acceptance (or an admin assignment
        naming ``driver_id``) and ``delivered`` through delivery confirmation,
        so their extra preconditions apply whichever entry point is used.
        """
        if new_status not in S.values:
            raise ValidationFailedError(f"'{new_status}' is not a valid order status")

        if new_status == S.DELIVERED:
            return FulfillmentService.confirm_delivery(actor, order, delivery_code)

        if new_status == S.ASSIGNED:
            if actor.is_driver:
                return FulfillmentService.accept_order(actor, order)
            if actor.is_admin:
                return FulfillmentService.assign_driver(actor, order, driver_id)
            raise PermissionDeniedError()

        if not OrderStateMachine.is_permitted(actor, order, new_status):
            raise PermissionDeniedError()
        FulfillmentService._ensure_valid_transition(order, new_status)

        previous_status = order.status
        with transaction.atomic():
            FulfillmentService._compare_and_set(order, previous_status, new_status)

        return FulfillmentService._after_transition(actor, order, previous_status)

    @staticmethod
    def accept_order(actor: Actor, order: Order) -> Order:
        """
        A driver takes a ready order. First writer wins: the assignment only
        lands while the order is still ready_for_pickup with no driver.
        """
        if not actor.is_driver or actor.driver_id is None:
            raise PermissionDeniedError("Only drivers can accept orders")
        if not OrderStateMachine.is_permitted(actor, order, S.ASSIGNED):
            raise PermissionDeniedError()

        try:
            driver = Driver.objects.get(pk=actor.driver_id)
        except Driver.DoesNotExist:
            raise ResourceNotFoundError("Driver not found")

        return FulfillmentService._assign(actor, order, driver)

    @staticmethod
    def assign_driver(actor: Actor, order: Order, driver_id) -> Order:
        """Admin assignment of a specific driver; same preconditions as accepting."""
        if not actor.is_admin:
            raise PermissionDeniedError()
        if driver_id is None:
            raise ValidationFailedError("driver_id is required to assign an order")

        try:
            driver = Driver.objects.get(pk=driver_id)
        except (Driver.DoesNotExist, ValueError, TypeError):
            raise ResourceNotFoundError("Driver not found")

        return FulfillmentService._assign(actor, order, driver)

    @staticmethod
    def _assign(actor: Actor, order: Order, driver: Driver) -> Order:
        if not driver.is_active:
            raise DriverInactiveError()
        if order.status != S.READY_FOR_PICKUP:
            raise InvalidStatusTransitionError(
                details={"current_status": order.status, "requested_status": S.ASSIGNED}
            )
        if order.driver_id is not None:
            raise OrderAlreadyAssignedError()
        if order.restaurant.region != driver.pickup_zone:
            raise PickupZoneMismatchError(
                details={"order_region": order.restaurant.region, "pickup_zone": driver.pickup_zone}
            )

        with transaction.atomic():
            updated = Order.objects.filter(
                pk=order.pk, status=S.READY_FOR_PICKUP, driver__isnull=True
            ).update(driver=driver, status=S.ASSIGNED, updated_at=timezone.now())

            if not updated:
                current = Order.objects.filter(pk=order.pk).values("status", "driver_id").first()
                if current is None:
                    raise ResourceNotFoundError("Order not found")
                logger.warning(
                    f"Driver {driver.pk} lost assignment race for order {order.order_number} "
                    f"(now {current['status']}, driver {current['driver_id']})"
                )
                if current["driver_id"] is not None:
                    raise OrderAlreadyAssignedError()
                raise InvalidStatusTransitionError(
                    details={"current_status": current["status"], "requested_status": S.ASSIGNED}
                )

        order.refresh_from_db()
        logger.info(f"Driver {driver.pk} assigned to order {order.order_number}")
        return FulfillmentService._after_transition(actor, order, previous_status=S.READY_FOR_PICKUP)

    @staticmethod
    def confirm_delivery(actor: Actor, order: Order, delivery_code: Optional[str]) -> Order:
        """
        in_transit -> delivered, gated on the code generated at placement.

        The status change and the driver's delivery/earnings increment commit
        together, and the status write only succeeds once, so the driver is
        credited exactly once per order.
        """
        if not OrderStateMachine.is_permitted(actor, order, S.DELIVERED):
            raise PermissionDeniedError()
        FulfillmentService._ensure_valid_transition(order, S.DELIVERED)

        submitted = (delivery_code or "").strip()
        if not submitted or not secrets.compare_digest(submitted.encode(), order.delivery_code.encode()):
            logger.info(f"Rejected delivery code for order {order.order_number}")
            raise InvalidDeliveryCodeError()

        with transaction.atomic():
            FulfillmentService._compare_and_set(
                order,
                S.IN_TRANSIT,
                S.DELIVERED,
                actual_delivery_time=timezone.now(),
            )
            if order.driver_id is not None:
                DriverEarningsService.record_delivery(order.driver_id, order.delivery_fee)

        return FulfillmentService._after_transition(actor, order, previous_status=S.IN_TRANSIT)

    @staticmethod
    def apply_system_transition(order: Order, new_status: str) -> bool:
        """
        Transition on behalf of the system (payment reconciliation). Skips the
        permission predicate but not the transition table.

        Returns False, without raising, when the order has moved on and the
        transition no longer applies.
        """
        if not OrderStateMachine.is_valid_transition(order.status, new_status):
            return False
        previous_status = order.status
        try:
            with transaction.atomic():
                FulfillmentService._compare_and_set(order, previous_status, new_status)
        except InvalidStatusTransitionError:
            return False

        FulfillmentService._after_transition(Actor.system(), order, previous_status)
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _ensure_valid_transition(order: Order, new_status: str) -> None:
        if not OrderStateMachine.is_valid_transition(order.status, new_status):
            raise InvalidStatusTransitionError(
                f"Cannot transition order from {order.status} to {new_status}",
                details={
                    "current_status": order.status,
                    "requested_status": new_status,
                    "allowed": sorted(OrderStateMachine.allowed_next(order.status)),
                },
            )

    @staticmethod
    def _compare_and_set(order: Order, expected_status: str, new_status: str, **fields) -> None:
        """
        ``UPDATE orders SET status = new WHERE id = ? AND status = expected``.
        Zero rows means someone else changed the order first.
        """
        now = timezone.now()
        updated = Order.objects.filter(pk=order.pk, status=expected_status).update(
            status=new_status, updated_at=now, **fields
        )
        if not updated:
            current = Order.objects.filter(pk=order.pk).values_list("status", flat=True).first()
            if current is None:
                raise ResourceNotFoundError("Order not found")
            logger.warning(
                f"Order {order.order_number} status changed concurrently: "
                f"expected {expected_status}, found {current}"
            )
            raise InvalidStatusTransitionError(
                "Order status changed concurrently",
                details={"current_status": current, "requested_status": new_status},
            )

        order.status = new_status
        order.updated_at = now
        for field, value in fields.items():
            setattr(order, field, value)
        logger.info(f"Order {order.order_number}: {expected_status} -> {new_status}")

    @staticmethod
    def _after_transition(actor: Actor, order: Order, previous_status: str) -> Order:
        FulfillmentService._notify(OrderNotificationService.status_changed, order)
        ActivityLogService.record(
            actor,
            "order",
            order.pk,
            "status_changed",
            {
                "order_number": order.order_number,
                "from": previous_status,
                "to": order.status,
                "driver_id": order.driver_id,
            },
        )
        return order

    @staticmethod
    def _notify(callback, order: Order) -> None:
        try:
            callback(order)
        except Exception as e:
            logger.error(f"Notification for order {order.order_number} failed: {e}", exc_info=True)
