"""
Stripe integration: payment-intent creation and webhook reconciliation.

Webhooks are delivered at least once, possibly out of order. Every handler
decides what to do from the order's stored state (check-before-write), and
processed event ids are recorded alongside the effects, so applying an
event twice changes nothing the second time.
"""
from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone
import logging
import stripe

from activity_logs.services import ActivityLogService
from orders.exceptions import InvalidStatusTransitionError
from orders.models import Order
from orders.services import FulfillmentService
from users.identity import Actor

from .exceptions import OrderAlreadyPaidError, PaymentProviderError
from .models import ProcessedWebhookEvent
from .money import default_currency, to_minor

logger = logging.getLogger(__name__)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"
PAYMENT_CANCELED = "payment_intent.canceled"

# Payment statuses that later failure/cancel events must not overwrite.
SETTLED_PAYMENT_STATUSES = (Order.PaymentStatus.COMPLETED, Order.PaymentStatus.REFUNDED)


class PaymentIntentService:
    @staticmethod
    def create_for_order(order: Order) -> dict:
        """
        Creates a Stripe Payment Intent for the order total.

        The order id and number travel in the intent metadata; that is how
        PaymentReconciler finds the order again when the webhook arrives.
        """
        if order.is_terminal:
            raise InvalidStatusTransitionError(
                "Order can no longer be paid", details={"current_status": order.status}
            )
        if order.payment_status in SETTLED_PAYMENT_STATUSES:
            raise OrderAlreadyPaidError()

        currency = default_currency()
        amount = to_minor(order.total_amount, currency)

        stripe.api_key = settings.STRIPE_SECRET_KEY
        intent_data = {
            "amount": amount,
            "currency": currency.lower(),
            "automatic_payment_methods": {"enabled": True},
            "description": f"Order {order.order_number}",
            "metadata": {
                "order_id": str(order.pk),
                "order_number": order.order_number,
            },
        }
        receipt_email = order.customer.email if order.customer_id else order.guest_email
        if receipt_email:
            intent_data["receipt_email"] = receipt_email

        try:
            intent = stripe.PaymentIntent.create(
                idempotency_key=f"order-{order.pk}-{amount}", **intent_data
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe PaymentIntent creation failed for order {order.order_number}: {e}")
            raise PaymentProviderError(details={"provider_message": str(e)})

        Order.objects.filter(pk=order.pk).update(
            payment_reference=intent.id,
            payment_method=order.payment_method or "card",
            updated_at=timezone.now(),
        )
        order.payment_reference = intent.id
        logger.info(f"Created PaymentIntent {intent.id} for order {order.order_number} ({amount} {currency})")

        return {
            "client_secret": intent.client_secret,
            "payment_intent_id": intent.id,
            "amount": order.total_amount,
            "currency": currency,
            "order_id": str(order.pk),
        }


class PaymentReconciler:
    """Applies Stripe payment-intent events to order payment state."""

    @staticmethod
    def handlers():
        return {
            PAYMENT_SUCCEEDED: PaymentReconciler.handle_payment_succeeded,
            PAYMENT_FAILED: PaymentReconciler.handle_payment_failed,
            PAYMENT_CANCELED: PaymentReconciler.handle_payment_canceled,
        }

    @staticmethod
    def process_event(event) -> str:
        """
        Apply a verified provider event. Never raises: the webhook boundary
        acknowledges every verified event, and anything that could not be
        applied is left in the logs for manual reconciliation.

        Returns the outcome: ``applied``, ``no_op``, ``unresolved``,
        ``duplicate``, ``ignored`` or ``failed``.
        """
        event_id = event.get("id")
        event_type = event.get("type")
        handler = PaymentReconciler.handlers().get(event_type)
        if handler is None:
            logger.info(f"Ignoring unhandled Stripe event {event_type} ({event_id})")
            return "ignored"

        intent = (event.get("data") or {}).get("object") or {}

        try:
            with transaction.atomic():
                try:
                    with transaction.atomic():
                        record = ProcessedWebhookEvent.objects.create(
                            event_id=event_id,
                            event_type=event_type,
                            payment_reference=intent.get("id") or "",
                        )
                except IntegrityError:
                    logger.info(f"Stripe event {event_id} already processed, skipping")
                    return "duplicate"

                order, outcome = handler(intent)
                record.order = order
                record.outcome = outcome
                record.save(update_fields=["order", "outcome"])
        except Exception as e:
            logger.error(
                f"Failed to apply Stripe event {event_type} ({event_id}) for intent "
                f"{intent.get('id')}: {e}",
                exc_info=True,
            )
            return "failed"

        return outcome

    @staticmethod
    def _resolve_order(intent):
        """Locks and returns the order named in the intent metadata, or None."""
        metadata = intent.get("metadata") or {}
        order_id = metadata.get("order_id")
        if not order_id:
            logger.error(
                f"PaymentIntent {intent.get('id')} has no order_id metadata; needs manual reconciliation"
            )
            return None

        try:
            order = Order.objects.select_for_update().filter(pk=order_id).first()
        except (ValueError, DjangoValidationError):
            order = None
        if order is None:
            logger.error(
                f"PaymentIntent {intent.get('id')} references unknown order {order_id}; "
                f"needs manual reconciliation"
            )
        return order

    @staticmethod
    def _set_payment_status(order: Order, payment_status: str, **fields) -> None:
        Order.objects.filter(pk=order.pk).update(
            payment_status=payment_status, updated_at=timezone.now(), **fields
        )
        order.payment_status = payment_status
        for field, value in fields.items():
            setattr(order, field, value)

    @staticmethod
    def handle_payment_succeeded(intent):
        order = PaymentReconciler._resolve_order(intent)
        if order is None:
            return None, ProcessedWebhookEvent.Outcome.UNRESOLVED

        if order.payment_status in SETTLED_PAYMENT_STATUSES:
            logger.info(f"Order {order.order_number} payment already {order.payment_status}")
            return order, ProcessedWebhookEvent.Outcome.NO_OP

        PaymentReconciler._set_payment_status(
            order, Order.PaymentStatus.COMPLETED, payment_reference=intent.get("id") or order.payment_reference
        )
        if order.status == Order.Status.NEW:
            FulfillmentService.apply_system_transition(order, Order.Status.CONFIRMED)

        ActivityLogService.record(
            Actor.system(), "order", order.pk, "payment_succeeded",
            {"payment_reference": order.payment_reference, "status": order.status},
        )
        logger.info(f"Payment completed for order {order.order_number} ({order.payment_reference})")
        return order, ProcessedWebhookEvent.Outcome.APPLIED

    @staticmethod
    def handle_payment_failed(intent):
        order = PaymentReconciler._resolve_order(intent)
        if order is None:
            return None, ProcessedWebhookEvent.Outcome.UNRESOLVED

        if order.payment_status in SETTLED_PAYMENT_STATUSES or order.payment_status == Order.PaymentStatus.FAILED:
            logger.info(f"Ignoring payment failure for order {order.order_number} ({order.payment_status})")
            return order, ProcessedWebhookEvent.Outcome.NO_OP

        PaymentReconciler._set_payment_status(order, Order.PaymentStatus.FAILED)
        ActivityLogService.record(
            Actor.system(), "order", order.pk, "payment_failed",
            {"payment_reference": intent.get("id")},
        )
        logger.info(f"Payment failed for order {order.order_number}; customer may retry")
        return order, ProcessedWebhookEvent.Outcome.APPLIED

    @staticmethod
    def handle_payment_canceled(intent):
        order = PaymentReconciler._resolve_order(intent)
        if order is None:
            return None, ProcessedWebhookEvent.Outcome.UNRESOLVED

        if order.payment_status in SETTLED_PAYMENT_STATUSES:
            logger.warning(
                f"Ignoring cancellation of intent {intent.get('id')}: order {order.order_number} "
                f"payment is {order.payment_status}"
            )
            return order, ProcessedWebhookEvent.Outcome.NO_OP

        changed = False
        if order.payment_status != Order.PaymentStatus.FAILED:
            PaymentReconciler._set_payment_status(order, Order.PaymentStatus.FAILED)
            changed = True
        if order.status != Order.Status.CANCELLED:
            changed = FulfillmentService.apply_system_transition(order, Order.Status.CANCELLED) or changed

        if not changed:
            return order, ProcessedWebhookEvent.Outcome.NO_OP

        ActivityLogService.record(
            Actor.system(), "order", order.pk, "payment_canceled",
            {"payment_reference": intent.get("id"), "status": order.status},
        )
        logger.info(f"Payment canceled for order {order.order_number}; order is {order.status}")
        return order, ProcessedWebhookEvent.Outcome.APPLIED
