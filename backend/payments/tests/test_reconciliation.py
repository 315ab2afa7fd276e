"""
Payment reconciliation tests.

Stripe delivers webhooks at least once and in any order; applying the
same event twice, or an older event after a newer one, must not change
the order again.
"""
import pytest
from unittest import mock

from orders.models import Order
from payments.models import ProcessedWebhookEvent
from payments.services import PaymentReconciler


def make_event(event_id, event_type, order=None, intent_id="pi_test_123", metadata=None):
    if metadata is None:
        metadata = {"order_id": str(order.pk), "order_number": order.order_number} if order else {}
    return {
        "id": event_id,
        "type": event_type,
        "data": {"object": {"id": intent_id, "object": "payment_intent", "metadata": metadata}},
    }


@pytest.mark.django_db
class TestPaymentSucceeded:
    def test_marks_order_paid_and_confirms_it(self, order):
        outcome = PaymentReconciler.process_event(
            make_event("evt_1", "payment_intent.succeeded", order)
        )

        order.refresh_from_db()
        assert outcome == ProcessedWebhookEvent.Outcome.APPLIED
        assert order.payment_status == Order.PaymentStatus.COMPLETED
        assert order.payment_reference == "pi_test_123"
        assert order.status == Order.Status.CONFIRMED

        record = ProcessedWebhookEvent.objects.get(event_id="evt_1")
        assert record.order_id == order.pk
        assert record.outcome == ProcessedWebhookEvent.Outcome.APPLIED

    def test_redelivered_event_is_skipped(self, order):
        event = make_event("evt_1", "payment_intent.succeeded", order)
        PaymentReconciler.process_event(event)

        assert PaymentReconciler.process_event(event) == "duplicate"
        assert ProcessedWebhookEvent.objects.filter(event_id="evt_1").count() == 1

    def test_second_success_for_paid_order_is_no_op(self, order):
        PaymentReconciler.process_event(make_event("evt_1", "payment_intent.succeeded", order))

        outcome = PaymentReconciler.process_event(make_event("evt_2", "payment_intent.succeeded", order))

        assert outcome == ProcessedWebhookEvent.Outcome.NO_OP
        order.refresh_from_db()
        assert order.status == Order.Status.CONFIRMED

    def test_does_not_rewind_an_order_that_moved_on(self, order, order_in_status):
        order_in_status(order, Order.Status.PREPARING)

        PaymentReconciler.process_event(make_event("evt_1", "payment_intent.succeeded", order))

        order.refresh_from_db()
        assert order.payment_status == Order.PaymentStatus.COMPLETED
        assert order.status == Order.Status.PREPARING

    def test_success_after_cancellation_records_payment_only(self, order, order_in_status):
        order_in_status(order, Order.Status.CANCELLED)

        PaymentReconciler.process_event(make_event("evt_1", "payment_intent.succeeded", order))

        order.refresh_from_db()
        assert order.payment_status == Order.PaymentStatus.COMPLETED
        assert order.status == Order.Status.CANCELLED


@pytest.mark.django_db
class TestPaymentFailedAndCanceled:
    def test_failure_marks_payment_failed(self, order):
        outcome = PaymentReconciler.process_event(
            make_event("evt_1", "payment_intent.payment_failed", order)
        )

        order.refresh_from_db()
        assert outcome == ProcessedWebhookEvent.Outcome.APPLIED
        assert order.payment_status == Order.PaymentStatus.FAILED
        assert order.status == Order.Status.NEW

    def test_late_failure_never_downgrades_completed_payment(self, order):
        PaymentReconciler.process_event(make_event("evt_1", "payment_intent.succeeded", order))

        outcome = PaymentReconciler.process_event(
            make_event("evt_0", "payment_intent.payment_failed", order)
        )

        order.refresh_from_db()
        assert outcome == ProcessedWebhookEvent.Outcome.NO_OP
        assert order.payment_status == Order.PaymentStatus.COMPLETED

    def test_cancel_fails_payment_and_cancels_order(self, order):
        outcome = PaymentReconciler.process_event(make_event("evt_1", "payment_intent.canceled", order))

        order.refresh_from_db()
        assert outcome == ProcessedWebhookEvent.Outcome.APPLIED
        assert order.payment_status == Order.PaymentStatus.FAILED
        assert order.status == Order.Status.CANCELLED

    def test_cancel_after_success_is_ignored(self, order):
        PaymentReconciler.process_event(make_event("evt_1", "payment_intent.succeeded", order))

        outcome = PaymentReconciler.process_event(make_event("evt_2", "payment_intent.canceled", order))

        order.refresh_from_db()
        assert outcome == ProcessedWebhookEvent.Outcome.NO_OP
        assert order.status == Order.Status.CONFIRMED
        assert order.payment_status == Order.PaymentStatus.COMPLETED


@pytest.mark.django_db
class TestUnresolvableEvents:
    def test_missing_order_metadata_is_unresolved(self, db):
        outcome = PaymentReconciler.process_event(
            make_event("evt_1", "payment_intent.succeeded", metadata={})
        )

        assert outcome == ProcessedWebhookEvent.Outcome.UNRESOLVED
        record = ProcessedWebhookEvent.objects.get(event_id="evt_1")
        assert record.order is None

    def test_unknown_order_is_unresolved(self, db):
        outcome = PaymentReconciler.process_event(
            make_event(
                "evt_1",
                "payment_intent.succeeded",
                metadata={"order_id": "6f1c1c52-6a0b-4e45-9d0e-0f8a3b7b2c11"},
            )
        )
        assert outcome == ProcessedWebhookEvent.Outcome.UNRESOLVED

    def test_malformed_order_id_is_unresolved(self, db):
        outcome = PaymentReconciler.process_event(
            make_event("evt_1", "payment_intent.succeeded", metadata={"order_id": "not-a-uuid"})
        )
        assert outcome == ProcessedWebhookEvent.Outcome.UNRESOLVED

    def test_unhandled_event_type_is_ignored(self, order):
        outcome = PaymentReconciler.process_event(make_event("evt_1", "charge.refunded", order))

        assert outcome == "ignored"
        assert not ProcessedWebhookEvent.objects.exists()

    def test_handler_failure_leaves_event_retryable(self, order):
        event = make_event("evt_1", "payment_intent.succeeded", order)

        with mock.patch.object(
            PaymentReconciler, "handle_payment_succeeded", side_effect=RuntimeError("boom")
        ):
            assert PaymentReconciler.process_event(event) == "failed"

        assert not ProcessedWebhookEvent.objects.filter(event_id="evt_1").exists()

        # Redelivery succeeds once the fault is gone.
        assert PaymentReconciler.process_event(event) == ProcessedWebhookEvent.Outcome.APPLIED
