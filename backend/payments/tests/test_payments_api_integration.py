"""
Payments API Integration Tests

Covers payment-intent creation and the Stripe webhook endpoint.

Webhook tests sign their payloads with HMAC-SHA256 exactly as Stripe does,
so the real signature verification runs. For manual testing against live
events use the Stripe CLI:

    stripe listen --forward-to localhost:8000/api/payments/webhooks/stripe/
    stripe trigger payment_intent.succeeded
"""
import hashlib
import hmac
import json
import time
from unittest import mock

import pytest
import stripe
from decimal import Decimal
from rest_framework import status

from orders.models import Order
from payments.exceptions import OrderAlreadyPaidError, PaymentProviderError
from payments.models import ProcessedWebhookEvent
from payments.services import PaymentIntentService

WEBHOOK_URL = "/api/payments/webhooks/stripe/"
INTENT_URL = "/api/payments/create-payment-intent/"


def generate_stripe_webhook_signature(payload, secret):
    """
    Generate a valid Stripe webhook signature for testing.

    The signature scheme is: t=timestamp,v1=signature
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")

    timestamp = int(time.time())
    signed_payload = f"{timestamp}.{payload.decode('utf-8')}"

    signature = hmac.new(
        secret.encode("utf-8"),
        signed_payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()

    return f"t={timestamp},v1={signature}"


def succeeded_event(order, event_id="evt_test_webhook"):
    return {
        "id": event_id,
        "object": "event",
        "type": "payment_intent.succeeded",
        "data": {
            "object": {
                "id": "pi_test_123",
                "object": "payment_intent",
                "amount": 2832,
                "currency": "chf",
                "metadata": {"order_id": str(order.pk), "order_number": order.order_number},
            }
        },
    }


# ============================================================================
# PAYMENT INTENT SERVICE
# ============================================================================

@pytest.mark.django_db
class TestPaymentIntentService:
    def test_creates_intent_for_order_total(self, order, mock_stripe):
        result = PaymentIntentService.create_for_order(order)

        kwargs = mock_stripe.call_args.kwargs
        assert kwargs["amount"] == 2832
        assert kwargs["currency"] == "chf"
        assert kwargs["metadata"]["order_id"] == str(order.pk)
        assert kwargs["receipt_email"] == "anna@example.com"
        assert kwargs["idempotency_key"] == f"order-{order.pk}-2832"

        assert result["client_secret"] == "pi_test_123_secret_abc"
        assert result["amount"] == Decimal("28.32")

        order.refresh_from_db()
        assert order.payment_reference == "pi_test_123"
        assert order.payment_method == "card"

    def test_paid_order_cannot_be_charged_again(self, order, mock_stripe):
        Order.objects.filter(pk=order.pk).update(payment_status=Order.PaymentStatus.COMPLETED)
        order.refresh_from_db()

        with pytest.raises(OrderAlreadyPaidError):
            PaymentIntentService.create_for_order(order)
        mock_stripe.assert_not_called()

    def test_provider_error_is_wrapped(self, order, mock_stripe):
        mock_stripe.side_effect = stripe.StripeError("card network down")

        with pytest.raises(PaymentProviderError):
            PaymentIntentService.create_for_order(order)

        order.refresh_from_db()
        assert order.payment_reference == ""


@pytest.mark.django_db
class TestCreatePaymentIntentAPI:
    def test_customer_pays_own_order(self, authenticated_client, customer_user, order, mock_stripe):
        client = authenticated_client(customer_user)

        response = client.post(INTENT_URL, {"order_id": str(order.pk)}, format="json")

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["payment_intent_id"] == "pi_test_123"
        assert response.data["amount"] == "28.32"

    def test_other_customer_gets_not_found(self, authenticated_client, other_customer_user, order, mock_stripe):
        client = authenticated_client(other_customer_user)

        response = client.post(INTENT_URL, {"order_id": str(order.pk)}, format="json")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error"]["code"] == "RESOURCE_NOT_FOUND"
        mock_stripe.assert_not_called()

    def test_guest_proves_ownership_with_email(self, api_client, order_factory, mock_stripe):
        guest_order = order_factory(guest_email="guest@example.com")

        response = api_client.post(
            INTENT_URL,
            {"order_id": str(guest_order.pk), "guest_email": "Guest@Example.com"},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED

    def test_guest_with_wrong_email_gets_not_found(self, api_client, order_factory, mock_stripe):
        guest_order = order_factory(guest_email="guest@example.com")

        response = api_client.post(
            INTENT_URL,
            {"order_id": str(guest_order.pk), "guest_email": "someone@example.com"},
            format="json",
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_invalid_order_id(self, api_client):
        response = api_client.post(INTENT_URL, {"order_id": "nope"}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error"]["code"] == "VALIDATION_ERROR"


# ============================================================================
# WEBHOOK ENDPOINT
# ============================================================================

@pytest.mark.django_db
class TestStripeWebhookAPI:
    def post_event(self, client, event, secret="whsec_test_secret"):
        payload = json.dumps(event)
        return client.post(
            WEBHOOK_URL,
            data=payload,
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE=generate_stripe_webhook_signature(payload, secret),
        )

    def test_valid_event_is_applied(self, api_client, order):
        response = self.post_event(api_client, succeeded_event(order))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {"received": True}
        order.refresh_from_db()
        assert order.payment_status == Order.PaymentStatus.COMPLETED
        assert order.status == Order.Status.CONFIRMED

    def test_applied_from_verified_body_not_provider_object(self, api_client, order):
        # Newer stripe releases return an Event that is not a dict.
        with mock.patch.object(stripe.Webhook, "construct_event", return_value=object()) as verify:
            response = self.post_event(api_client, succeeded_event(order))

        assert verify.call_count == 1
        assert response.status_code == status.HTTP_200_OK
        order.refresh_from_db()
        assert order.payment_status == Order.PaymentStatus.COMPLETED

    def test_duplicate_delivery_still_acknowledged(self, api_client, order):
        event = succeeded_event(order)
        self.post_event(api_client, event)

        response = self.post_event(api_client, event)

        assert response.status_code == status.HTTP_200_OK
        assert ProcessedWebhookEvent.objects.count() == 1

    def test_bad_signature_rejected(self, api_client, order):
        response = self.post_event(api_client, succeeded_event(order), secret="whsec_wrong")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error"]["code"] == "INVALID_WEBHOOK"
        order.refresh_from_db()
        assert order.payment_status == Order.PaymentStatus.PENDING

    def test_invalid_payload_rejected(self, api_client):
        payload = "not json"
        response = api_client.post(
            WEBHOOK_URL,
            data=payload,
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE=generate_stripe_webhook_signature(payload, "whsec_test_secret"),
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unresolvable_event_acknowledged(self, api_client, order):
        event = succeeded_event(order)
        event["data"]["object"]["metadata"] = {}

        response = self.post_event(api_client, event)

        assert response.status_code == status.HTTP_200_OK
        record = ProcessedWebhookEvent.objects.get(event_id="evt_test_webhook")
        assert record.outcome == ProcessedWebhookEvent.Outcome.UNRESOLVED
