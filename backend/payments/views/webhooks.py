"""
Webhook views for payment providers.

Handles webhook callbacks from Stripe. Once the signature checks out the
event is always acknowledged with 200, whatever happens while applying it.
"""

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from django.views.decorators.csrf import csrf_exempt
from django.utils.decorators import method_decorator
from django.conf import settings
import stripe
import logging
import json

from ..services import PaymentReconciler

logger = logging.getLogger(__name__)


@method_decorator(csrf_exempt, name="dispatch")
class StripeWebhookView(APIView):
    """
    Stripe webhook view to handle asynchronous payment-intent events.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        payload = request.body
        sig_header = request.META.get("HTTP_STRIPE_SIGNATURE")
        endpoint_secret = settings.STRIPE_WEBHOOK_SECRET

        try:
            event = stripe.Webhook.construct_event(payload, sig_header, endpoint_secret)
        except ValueError as e:
            # Invalid payload
            logger.error(f"Stripe webhook: Invalid payload - {e}")
            return self._rejected("Invalid payload")
        except stripe.SignatureVerificationError as e:
            # Invalid signature
            logger.error(f"Stripe webhook: Invalid signature - {e}")
            return self._rejected("Invalid signature")

        # construct_event only verifies; the reconciler works on the plain JSON body.
        event = json.loads(payload)
        outcome = PaymentReconciler.process_event(event)
        logger.info(f"Stripe webhook {event['type']} ({event['id']}): {outcome}")
        return Response({"received": True}, status=status.HTTP_200_OK)

    @staticmethod
    def _rejected(message):
        return Response(
            {"error": {"code": "INVALID_WEBHOOK", "message": message}},
            status=status.HTTP_400_BAD_REQUEST,
        )
