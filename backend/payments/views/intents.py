"""
Payment-intent creation for an order, for both registered and guest
customers.
"""

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
import logging

from core_backend.exceptions import ResourceNotFoundError
from core_backend.utils import get_client_ip
from orders.models import Order
from users.identity import Actor

from ..serializers import CreatePaymentIntentSerializer, PaymentIntentSerializer
from ..services import PaymentIntentService

logger = logging.getLogger(__name__)


@method_decorator(
    ratelimit(key=get_client_ip, rate="20/m", method="POST", block=True), name="post"
)
class CreatePaymentIntentView(APIView):
    """
    Creates a Stripe Payment Intent for an order.

    Registered orders can only be paid by their customer (or an admin);
    guest orders require the guest email used at checkout.
    """

    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = CreatePaymentIntentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = self._get_payable_order(request, serializer.validated_data)
        result = PaymentIntentService.create_for_order(order)
        return Response(PaymentIntentSerializer(result).data, status=status.HTTP_201_CREATED)

    def _get_payable_order(self, request, data):
        order = Order.objects.select_related("customer").filter(pk=data["order_id"]).first()
        if order is None:
            raise ResourceNotFoundError("Order not found")

        user = request.user
        if order.customer_id is not None:
            allowed = bool(
                user
                and user.is_authenticated
                and (user.pk == order.customer_id or Actor.from_user(user).is_admin)
            )
        else:
            guest_email = (data.get("guest_email") or "").strip().lower()
            allowed = bool(guest_email) and guest_email == order.guest_email.lower()

        # Indistinguishable from a missing order.
        if not allowed:
            raise ResourceNotFoundError("Order not found")
        return order
