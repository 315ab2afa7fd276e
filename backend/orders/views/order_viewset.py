from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from core_backend.base import ReadOnlyBaseViewSet
from core_backend.utils import get_client_ip
from orders.filters import OrderFilter
from orders.identity import GuestCustomer, RegisteredCustomer
from orders.models import Order
from orders.permissions import CanPlaceOrReadOrders
from orders.serializers import OrderCreateSerializer, OrderSerializer
from orders.services import DeliveryDetails, FulfillmentService
from users.identity import Actor

from .driver_actions import DriverActionsMixin
from .status_actions import StatusActionsMixin

logger = logging.getLogger(__name__)


class OrderViewSet(StatusActionsMixin, DriverActionsMixin, ReadOnlyBaseViewSet):
    """
    ViewSet for orders.

    - create: guest or authenticated order placement
    - list/retrieve: scoped to what the requesting actor may see
    - Status transitions (StatusActionsMixin)
    - Driver queue and acceptance (DriverActionsMixin)
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    permission_classes = [CanPlaceOrReadOrders]
    filterset_class = OrderFilter
    ordering_fields = ["created_at", "total_amount", "status"]

    def get_actor(self) -> Actor:
        if not hasattr(self, "_actor"):
            self._actor = Actor.from_user(self.request.user)
        return self._actor

    def get_queryset(self):
        queryset = super().get_queryset().select_related("restaurant", "driver").prefetch_related("items")
        if self.action == "accept":
            return queryset
        return queryset.visible_to(self.get_actor())

    def get_serializer_context(self):
        context = super().get_serializer_context()
        user = self.request.user
        if user and user.is_authenticated:
            actor = self.get_actor()
            context["show_delivery_code"] = actor.is_customer or actor.is_admin
        return context

    @method_decorator(ratelimit(key=get_client_ip, rate="30/m", method="POST", block=True))
    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = OrderCreateSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        user = request.user
        if user and user.is_authenticated:
            customer = RegisteredCustomer(user_id=user.pk)
            actor = self.get_actor()
        else:
            customer = GuestCustomer(
                name=data["guest_name"],
                email=data["guest_email"],
                phone=data.get("guest_phone", ""),
            )
            actor = None

        order = FulfillmentService.create_order(
            customer=customer,
            restaurant_id=data["restaurant_id"],
            items=[dict(item) for item in data["items"]],
            delivery=DeliveryDetails(
                address=data["delivery_address"],
                city=data["delivery_city"],
                postal_code=data.get("delivery_postal_code", ""),
                latitude=data.get("delivery_latitude"),
                longitude=data.get("delivery_longitude"),
                instructions=data.get("delivery_instructions", ""),
            ),
            scheduled_delivery_time=data.get("scheduled_delivery_time"),
            voucher_code=data.get("voucher_code") or None,
            payment_method=data.get("payment_method", ""),
            actor=actor,
        )

        # The customer (guest included) needs the delivery code to hand to the driver.
        payload = OrderSerializer(order, context={**self.get_serializer_context(), "show_delivery_code": True}).data
        return Response(payload, status=status.HTTP_201_CREATED)
