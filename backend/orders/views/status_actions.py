from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from orders.serializers import ConfirmDeliverySerializer, UpdateOrderStatusSerializer
from orders.services import FulfillmentService


class StatusActionsMixin:
    """
    Mixin for order status transition actions

    This mixin provides action methods for OrderViewSet.
    """

    @action(detail=True, methods=["post"], url_path="status")
    def update_status(self, request: Request, pk=None) -> Response:
        order = self.get_object()
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = FulfillmentService.transition(
            self.get_actor(),
            order,
            serializer.validated_data["status"],
            delivery_code=serializer.validated_data.get("delivery_code"),
            driver_id=serializer.validated_data.get("driver_id"),
        )
        return Response(self.get_serializer(order).data)

    @action(detail=True, methods=["post"], url_path="confirm-delivery")
    def confirm_delivery(self, request: Request, pk=None) -> Response:
        order = self.get_object()
        serializer = ConfirmDeliverySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = FulfillmentService.confirm_delivery(
            self.get_actor(), order, serializer.validated_data["delivery_code"]
        )
        return Response(self.get_serializer(order).data)
