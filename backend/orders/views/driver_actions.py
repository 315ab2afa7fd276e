from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from core_backend.exceptions import ResourceNotFoundError
from drivers.models import Driver
from orders.models import Order
from orders.services import FulfillmentService
from users.permissions import IsDriver


class DriverActionsMixin:
    """
    Driver work queue and order acceptance.

    Acceptance looks the order up outside the driver's usual scope (a driver
    only sees orders assigned to them), so a driver can claim a ready order.
    """

    @action(detail=True, methods=["post"], url_path="accept", permission_classes=[IsDriver])
    def accept(self, request: Request, pk=None) -> Response:
        order = self.get_object()
        order = FulfillmentService.accept_order(self.get_actor(), order)
        return Response(self.get_serializer(order).data)

    @action(detail=False, methods=["get"], url_path="available", permission_classes=[IsDriver])
    def available(self, request: Request) -> Response:
        driver = Driver.objects.filter(user=request.user).first()
        if driver is None:
            raise ResourceNotFoundError("Driver profile not found")

        queryset = self.filter_queryset(
            Order.objects.available_for_driver(driver)
            .select_related("restaurant")
            .prefetch_related("items")
        )
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(queryset, many=True).data)
