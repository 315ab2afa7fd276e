"""
Orders serializers package.
"""

from .order_serializers import (
    OrderCreateSerializer,
    OrderItemInputSerializer,
    OrderItemSerializer,
    OrderSerializer,
)
from .status_serializers import ConfirmDeliverySerializer, UpdateOrderStatusSerializer

__all__ = [
    'OrderCreateSerializer',
    'OrderItemInputSerializer',
    'OrderItemSerializer',
    'OrderSerializer',
    'ConfirmDeliverySerializer',
    'UpdateOrderStatusSerializer',
]
