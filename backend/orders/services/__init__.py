"""
Orders services package.

- FulfillmentService: order placement, status transitions, driver
  acceptance and delivery confirmation
- OrderNotificationService: notification fan-out for order events
"""

from .fulfillment_service import DeliveryDetails, FulfillmentService
from .notification_service import OrderNotificationService

__all__ = [
    'DeliveryDetails',
    'FulfillmentService',
    'OrderNotificationService',
]
