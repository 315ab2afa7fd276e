"""
Order notifications.

Builds the messages for order events and hands them to the notification
sink. Every call here is best-effort; the sink logs and swallows failures.
"""
import logging

from notifications.models import Notification
from notifications.services import NotificationService

from orders.models import Order

logger = logging.getLogger(__name__)

S = Order.Status

CUSTOMER_MESSAGES = {
    S.CONFIRMED: ("Order confirmed", "Your order {number} has been confirmed by {restaurant}."),
    S.PREPARING: ("Order in preparation", "{restaurant} is preparing your order {number}."),
    S.READY_FOR_PICKUP: ("Order ready", "Your order {number} is ready and waiting for a driver."),
    S.ASSIGNED: ("Driver assigned", "A driver has accepted your order {number}."),
    S.IN_TRANSIT: ("On the way", "Your order {number} is on its way."),
    S.DELIVERED: ("Order delivered", "Your order {number} has been delivered. Enjoy your meal!"),
    S.CANCELLED: ("Order cancelled", "Your order {number} has been cancelled."),
}

RESTAURANT_MESSAGES = {
    S.ASSIGNED: ("Driver assigned", "A driver has accepted order {number}."),
    S.DELIVERED: ("Order delivered", "Order {number} has been delivered."),
    S.CANCELLED: ("Order cancelled", "Order {number} has been cancelled."),
}

NOTIFICATION_TYPES = {
    S.ASSIGNED: Notification.Type.ORDER_ASSIGNED,
    S.READY_FOR_PICKUP: Notification.Type.ORDER_READY,
    S.DELIVERED: Notification.Type.ORDER_DELIVERED,
    S.CANCELLED: Notification.Type.ORDER_CANCELLED,
}


class OrderNotificationService:
    @staticmethod
    def _payload(order: Order) -> dict:
        return {
            "order_id": str(order.pk),
            "order_number": order.order_number,
            "status": order.status,
        }

    @staticmethod
    def order_created(order: Order) -> None:
        NotificationService.enqueue(
            order.restaurant.owner_id,
            Notification.Type.NEW_ORDER,
            "New order",
            f"New order {order.order_number} ({order.total_amount}) is waiting for confirmation.",
            OrderNotificationService._payload(order),
        )

    @staticmethod
    def status_changed(order: Order) -> None:
        """
        Fan out a status change: the customer always (if registered), the
        restaurant owner for assigned/delivered/cancelled, and the assigned
        driver, if any, for ready_for_pickup.
        """
        new_status = order.status
        fmt = {"number": order.order_number, "restaurant": order.restaurant.name}
        payload = OrderNotificationService._payload(order)
        notification_type = NOTIFICATION_TYPES.get(new_status, Notification.Type.ORDER_STATUS)

        if new_status in CUSTOMER_MESSAGES:
            title, message = CUSTOMER_MESSAGES[new_status]
            NotificationService.enqueue(
                order.customer_identity.notification_user_id,
                notification_type,
                title,
                message.format(**fmt),
                payload,
            )

        if new_status in RESTAURANT_MESSAGES:
            title, message = RESTAURANT_MESSAGES[new_status]
            NotificationService.enqueue(
                order.restaurant.owner_id, notification_type, title, message.format(**fmt), payload
            )

        if new_status == S.READY_FOR_PICKUP and order.driver_id:
            NotificationService.enqueue(
                order.driver.user_id,
                notification_type,
                "Order ready for pickup",
                f"Order {order.order_number} is ready for pickup at {order.restaurant.name}.",
                payload,
            )
