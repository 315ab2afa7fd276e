from django.conf import settings
from django.db import models


class Notification(models.Model):
    """
    An in-app notification waiting to be delivered to a user.
    Push/email delivery picks these up; this app only stores them.
    """

    class Type(models.TextChoices):
        NEW_ORDER = "new_order", "New Order"
        ORDER_STATUS = "order_status", "Order Status"
        ORDER_ASSIGNED = "order_assigned", "Order Assigned"
        ORDER_READY = "order_ready", "Order Ready For Pickup"
        ORDER_DELIVERED = "order_delivered", "Order Delivered"
        ORDER_CANCELLED = "order_cancelled", "Order Cancelled"
        PAYMENT = "payment", "Payment"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    type = models.CharField(max_length=30, choices=Type.choices)
    title = models.CharField(max_length=255)
    message = models.TextField()
    data = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "is_read", "-created_at"]),
        ]

    def __str__(self):
        return f"{self.type} -> {self.user_id}: {self.title}"
