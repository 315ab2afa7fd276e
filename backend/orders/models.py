import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils.translation import gettext_lazy as _

from .calculators import PricingEngine


class OrderQuerySet(models.QuerySet):
    def visible_to(self, actor):
        """Orders an actor may list or read."""
        if actor.is_admin or actor.is_system:
            return self
        if actor.is_restaurant:
            return self.filter(restaurant_id__in=actor.restaurant_ids)
        if actor.is_driver:
            return self.filter(driver_id=actor.driver_id) if actor.driver_id else self.none()
        return self.filter(customer_id=actor.actor_id)

    def available_for_driver(self, driver):
        """The driver work queue: unassigned, ready orders in the driver's zone."""
        return self.filter(
            status=Order.Status.READY_FOR_PICKUP,
            driver__isnull=True,
            restaurant__region=driver.pickup_zone,
        )


class Order(models.Model):
    class Status(models.TextChoices):
        NEW = "new", _("New")
        CONFIRMED = "confirmed", _("Confirmed")
        PREPARING = "preparing", _("Preparing")
        READY_FOR_PICKUP = "ready_for_pickup", _("Ready For Pickup")
        ASSIGNED = "assigned", _("Assigned")
        IN_TRANSIT = "in_transit", _("In Transit")
        DELIVERED = "delivered", _("Delivered")
        CANCELLED = "cancelled", _("Cancelled")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        COMPLETED = "completed", _("Completed")
        FAILED = "failed", _("Failed")
        REFUNDED = "refunded", _("Refunded")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(max_length=32, unique=True, editable=False)
    # Only moved through FulfillmentService, always as a conditional update.
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.NEW, db_index=True
    )

    # Exactly one of: a registered customer, or guest contact details.
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
    )
    guest_name = models.CharField(max_length=255, blank=True)
    guest_email = models.EmailField(blank=True)
    guest_phone = models.CharField(max_length=20, blank=True)

    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.PROTECT, related_name="orders"
    )
    driver = models.ForeignKey(
        "drivers.Driver",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    delivery_address = models.CharField(max_length=255)
    delivery_city = models.CharField(max_length=100)
    delivery_postal_code = models.CharField(max_length=20, blank=True)
    delivery_latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    delivery_longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    delivery_instructions = models.TextField(blank=True)
    scheduled_delivery_time = models.DateTimeField(null=True, blank=True)
    actual_delivery_time = models.DateTimeField(null=True, blank=True)

    # Financial snapshot. total_amount is always derived in save().
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING
    )
    payment_method = models.CharField(max_length=50, blank=True)
    payment_reference = models.CharField(
        max_length=255, blank=True, help_text=_("Payment provider reference (Stripe PaymentIntent id)")
    )

    voucher = models.ForeignKey(
        "vouchers.Voucher",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    voucher_code = models.CharField(max_length=50, blank=True)

    # Shared with the customer; the driver must present it to complete delivery.
    delivery_code = models.CharField(max_length=16, editable=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OrderQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["restaurant", "status"]),
            models.Index(fields=["driver", "status"]),
            models.Index(fields=["customer", "-created_at"]),
            models.Index(fields=["payment_reference"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(customer__isnull=False, guest_email="")
                    | (Q(customer__isnull=True) & ~Q(guest_email=""))
                ),
                name="order_registered_xor_guest",
            ),
            models.CheckConstraint(
                condition=Q(discount_amount__lte=F("subtotal")),
                name="order_discount_within_subtotal",
            ),
            models.CheckConstraint(
                condition=Q(total_amount__gte=0),
                name="order_total_non_negative",
            ),
        ]

    def __str__(self):
        return f"Order {self.order_number} ({self.status})"

    def save(self, *args, **kwargs):
        self.total_amount = PricingEngine.compute_total(
            self.subtotal, self.delivery_fee, self.tax_amount, self.discount_amount
        )
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "total_amount" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["total_amount"]
        super().save(*args, **kwargs)

    @property
    def is_guest(self):
        return self.customer_id is None

    @property
    def is_terminal(self):
        return self.status in (self.Status.DELIVERED, self.Status.CANCELLED)

    @property
    def customer_identity(self):
        from .identity import CustomerIdentity

        return CustomerIdentity.for_order(self)


class OrderItem(models.Model):
    """Line snapshot. Name and price are copied from the menu at order time."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    menu_item = models.ForeignKey(
        "restaurants.MenuItem",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )
    name = models.CharField(max_length=255)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    line_subtotal = models.DecimalField(max_digits=10, decimal_places=2)
    special_instructions = models.TextField(blank=True)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(condition=Q(quantity__gte=1), name="order_item_quantity_positive"),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.name}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError("Order items are immutable once created")
        self.line_subtotal = self.unit_price * self.quantity
        super().save(*args, **kwargs)
