from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class Region(models.TextChoices):
    """Operating regions. A driver's pickup zone is one of these."""

    BASEL = "Basel", _("Basel")
    BERN = "Bern", _("Bern")
    LUZERN = "Luzern", _("Luzern")
    ZURICH = "Zurich", _("Zurich")
    OLTEN = "Olten", _("Olten")


class Restaurant(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", _("Pending Approval")
        ACTIVE = "active", _("Active")
        INACTIVE = "inactive", _("Inactive")

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="restaurants",
    )
    name = models.CharField(max_length=255)
    region = models.CharField(max_length=20, choices=Region.choices)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING
    )
    min_order_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("The minimum subtotal required to place an order."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["region", "status"]),
        ]

    def __str__(self):
        return f"{self.name} ({self.region})"

    @property
    def is_accepting_orders(self):
        return self.status == self.Status.ACTIVE

    @property
    def has_coordinates(self):
        return self.latitude is not None and self.longitude is not None


class MenuItem(models.Model):
    class Status(models.TextChoices):
        ACTIVE = "active", _("Active")
        INACTIVE = "inactive", _("Inactive")

    restaurant = models.ForeignKey(
        Restaurant, on_delete=models.CASCADE, related_name="menu_items"
    )
    name = models.CharField(max_length=255)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.ACTIVE
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["restaurant", "name"]
        indexes = [
            models.Index(fields=["restaurant", "status"]),
        ]

    def __str__(self):
        return f"{self.name} - {self.price}"

    @property
    def is_available(self):
        return self.status == self.Status.ACTIVE
