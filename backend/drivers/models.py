from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from restaurants.models import Region


class Driver(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", _("Pending Approval")
        ACTIVE = "active", _("Active")
        INACTIVE = "inactive", _("Inactive")
        SUSPENDED = "suspended", _("Suspended")

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="driver_profile",
    )
    pickup_zone = models.CharField(max_length=20, choices=Region.choices)
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING
    )
    vehicle_type = models.CharField(max_length=50, blank=True)

    # Only ever moved by DriverEarningsService.record_delivery().
    total_deliveries = models.PositiveIntegerField(default=0)
    total_earnings = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["pickup_zone", "status"]),
        ]

    def __str__(self):
        return f"Driver {self.user} ({self.pickup_zone}, {self.status})"

    @property
    def is_active(self):
        return self.status == self.Status.ACTIVE
