from django.db import models
from django.utils.translation import gettext_lazy as _


class ProcessedWebhookEvent(models.Model):
    """
    A payment-provider event that has been applied.

    Written in the same transaction as the event's effects, so a row here
    means the effects are committed and a redelivery can be skipped.
    """

    class Outcome(models.TextChoices):
        APPLIED = "applied", _("Applied")
        NO_OP = "no_op", _("Already Applied")
        UNRESOLVED = "unresolved", _("Order Not Resolved")

    event_id = models.CharField(max_length=255, unique=True)
    event_type = models.CharField(max_length=100)
    payment_reference = models.CharField(max_length=255, blank=True)
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payment_events",
    )
    outcome = models.CharField(max_length=20, choices=Outcome.choices, default=Outcome.APPLIED)
    processed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-processed_at"]

    def __str__(self):
        return f"{self.event_type} {self.event_id} ({self.outcome})"
