from decimal import Decimal
import logging

from django.db.models import F
from django.utils import timezone

from core_backend.exceptions import ResourceNotFoundError

from .models import Driver

logger = logging.getLogger(__name__)


class DriverEarningsService:
    """Keeps the driver's cumulative delivery counters."""

    @staticmethod
    def record_delivery(driver_id, delivery_fee: Decimal) -> None:
        """
        Add one delivery and its fee to the driver's totals.

        The increment is a single UPDATE with F() expressions so two
        confirmations landing at the same time can't lose each other's write.
        Must be called inside the transaction that moved the order to
        delivered, which is what makes this exactly-once per order.
        """
        updated = Driver.objects.filter(pk=driver_id).update(
            total_deliveries=F("total_deliveries") + 1,
            total_earnings=F("total_earnings") + delivery_fee,
            updated_at=timezone.now(),
        )
        if not updated:
            raise ResourceNotFoundError("Driver not found")

        logger.info(f"Recorded delivery for driver {driver_id} (+{delivery_fee})")
