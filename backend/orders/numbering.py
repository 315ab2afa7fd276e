"""Human-facing order identifiers."""
from django.conf import settings
from django.utils import timezone

from core_backend.utils.codes import random_base36


def generate_order_number(now=None) -> str:
    """``<prefix>-<YYYYMMDD>-<4 base36 chars>``, e.g. ``ORD-20250314-7K2Q``."""
    now = now or timezone.now()
    prefix = getattr(settings, "ORDER_NUMBER_PREFIX", "ORD")
    return f"{prefix}-{timezone.localdate(now):%Y%m%d}-{random_base36(4)}"


def generate_delivery_code() -> str:
    return random_base36(getattr(settings, "DELIVERY_CODE_LENGTH", 6))
