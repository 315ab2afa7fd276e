import django_filters
from django.db import models
from django.utils import timezone
from datetime import datetime, time
import logging

logger = logging.getLogger(__name__)


class FlexibleDateTimeFilter(django_filters.DateTimeFilter):
    """
    DateTimeFilter that reads a date-only value as a whole local day.

    ``?created_before=2025-03-14`` includes every order placed on the 14th
    (Europe/Zurich), not just those stamped exactly at midnight. Full
    datetimes pass through unchanged.
    """

    UPPER_BOUND_LOOKUPS = ("lte", "lt")

    def filter(self, qs, value):
        if (
            isinstance(value, datetime)
            and self.lookup_expr in self.UPPER_BOUND_LOOKUPS
            and timezone.localtime(value).time() == time.min
        ):
            local_day = timezone.localtime(value).date()
            value = timezone.make_aware(datetime.combine(local_day, time.max))
            logger.debug(f"{self.field_name}__{self.lookup_expr} widened to end of day {value}")

        return super().filter(qs, value)


class BaseFilterSet(django_filters.FilterSet):
    """Filter set with a ``created_at`` range; DateTimeFields get day-aware filters."""

    created_after = FlexibleDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_before = FlexibleDateTimeFilter(field_name="created_at", lookup_expr="lte")

    @classmethod
    def filter_for_field(cls, field, field_name, lookup_expr="exact"):
        if isinstance(field, models.DateTimeField):
            return FlexibleDateTimeFilter(field_name=field_name, lookup_expr=lookup_expr)
        return super().filter_for_field(field, field_name, lookup_expr)
