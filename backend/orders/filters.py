import django_filters

from core_backend.base.filters import BaseFilterSet
from .models import Order


class OrderFilter(BaseFilterSet):
    """
    Order listing filters. ``created_after``/``created_before`` come from
    BaseFilterSet and accept date-only values as whole days.
    """

    order_number = django_filters.CharFilter(field_name="order_number", lookup_expr="iexact")

    class Meta:
        model = Order
        fields = {
            'status': ['exact', 'in'],
            'payment_status': ['exact'],
            'restaurant': ['exact'],
            'driver': ['exact'],
        }
