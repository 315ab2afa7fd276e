from rest_framework import serializers

from orders.models import Order


class UpdateOrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.Status.choices)
    # Required when moving to delivered.
    delivery_code = serializers.CharField(required=False, allow_blank=True, max_length=16)
    # Admin assignment only.
    driver_id = serializers.IntegerField(required=False)


class ConfirmDeliverySerializer(serializers.Serializer):
    delivery_code = serializers.CharField(max_length=16)
