from decimal import Decimal

from rest_framework import serializers

from orders.models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = [
            "id",
            "menu_item",
            "name",
            "unit_price",
            "quantity",
            "line_subtotal",
            "special_instructions",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """
    Read representation of an order.

    ``delivery_code`` is only included when the view passes
    ``show_delivery_code`` in the context (the customer's own views).
    """

    items = OrderItemSerializer(many=True, read_only=True)
    restaurant_name = serializers.CharField(source="restaurant.name", read_only=True)
    restaurant_region = serializers.CharField(source="restaurant.region", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "customer",
            "guest_name",
            "guest_email",
            "guest_phone",
            "restaurant",
            "restaurant_name",
            "restaurant_region",
            "driver",
            "delivery_address",
            "delivery_city",
            "delivery_postal_code",
            "delivery_latitude",
            "delivery_longitude",
            "delivery_instructions",
            "scheduled_delivery_time",
            "actual_delivery_time",
            "subtotal",
            "delivery_fee",
            "discount_amount",
            "tax_amount",
            "total_amount",
            "payment_status",
            "payment_method",
            "voucher_code",
            "delivery_code",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if not self.context.get("show_delivery_code"):
            data.pop("delivery_code", None)
        return data


class OrderItemInputSerializer(serializers.Serializer):
    menu_item_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1)
    special_instructions = serializers.CharField(required=False, allow_blank=True, max_length=500)


class OrderCreateSerializer(serializers.Serializer):
    restaurant_id = serializers.IntegerField()
    items = OrderItemInputSerializer(many=True, allow_empty=False)

    delivery_address = serializers.CharField(max_length=255)
    delivery_city = serializers.CharField(max_length=100)
    delivery_postal_code = serializers.CharField(max_length=20, required=False, allow_blank=True)
    delivery_latitude = serializers.DecimalField(
        max_digits=9, decimal_places=6, required=False, allow_null=True,
        min_value=Decimal("-90"), max_value=Decimal("90"),
    )
    delivery_longitude = serializers.DecimalField(
        max_digits=9, decimal_places=6, required=False, allow_null=True,
        min_value=Decimal("-180"), max_value=Decimal("180"),
    )
    delivery_instructions = serializers.CharField(required=False, allow_blank=True)
    scheduled_delivery_time = serializers.DateTimeField(required=False, allow_null=True)

    voucher_code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    payment_method = serializers.CharField(max_length=50, required=False, allow_blank=True)

    # Guest checkout
    guest_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    guest_email = serializers.EmailField(required=False, allow_blank=True)
    guest_phone = serializers.CharField(max_length=20, required=False, allow_blank=True)

    def validate(self, attrs):
        request = self.context.get("request")
        is_authenticated = bool(request and request.user and request.user.is_authenticated)
        if not is_authenticated:
            missing = [field for field in ("guest_name", "guest_email") if not attrs.get(field)]
            if missing:
                raise serializers.ValidationError(
                    {field: "This field is required for guest orders." for field in missing}
                )
        return attrs
