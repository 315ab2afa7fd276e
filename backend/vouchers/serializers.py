from decimal import Decimal

from rest_framework import serializers

from .models import Voucher


class VoucherSerializer(serializers.ModelSerializer):
    remaining_uses = serializers.IntegerField(read_only=True)

    class Meta:
        model = Voucher
        fields = [
            "id",
            "code",
            "description",
            "discount_type",
            "discount_value",
            "min_order_amount",
            "max_discount_amount",
            "usage_limit",
            "usage_count",
            "remaining_uses",
            "valid_from",
            "valid_until",
            "status",
        ]
        read_only_fields = fields


class VoucherValidateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    subtotal = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.01")
    )
