from rest_framework import serializers

from vouchers.serializers import VoucherSerializer

from .models import LoyaltyTransaction


class LoyaltyTransactionSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True, default=None)
    voucher_code = serializers.CharField(source="voucher.code", read_only=True, default=None)

    class Meta:
        model = LoyaltyTransaction
        fields = [
            "id",
            "transaction_type",
            "points",
            "description",
            "order_number",
            "voucher_code",
            "created_at",
        ]


class RewardSerializer(serializers.Serializer):
    reward_type = serializers.CharField()
    points = serializers.IntegerField()
    discount_value = serializers.DecimalField(max_digits=5, decimal_places=2)


class LoyaltySummarySerializer(serializers.Serializer):
    points_balance = serializers.IntegerField()
    lifetime_points = serializers.IntegerField()
    recent_transactions = LoyaltyTransactionSerializer(many=True)
    rewards = RewardSerializer(many=True)


class LoyaltyRedeemSerializer(serializers.Serializer):
    reward_type = serializers.CharField(max_length=50)
    points = serializers.IntegerField(min_value=1)


class LoyaltyRedeemResponseSerializer(serializers.Serializer):
    voucher = VoucherSerializer()
    points_balance = serializers.IntegerField()
