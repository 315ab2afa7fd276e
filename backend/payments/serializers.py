from rest_framework import serializers

from .models import ProcessedWebhookEvent


class CreatePaymentIntentSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    # Proves ownership of a guest order.
    guest_email = serializers.EmailField(required=False, allow_blank=True)


class PaymentIntentSerializer(serializers.Serializer):
    client_secret = serializers.CharField()
    payment_intent_id = serializers.CharField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    currency = serializers.CharField()
    order_id = serializers.CharField()


class ProcessedWebhookEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProcessedWebhookEvent
        fields = ["event_id", "event_type", "payment_reference", "order", "outcome", "processed_at"]
