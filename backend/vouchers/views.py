from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.utils import get_client_ip

from .serializers import VoucherValidateSerializer
from .services import VoucherLedger


@method_decorator(
    ratelimit(key=get_client_ip, rate="20/m", method="POST", block=True),
    name="post",
)
class VoucherValidateView(APIView):
    """
    Read-only voucher check used by checkout before the order is placed.
    Nothing is consumed here; redemption happens inside order creation.
    """

    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = VoucherValidateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        subtotal = serializer.validated_data["subtotal"]

        result = VoucherLedger.validate(serializer.validated_data["code"], subtotal)
        if not result.valid:
            result.raise_error()

        voucher = result.voucher
        return Response(
            {
                "valid": True,
                "code": voucher.code,
                "discount_type": voucher.discount_type,
                "discount_value": str(voucher.discount_value),
                "discount_amount": str(result.discount_amount),
                "subtotal_after_discount": str(subtotal - result.discount_amount),
            },
            status=status.HTTP_200_OK,
        )
