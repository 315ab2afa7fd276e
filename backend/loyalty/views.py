from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from users.permissions import IsCustomer

from .serializers import (
    LoyaltyRedeemResponseSerializer,
    LoyaltyRedeemSerializer,
    LoyaltySummarySerializer,
)
from .services import LoyaltyService


class LoyaltySummaryView(APIView):
    permission_classes = [IsCustomer]

    def get(self, request, *args, **kwargs):
        summary = LoyaltyService.summary(request.user)
        return Response(LoyaltySummarySerializer(summary).data)


class LoyaltyRedeemView(APIView):
    permission_classes = [IsCustomer]

    def post(self, request, *args, **kwargs):
        serializer = LoyaltyRedeemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        voucher = LoyaltyService.redeem_points(
            request.user,
            serializer.validated_data["points"],
            serializer.validated_data["reward_type"],
        )
        account = LoyaltyService.get_or_create_account(request.user)
        payload = LoyaltyRedeemResponseSerializer(
            {"voucher": voucher, "points_balance": account.points_balance}
        ).data
        return Response(payload, status=status.HTTP_201_CREATED)
