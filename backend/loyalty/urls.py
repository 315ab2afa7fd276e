from django.urls import path

from .views import LoyaltyRedeemView, LoyaltySummaryView

app_name = "loyalty"

urlpatterns = [
    path("", LoyaltySummaryView.as_view(), name="loyalty-summary"),
    path("redeem/", LoyaltyRedeemView.as_view(), name="loyalty-redeem"),
]
