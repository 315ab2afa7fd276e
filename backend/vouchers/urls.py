from django.urls import path

from .views import VoucherValidateView

app_name = "vouchers"

urlpatterns = [
    path("validate/", VoucherValidateView.as_view(), name="voucher-validate"),
]
