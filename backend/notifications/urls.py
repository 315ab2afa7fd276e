from django.urls import path, include
from rest_framework import routers

from .views import NotificationViewSet

app_name = "notifications"

router = routers.SimpleRouter()
router.register(r"", NotificationViewSet, basename="notification")

urlpatterns = [
    path("", include(router.urls)),
]
