from rest_framework.decorators import action
from rest_framework.response import Response

from core_backend.base import ReadOnlyBaseViewSet

from .models import Notification
from .serializers import NotificationSerializer
from .services import NotificationService


class NotificationViewSet(ReadOnlyBaseViewSet):
    """The requesting user's notification inbox."""

    queryset = Notification.objects.all()
    serializer_class = NotificationSerializer
    filterset_fields = ["is_read", "type"]

    def get_queryset(self):
        return super().get_queryset().filter(user=self.request.user)

    @action(detail=True, methods=["post"], url_path="read")
    def read(self, request, pk=None):
        notification = NotificationService.mark_read(self.get_object())
        return Response(self.get_serializer(notification).data)

    @action(detail=False, methods=["post"], url_path="read-all")
    def read_all(self, request):
        count = NotificationService.mark_all_read(request.user)
        return Response({"updated": count})
