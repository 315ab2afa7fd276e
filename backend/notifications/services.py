from typing import Optional
import logging

from django.db import transaction
from django.utils import timezone

from .models import Notification

logger = logging.getLogger(__name__)


class NotificationService:
    @staticmethod
    def enqueue(user_id, type: str, title: str, message: str, data: Optional[dict] = None) -> Optional[Notification]:
        """
        Store a notification for ``user_id``.

        Never raises: a failed enqueue is logged and None is returned, so the
        operation that triggered it goes ahead. The insert runs in its own
        savepoint so a failure can't poison an enclosing transaction.
        """
        if user_id is None:
            return None

        try:
            with transaction.atomic():
                notification = Notification.objects.create(
                    user_id=user_id,
                    type=type,
                    title=title,
                    message=message,
                    data=data or {},
                )
        except Exception as e:
            logger.error(f"Failed to enqueue {type} notification for user {user_id}: {e}", exc_info=True)
            return None

        logger.debug(f"Enqueued {type} notification {notification.pk} for user {user_id}")
        return notification

    @staticmethod
    def mark_read(notification: Notification) -> Notification:
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = timezone.now()
            notification.save(update_fields=["is_read", "read_at"])
        return notification

    @staticmethod
    def mark_all_read(user) -> int:
        return Notification.objects.filter(user=user, is_read=False).update(
            is_read=True, read_at=timezone.now()
        )
