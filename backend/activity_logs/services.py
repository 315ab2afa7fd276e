import json
from typing import Optional
import logging

from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction

from .models import ActivityLog

logger = logging.getLogger(__name__)


class ActivityLogService:
    @staticmethod
    def record(actor, entity_type: str, entity_id, action: str, details: Optional[dict] = None) -> Optional[ActivityLog]:
        """
        Append an audit record. ``actor`` is a users.identity.Actor or None.

        Failures are logged and swallowed; auditing never blocks the
        operation being audited.
        """
        try:
            # Decimals and UUIDs in details must survive the JSON column.
            payload = json.loads(json.dumps(details or {}, cls=DjangoJSONEncoder))
            with transaction.atomic():
                return ActivityLog.objects.create(
                    actor_id=getattr(actor, "actor_id", None),
                    actor_role=getattr(actor, "role", "") or "",
                    entity_type=entity_type,
                    entity_id=str(entity_id),
                    action=action,
                    details=payload,
                )
        except Exception as e:
            logger.error(f"Failed to record activity {entity_type}:{entity_id} {action}: {e}", exc_info=True)
            return None
