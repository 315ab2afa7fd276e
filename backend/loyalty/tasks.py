from celery import shared_task
import logging

logger = logging.getLogger(__name__)


@shared_task
def award_loyalty_points(order_id):
    """
    Credit loyalty points for a freshly created order.

    Queued from the order transaction's on_commit hook. The award is
    idempotent per order, so a redelivered task is harmless.
    """
    from .services import LoyaltyService

    try:
        entry = LoyaltyService.award_points_for_order(order_id)
    except Exception as e:
        logger.error(f"Loyalty award for order {order_id} failed: {e}", exc_info=True)
        raise

    return entry.points if entry else 0
