"""
Kitchen Notifier

Hands new and updated orders with PENDING items to the kitchen. The real
notifier queues the Celery ``notify_kitchen`` task; when notifications
are disabled a recording notifier keeps the payloads in memory instead.
"""

import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Optional

from app.core.config import get_settings
from app.models import Order, OrderItemStatus

logger = logging.getLogger(__name__)


def build_kitchen_payload(order: Order) -> Optional[dict]:
    """
    Kitchen payload for an order, or None when nothing is pending.

    Expects ``order.items``, their products and the table to be loaded.
    """
    pending = [i for i in order.items if i.status == OrderItemStatus.PENDING]
    if not pending:
        return None
    return {
        "order_id": order.id,
        "table_number": order.table.number if order.table else None,
        "items": [
            {
                "item_id": item.id,
                "product_name": item.product.name if item.product else f"#{item.product_id}",
                "quantity": item.quantity,
                "notes": item.notes,
            }
            for item in pending
        ],
    }


class BaseKitchenNotifier(ABC):

    @abstractmethod
    def notify(self, payload: dict) -> None:
        """Send one kitchen payload. Must not raise."""
        pass


class CeleryKitchenNotifier(BaseKitchenNotifier):
    """Queues ``app.tasks.notify_kitchen`` on the Redis broker."""

    def notify(self, payload: dict) -> None:
        from app.tasks import notify_kitchen

        try:
            notify_kitchen.delay(payload)
            logger.info(f"Kitchen ticket queued for order #{payload['order_id']}")
        except Exception as e:
            # Broker down: the order is saved, the ticket is lost
            logger.error(f"Could not queue kitchen ticket for order #{payload['order_id']}: {e}")


class RecordingKitchenNotifier(BaseKitchenNotifier):
    """Keeps payloads in memory. Used when notifications are disabled."""

    def __init__(self):
        self.sent: list[dict] = []

    def notify(self, payload: dict) -> None:
        self.sent.append(payload)
        logger.debug(f"Kitchen ticket recorded for order #{payload['order_id']}")


@lru_cache()
def get_kitchen_notifier() -> BaseKitchenNotifier:
    """Get the configured kitchen notifier."""
    if get_settings().kitchen_notifications_enabled:
        logger.info("Kitchen notifier: Celery")
        return CeleryKitchenNotifier()
    logger.info("Kitchen notifier: in-memory (notifications disabled)")
    return RecordingKitchenNotifier()
