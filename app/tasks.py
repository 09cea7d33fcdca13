"""
Celery Tasks
Kitchen tickets for orders with items still waiting to be prepared.
"""

import logging
from datetime import datetime

from app.celery_worker import celery_app

logger = logging.getLogger(__name__)


def format_ticket(order_data: dict) -> str:
    """Render the kitchen ticket for an order payload."""
    lines = [f"ORDER #{order_data.get('order_id', '?')} - TABLE {order_data.get('table_number') or '-'}"]
    for item in order_data.get('items', []):
        line = f"  {item['quantity']} x {item['product_name']}"
        if item.get('notes'):
            line += f" ({item['notes']})"
        lines.append(line)
    return "\n".join(lines)


@celery_app.task(
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    autoretry_for=(ConnectionError,),
    retry_backoff=True
)
def notify_kitchen(self, order_data: dict) -> dict:
    """
    Send the pending items of an order to the kitchen.

    Args:
        order_data: Order id, table number and the PENDING items

    Returns:
        dict: Summary of the ticket that was issued
    """
    order_id = order_data.get('order_id', 'unknown')
    ticket = format_ticket(order_data)
    logger.info(f"Task {self.request.id}: kitchen ticket for order #{order_id}\n{ticket}")

    return {
        'success': True,
        'order_id': order_id,
        'items': len(order_data.get('items', [])),
        'task_id': self.request.id,
    }


@celery_app.task
def health_check() -> dict:
    """
    Simple health check task to verify Celery is working.
    """
    return {
        'status': 'healthy',
        'worker': 'celery',
        'timestamp': datetime.now().isoformat()
    }
