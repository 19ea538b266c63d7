"""
Celery tasks for domain events.

- dispatch_domain_event: worker side of the "celery" publisher mode; runs
  the notification dispatcher for one serialized event
- cleanup_old_events: periodic purge of the event store (Celery Beat)

Notifications are best effort: the tasks do not retry.
"""

from datetime import timedelta
from typing import Any, Dict
import logging

from celery import shared_task
from django.utils import timezone

from src.core.complaints.events import event_from_dict

logger = logging.getLogger(__name__)


@shared_task(bind=True, ignore_result=True, acks_late=True)
def dispatch_domain_event(self, event_type: str, event_data: Dict[str, Any]) -> int:
    """
    Rebuilds an event and fans it out to notifications.

    Args:
        event_type: Event class name (e.g. 'ComplaintSubmittedEvent')
        event_data: Output of ``DomainEvent.to_dict``

    Returns:
        Number of notifications stored
    """
    try:
        event = event_from_dict(event_type, event_data)
    except KeyError:
        logger.warning(f"[DISPATCHER] No event type registered for {event_type}")
        return 0

    from src.config.container import get_container

    dispatcher = get_container().notification_dispatcher()
    stored = dispatcher.handle(event)

    logger.info(f"[DISPATCHER] {event_type} handled, {len(stored)} notification(s)")
    return len(stored)


@shared_task(bind=True)
def cleanup_old_events(self, days: int = 90) -> int:
    """
    Removes stored events older than ``days``.

    Executed weekly by Celery Beat.

    Returns:
        Number of events removed
    """
    from src.adapters.django_app.complaints.models import DomainEventModel

    cutoff_date = timezone.now() - timedelta(days=days)
    deleted, _ = DomainEventModel.objects.filter(occurred_at__lt=cutoff_date).delete()

    logger.info(f"[SCHEDULED] {deleted} event(s) older than {days} days removed")
    return deleted
