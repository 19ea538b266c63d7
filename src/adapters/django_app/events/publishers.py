"""
Event Publishers - deliver committed domain events to their consumers.

Implementations:
- LoggingEventPublisher: logs and runs registered handlers in-process ("sync" mode)
- CeleryEventPublisher: logs and hands the serialized event to a Celery task ("celery" mode)
- InMemoryEventPublisher: records events for tests

The notification dispatcher registers itself as a handler on the in-process
publishers; the Celery task rebuilds the event and calls the same
dispatcher in the worker.
"""

from typing import Callable, Dict, List, Optional
import json
import logging

from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventPublisher

logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent], object]

PUBLISHER_MODES = ("sync", "celery")


class HandlerRegistryMixin:
    """Per event type handler lists; a failing handler never stops the others."""

    def _init_handlers(self) -> None:
        self._handlers: Dict[str, List[Handler]] = {}

    def register_handler(self, event_type: str, handler: Handler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def _dispatch_to_handlers(self, event: DomainEvent) -> None:
        for handler in self._handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Handler failed for {event.event_type}")


class LoggingEventPublisher(HandlerRegistryMixin, EventPublisher):
    """
    Logs every event and runs the registered handlers synchronously.

    Default publisher: needs no broker, notifications are written right
    after the request's transaction commits.
    """

    def __init__(self, log_level: int = logging.INFO):
        self._log_level = log_level
        self._init_handlers()

    def publish(self, event: DomainEvent) -> None:
        logger.log(
            self._log_level,
            f"[EVENT] {event.event_type} | "
            f"aggregate={event.aggregate_id} | "
            f"data={json.dumps(event._get_event_data(), default=str)}",
        )
        self._dispatch_to_handlers(event)


class CeleryEventPublisher(EventPublisher):
    """
    Sends events to the ``dispatch_domain_event`` Celery task.

    A broker failure is logged; the request that produced the event has
    already committed and is not affected.
    """

    def __init__(self, also_log: bool = True):
        self._also_log = also_log

    def publish(self, event: DomainEvent) -> None:
        if self._also_log:
            logger.info(f"[EVENT->CELERY] {event.event_type} | aggregate={event.aggregate_id}")

        from src.adapters.django_app.events.handlers import dispatch_domain_event

        try:
            dispatch_domain_event.delay(event.event_type, event.to_dict())
        except Exception:
            logger.exception(f"Failed to send {event.event_type} to Celery")


class InMemoryEventPublisher(HandlerRegistryMixin, EventPublisher):
    """Stores published events for assertions; runs registered handlers."""

    def __init__(self):
        self._published_events: List[DomainEvent] = []
        self._init_handlers()

    def publish(self, event: DomainEvent) -> None:
        self._published_events.append(event)
        self._dispatch_to_handlers(event)

    @property
    def published_events(self) -> List[DomainEvent]:
        return self._published_events.copy()

    def get_events_by_type(self, event_type: str) -> List[DomainEvent]:
        return [e for e in self._published_events if e.event_type == event_type]

    def clear(self) -> None:
        self._published_events.clear()


def get_event_publisher(mode: str = "sync", dispatcher=None) -> EventPublisher:
    """
    Builds the publisher for ``EVENT_PUBLISHER_MODE``.

    Args:
        mode: "sync" or "celery"
        dispatcher: NotificationDispatcher subscribed in sync mode

    Raises:
        ValueError: Unknown mode
    """
    if mode not in PUBLISHER_MODES:
        raise ValueError(f"Unknown event publisher mode '{mode}', expected one of {PUBLISHER_MODES}")

    if mode == "celery":
        return CeleryEventPublisher()

    publisher = LoggingEventPublisher()
    if dispatcher is not None:
        dispatcher.subscribe(publisher)
    return publisher
