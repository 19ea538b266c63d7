"""
Unit of Work - Django implementation.

Wraps a use case in one database transaction.

Responsibilities:
- Open/close an ``atomic`` block
- Append queued events to the event store inside the transaction
- Hand events to the publisher only after a successful commit

Publishing happens outside the transaction: a failing consumer is logged
and never undoes a committed mutation.
"""

from typing import Dict, List, Optional
import logging

from django.db import transaction

from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventPublisher, EventStore, UnitOfWork

logger = logging.getLogger(__name__)


class DjangoUnitOfWork(UnitOfWork):
    """
    Django implementation of the Unit of Work.

    Uses ``django.db.transaction.atomic`` so it nests correctly inside an
    outer transaction (a savepoint is used then).

    Example:
        with DjangoUnitOfWork(publisher, event_store) as uow:
            repo.save(complaint)
            uow.publish_event(ComplaintSubmittedEvent(...))
        # committed, event stored and published

    Example with rollback:
        with DjangoUnitOfWork() as uow:
            repo.save(complaint)
            raise StateError("...")
        # rolled back, events discarded
    """

    def __init__(
        self,
        event_publisher: Optional[EventPublisher] = None,
        event_store: Optional[EventStore] = None,
    ):
        super().__init__()
        self._event_publisher = event_publisher
        self._event_store = event_store
        self._atomic = None
        self._committed = False
        self._rolled_back = False
        self._sequence_counters: Dict[str, int] = {}

    def _begin_transaction(self) -> None:
        self._committed = False
        self._rolled_back = False
        self._sequence_counters = {}
        self._atomic = transaction.atomic()
        self._atomic.__enter__()
        logger.debug("Transaction started")

    def commit(self) -> None:
        """
        Persists every change and publishes events.

        Order:
        1. Append events to the event store (inside the transaction)
        2. Commit the transaction
        3. Publish events
        4. Clear internal state

        Raises:
            Exception: Re-raised if the event store or the commit fails
        """
        if self._committed or self._rolled_back:
            logger.warning("Transaction already finalized")
            return

        try:
            if self._event_store and self._events:
                self._persist_events()
        except Exception as e:
            logger.error(f"Commit failed: {e}")
            self.rollback()
            raise

        atomic, self._atomic = self._atomic, None
        if atomic is not None:
            atomic.__exit__(None, None, None)
            logger.debug("Transaction committed")
        self._committed = True

        if self._events:
            self._publish_events()

    def rollback(self) -> None:
        """Undoes every change and discards queued events."""
        if self._committed or self._rolled_back:
            return

        atomic, self._atomic = self._atomic, None
        try:
            if atomic is not None:
                transaction.set_rollback(True)
                atomic.__exit__(None, None, None)
                logger.debug("Transaction rolled back")
        finally:
            self._rolled_back = True
            self.clear_events()

    def _persist_events(self) -> None:
        for event in self._events:
            self._event_store.append(
                event=event,
                sequence=self._get_next_sequence(event.aggregate_id),
            )

    def _publish_events(self) -> None:
        """Events are only published after a successful commit."""
        events, self._events = list(self._events), []
        for event in events:
            logger.info(f"Publishing event: {event.event_type} for aggregate {event.aggregate_id}")

            if self._event_publisher:
                try:
                    self._event_publisher.publish(event)
                except Exception:
                    logger.exception(f"Failed to publish event {event.event_type}")

    def _get_next_sequence(self, aggregate_id: str) -> int:
        """Position of the next event in the aggregate stream."""
        if aggregate_id not in self._sequence_counters:
            self._sequence_counters[aggregate_id] = self._event_store.last_sequence(aggregate_id)

        self._sequence_counters[aggregate_id] += 1
        return self._sequence_counters[aggregate_id]

    @property
    def is_committed(self) -> bool:
        return self._committed

    @property
    def is_rolled_back(self) -> bool:
        return self._rolled_back


class InMemoryUnitOfWork(UnitOfWork):
    """
    In-memory Unit of Work for tests.

    Persists nothing; records what was committed and, when a publisher is
    given, hands it the events like the Django implementation does.

    Example:
        uow = InMemoryUnitOfWork()
        with uow:
            uow.publish_event(event)

        assert uow.committed
        assert len(uow.published_events) == 1
    """

    def __init__(self, event_publisher: Optional[EventPublisher] = None):
        super().__init__()
        self._event_publisher = event_publisher
        self._committed = False
        self._rolled_back = False
        self._published_events: List[DomainEvent] = []

    def _begin_transaction(self) -> None:
        pass

    def commit(self) -> None:
        self._committed = True
        events = list(self._events)
        self.clear_events()
        self._published_events.extend(events)
        if self._event_publisher:
            self._event_publisher.publish_batch(events)

    def rollback(self) -> None:
        self._rolled_back = True
        self.clear_events()

    @property
    def committed(self) -> bool:
        return self._committed

    @property
    def rolled_back(self) -> bool:
        return self._rolled_back

    @property
    def published_events(self) -> List[DomainEvent]:
        return self._published_events

    def reset(self) -> None:
        self._committed = False
        self._rolled_back = False
        self._published_events.clear()
        self.clear_events()
