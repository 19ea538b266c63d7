"""
Interfaces (Ports) shared by every domain.

Driven ports implemented by the adapters:
- UnitOfWork: transaction boundary that buffers events until commit
- EventPublisher: hands committed events to their consumers
- EventStore: append-only audit trail of events

The core defines the interfaces; adapters implement them.
"""

from abc import ABC, abstractmethod
from typing import List

from .events import DomainEvent


class UnitOfWork(ABC):
    """
    Unit of Work - coordinates an atomic transaction.

    Pattern: Context Manager
        with uow:
            repo.save(complaint)
            uow.publish_event(event)
        # commit on clean exit, rollback on exception

    Events queued with ``publish_event`` are only handed to the publisher
    after a successful commit. A rollback discards them.
    """

    def __init__(self):
        self._events: List[DomainEvent] = []

    def __enter__(self) -> "UnitOfWork":
        self._begin_transaction()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            self.rollback()
        else:
            self.commit()
        return False

    @abstractmethod
    def _begin_transaction(self) -> None:
        """Starts a new transaction."""
        raise NotImplementedError

    @abstractmethod
    def commit(self) -> None:
        """
        Persists every change, then publishes queued events.

        Order:
        1. Commit the database transaction
        2. Publish queued events
        3. Clear internal state
        """
        raise NotImplementedError

    @abstractmethod
    def rollback(self) -> None:
        """Discards every change and every queued event."""
        raise NotImplementedError

    def publish_event(self, event: DomainEvent) -> None:
        """
        Queues an event for publication after commit.

        Args:
            event: Domain event
        """
        self._events.append(event)

    def collect_events(self) -> List[DomainEvent]:
        """Pending events (testing/debugging)."""
        return list(self._events)

    def clear_events(self) -> None:
        self._events.clear()


class EventPublisher(ABC):
    """
    Publishes committed events to their consumers.

    Example:
        class CeleryEventPublisher(EventPublisher):
            def publish(self, event):
                dispatch_domain_event.delay(event.event_type, event.to_dict())
    """

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        raise NotImplementedError

    def publish_batch(self, events: List[DomainEvent]) -> None:
        for event in events:
            self.publish(event)


class EventStore(ABC):
    """Append-only persistence of events for auditing."""

    @abstractmethod
    def append(self, event: DomainEvent, sequence: int) -> None:
        """
        Appends an event.

        Args:
            event: Event to store
            sequence: Position of the event inside its aggregate stream
        """
        raise NotImplementedError

    @abstractmethod
    def get_events_for_aggregate(self, aggregate_id: str) -> List[dict]:
        """
        Stored events of one aggregate, oldest first.

        Returns:
            Serialized events (``DomainEvent.to_dict`` form)
        """
        raise NotImplementedError

    def last_sequence(self, aggregate_id: str) -> int:
        """Highest stored sequence of an aggregate, 0 when none."""
        return len(self.get_events_for_aggregate(aggregate_id))
