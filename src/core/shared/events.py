"""
Domain Events - decoupled communication between the lifecycle and its
side effects.

Characteristics:
- Named in the past tense (ComplaintSubmitted, not SubmitComplaint)
- Auto-generated id and timestamp
- Serializable for the event store and for Celery transport
- Traceable through ``aggregate_id``

Events are queued on the Unit of Work and published only after commit.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict
import uuid


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


@dataclass
class DomainEvent(ABC):
    """
    Abstract base class for domain events.

    Attributes:
        event_id: Unique event identifier
        aggregate_id: Id of the aggregate that produced the event
        occurred_at: When the event happened
        version: Event schema version

    Example:
        @dataclass
        class ComplaintRatedEvent(DomainEvent):
            rating: int = 0

            @property
            def aggregate_type(self) -> str:
                return "Complaint"
    """

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    aggregate_id: str = ""
    occurred_at: datetime = field(default_factory=utcnow)
    version: int = 1

    def __post_init__(self):
        if not self.aggregate_id:
            raise ValueError("aggregate_id is required")

    @property
    @abstractmethod
    def aggregate_type(self) -> str:
        """Name of the aggregate type (e.g. "Complaint")."""
        ...

    @property
    def event_type(self) -> str:
        """Event type name (the class name)."""
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializes the event.

        Used for the event store, for the Celery payload and for
        structured logging.
        """
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "aggregate_id": self.aggregate_id,
            "aggregate_type": self.aggregate_type,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
            "data": self._get_event_data(),
        }

    def _get_event_data(self) -> Dict[str, Any]:
        """Event specific payload; every non-base field by default."""
        base_fields = {"event_id", "aggregate_id", "occurred_at", "version"}
        return {
            key: value
            for key, value in self.__dict__.items()
            if key not in base_fields and not key.startswith("_")
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DomainEvent":
        """
        Rebuilds an event from its serialized form.

        Args:
            data: Output of ``to_dict``

        Returns:
            Event instance
        """
        event_data = data.get("data", {})
        return cls(
            event_id=data.get("event_id", str(uuid.uuid4())),
            aggregate_id=data["aggregate_id"],
            occurred_at=datetime.fromisoformat(data["occurred_at"]),
            version=data.get("version", 1),
            **event_data,
        )

    def __repr__(self) -> str:
        return (
            f"{self.event_type}("
            f"event_id={self.event_id[:8]}..., "
            f"aggregate_id={self.aggregate_id}, "
            f"occurred_at={self.occurred_at.isoformat()}"
            f")"
        )
