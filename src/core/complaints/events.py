"""
Domain Events of the Complaints domain.

Events:
- ComplaintSubmittedEvent: a new complaint was filed
- ComplaintStatusChangedEvent: staff moved the complaint to another status
- ComplaintAssignedEvent: an admin assigned the complaint
- ComplaintResponseAddedEvent: someone answered in the conversation
- ComplaintRatedEvent: the submitter rated the resolution
- ComplaintDeletedEvent: the complaint was removed

Events carry everything the notification fan-out needs, so the
dispatcher never has to load the complaint again.

Usage:
    with uow:
        repo.save(complaint)
        uow.publish_event(ComplaintSubmittedEvent(aggregate_id=complaint.id, ...))
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

from src.core.shared.events import DomainEvent


@dataclass
class _ComplaintEvent(DomainEvent):
    """Common fields of every complaint event."""

    ticket_id: str = ""
    title: str = ""
    submitted_by: str = ""

    @property
    def aggregate_type(self) -> str:
        return "Complaint"


@dataclass
class ComplaintSubmittedEvent(_ComplaintEvent):
    """
    Event: a complaint was submitted.

    Handlers:
    - Notify every staff and admin member
    """

    category_id: str = ""
    priority: str = ""
    is_anonymous: bool = False


@dataclass
class ComplaintStatusChangedEvent(_ComplaintEvent):
    """
    Event: status changed.

    Handlers:
    - Notify the submitter (resolved, rejected or generic update)
    """

    old_status: str = ""
    new_status: str = ""
    rejection_reason: Optional[str] = None
    changed_by: str = ""


@dataclass
class ComplaintAssignedEvent(_ComplaintEvent):
    """
    Event: complaint assigned.

    Handlers:
    - Notify the assignee
    - Notify the submitter, naming the assignee
    """

    assigned_to: str = ""
    assignee_name: str = ""
    assigned_by: str = ""


@dataclass
class ComplaintResponseAddedEvent(_ComplaintEvent):
    """
    Event: a response was added.

    Handlers:
    - Staff response, not internal: notify the submitter
    - Submitter response on an assigned complaint: notify the assignee
    """

    response_id: str = ""
    author_id: str = ""
    author_role: str = ""
    is_internal: bool = False
    assigned_to: Optional[str] = None


@dataclass
class ComplaintRatedEvent(_ComplaintEvent):
    """Event: the submitter rated the resolution."""

    rating: int = 0
    feedback: str = ""


@dataclass
class ComplaintDeletedEvent(_ComplaintEvent):
    """Event: complaint deleted."""

    deleted_by: str = ""
    category_id: str = ""


EVENT_TYPES: Dict[str, Type[DomainEvent]] = {
    cls.__name__: cls
    for cls in (
        ComplaintSubmittedEvent,
        ComplaintStatusChangedEvent,
        ComplaintAssignedEvent,
        ComplaintResponseAddedEvent,
        ComplaintRatedEvent,
        ComplaintDeletedEvent,
    )
}


def event_from_dict(event_type: str, data: Dict[str, Any]) -> DomainEvent:
    """
    Rebuilds a serialized complaint event.

    Raises:
        KeyError: Unknown event type
    """
    return EVENT_TYPES[event_type].from_dict(data)
