"""
Complaints domain - lifecycle of complaint tickets.

Contents:
- Entities (ComplaintEntity, ComplaintStatus, ComplaintPriority)
- Ticket identifiers (TicketIdentifierGenerator)
- Role-scoped visibility (RoleScopedAccessFilter)
- Use Cases (create, update status, assign, respond, rate, delete, read)
- Domain Events consumed by the notification dispatcher
- DTOs and Ports
"""

from .access import ComplaintFilter, RoleScopedAccessFilter
from .entities import (
    Attachment,
    ComplaintEntity,
    ComplaintPriority,
    ComplaintResponse,
    ComplaintStatus,
    Satisfaction,
)
from .events import (
    ComplaintAssignedEvent,
    ComplaintDeletedEvent,
    ComplaintRatedEvent,
    ComplaintResponseAddedEvent,
    ComplaintStatusChangedEvent,
    ComplaintSubmittedEvent,
)
from .ports import CategoryInfo, ComplaintRepository, MemberInfo, TicketSequence
from .ticket_ids import TicketIdentifierGenerator, format_ticket_id
from .use_cases import (
    AddResponseService,
    AssignComplaintService,
    ComplaintStatsService,
    CreateComplaintService,
    DeleteComplaintService,
    GetComplaintService,
    ListComplaintsService,
    RateComplaintService,
    UpdateStatusService,
)

__all__ = [
    # Entities
    "Attachment",
    "ComplaintEntity",
    "ComplaintPriority",
    "ComplaintResponse",
    "ComplaintStatus",
    "Satisfaction",
    # Access
    "ComplaintFilter",
    "RoleScopedAccessFilter",
    # Ticket ids
    "TicketIdentifierGenerator",
    "format_ticket_id",
    # Events
    "ComplaintAssignedEvent",
    "ComplaintDeletedEvent",
    "ComplaintRatedEvent",
    "ComplaintResponseAddedEvent",
    "ComplaintStatusChangedEvent",
    "ComplaintSubmittedEvent",
    # Ports
    "CategoryInfo",
    "ComplaintRepository",
    "MemberInfo",
    "TicketSequence",
    # Use Cases
    "AddResponseService",
    "AssignComplaintService",
    "ComplaintStatsService",
    "CreateComplaintService",
    "DeleteComplaintService",
    "GetComplaintService",
    "ListComplaintsService",
    "RateComplaintService",
    "UpdateStatusService",
]
