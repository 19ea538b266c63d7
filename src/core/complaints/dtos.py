"""
Data Transfer Objects (DTOs) of the Complaints domain.

Types:
- Input DTOs: one narrow, immutable DTO per operation
- Query DTO: list parameters, normalized from raw request values
- Output DTOs: what leaves the core, already filtered for the viewer

Output DTOs serialize with the camelCase keys the clients expect.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from src.core.shared.exceptions import ValidationError
from src.core.shared.identity import Caller

from .entities import Attachment, ComplaintEntity, ComplaintPriority, ComplaintStatus
from .ports import CategoryInfo, MemberInfo, SORTABLE_FIELDS


# =============================================================================
# INPUT DTOs
# =============================================================================

@dataclass(frozen=True)
class CreateComplaintInputDTO:
    """
    Input for filing a complaint.

    Attributes:
        caller: Submitting member
        title: Complaint title
        description: Full description
        category_id: Category reference
        priority: Wire value ("low", "medium", "high", "urgent")
        is_anonymous: Hide submitter from other viewers
        attachments: Attachment references (tuple to stay hashable)
    """

    caller: Caller
    title: str
    description: str
    category_id: str
    priority: str = "medium"
    is_anonymous: bool = False
    attachments: tuple = field(default_factory=tuple)


@dataclass(frozen=True)
class UpdateStatusInputDTO:
    complaint_id: str
    caller: Caller
    status: str
    rejection_reason: Optional[str] = None


@dataclass(frozen=True)
class AssignComplaintInputDTO:
    complaint_id: str
    caller: Caller
    assignee_id: Optional[str]


@dataclass(frozen=True)
class AddResponseInputDTO:
    """
    Input for answering a complaint.

    ``is_internal`` is ignored for students.
    """

    complaint_id: str
    caller: Caller
    message: str
    is_internal: bool = False


@dataclass(frozen=True)
class RateComplaintInputDTO:
    complaint_id: str
    caller: Caller
    rating: Any
    feedback: Optional[str] = None


@dataclass(frozen=True)
class DeleteComplaintInputDTO:
    complaint_id: str
    caller: Caller


# =============================================================================
# QUERY DTOs
# =============================================================================

SORT_ALIASES = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "ticketId": "ticket_id",
}


def parse_positive_int(value, name: str, default: int) -> int:
    """Parses a positive integer query parameter."""
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer", field=name)
    if number < 1:
        raise ValidationError(f"{name} must be at least 1", field=name)
    return number


@dataclass(frozen=True)
class ListComplaintsQueryDTO:
    """
    Parameters for listing complaints.

    Attributes:
        caller: Member asking
        page: 1-indexed page
        limit: Page size (1-100)
        status: Status filter
        priority: Priority filter
        category_id: Category filter
        assigned_to: Assignee filter
        submitted_by: Submitter filter (ignored for students)
        search: Free text over title, description and ticket id
        sort_by: Entity attribute in ``SORTABLE_FIELDS``
        sort_order: "asc" or "desc"
    """

    caller: Caller
    page: int = 1
    limit: int = 10
    status: Optional[ComplaintStatus] = None
    priority: Optional[ComplaintPriority] = None
    category_id: Optional[str] = None
    assigned_to: Optional[str] = None
    submitted_by: Optional[str] = None
    search: Optional[str] = None
    sort_by: str = "created_at"
    sort_order: str = "desc"

    MAX_LIMIT = 100

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_params(cls, caller: Caller, params: Mapping[str, Any], default_limit: int = 10) -> "ListComplaintsQueryDTO":
        """
        Builds the query from raw request parameters.

        Accepts both camelCase (``sortBy``) and snake_case (``sort_by``) keys.

        Raises:
            ValidationError: Bad page, limit, sort, status or priority
        """

        def get(*keys):
            for key in keys:
                value = params.get(key)
                if value not in (None, ""):
                    return value
            return None

        page = parse_positive_int(get("page"), "page", 1)
        limit = parse_positive_int(get("limit"), "limit", default_limit)
        if limit > cls.MAX_LIMIT:
            raise ValidationError(f"limit cannot exceed {cls.MAX_LIMIT}", field="limit")

        raw_sort = get("sortBy", "sort_by") or "created_at"
        sort_by = SORT_ALIASES.get(raw_sort, raw_sort)
        if sort_by not in SORTABLE_FIELDS:
            raise ValidationError(f"Cannot sort by {raw_sort}", field="sort_by")

        sort_order = (get("sortOrder", "sort_order") or "desc").lower()
        if sort_order not in ("asc", "desc"):
            raise ValidationError("sortOrder must be asc or desc", field="sort_order")

        status = get("status")
        priority = get("priority")

        return cls(
            caller=caller,
            page=page,
            limit=limit,
            status=ComplaintStatus.from_string(status) if status else None,
            priority=ComplaintPriority.from_string(priority) if priority else None,
            category_id=get("category", "categoryId", "category_id"),
            assigned_to=get("assignedTo", "assigned_to"),
            submitted_by=get("submittedBy", "submitted_by"),
            search=get("search"),
            sort_by=sort_by,
            sort_order=sort_order,
        )


# =============================================================================
# OUTPUT DTOs
# =============================================================================

@dataclass
class RelatedData:
    """Category and member details used to populate output DTOs."""

    categories: Dict[str, CategoryInfo] = field(default_factory=dict)
    members: Dict[str, MemberInfo] = field(default_factory=dict)

    def category(self, category_id: Optional[str]):
        if not category_id:
            return None
        info = self.categories.get(category_id)
        return info.to_dict() if info else {"id": category_id}

    def member(self, user_id: Optional[str]):
        if not user_id:
            return None
        info = self.members.get(user_id)
        return info.to_dict() if info else {"id": user_id}


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class ComplaintOutputDTO:
    """
    Complaint as seen by one viewer.

    Built with ``from_entity``, which applies the read rules:
    - students never see internal responses
    - the submitter of an anonymous complaint is hidden from everyone
      except the submitter
    """

    id: str
    ticket_id: str
    title: str
    description: str
    category: Optional[dict]
    priority: str
    status: str
    submitted_by: Optional[dict]
    assigned_to: Optional[dict]
    is_anonymous: bool
    attachments: List[dict]
    responses: List[dict]
    resolved_at: Optional[datetime]
    rejection_reason: Optional[str]
    satisfaction: Optional[dict]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(
        cls,
        entity: ComplaintEntity,
        viewer: Caller,
        related: Optional[RelatedData] = None,
    ) -> "ComplaintOutputDTO":
        """
        Converts an entity for ``viewer``.

        Args:
            entity: Complaint
            viewer: Member the data is shown to
            related: Category and member details, ids only when absent
        """
        related = related or RelatedData()
        hide_submitter = entity.is_anonymous and not entity.is_owned_by(viewer.user_id)

        responses = []
        for response in entity.visible_responses(viewer):
            data = response.to_dict()
            if hide_submitter and response.author_id == entity.submitted_by:
                data["author"] = None
            else:
                data["author"] = related.member(response.author_id)
            responses.append(data)

        return cls(
            id=entity.id,
            ticket_id=entity.ticket_id,
            title=entity.title,
            description=entity.description,
            category=related.category(entity.category_id),
            priority=entity.priority.value,
            status=entity.status.value,
            submitted_by=None if hide_submitter else related.member(entity.submitted_by),
            assigned_to=related.member(entity.assigned_to),
            is_anonymous=entity.is_anonymous,
            attachments=[a.to_dict() for a in entity.attachments],
            responses=responses,
            resolved_at=entity.resolved_at,
            rejection_reason=entity.rejection_reason,
            satisfaction=entity.satisfaction.to_dict() if entity.satisfaction else None,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    def to_dict(self) -> dict:
        """Serializes for JSON."""
        return {
            "id": self.id,
            "ticketId": self.ticket_id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "priority": self.priority,
            "status": self.status,
            "submittedBy": self.submitted_by,
            "assignedTo": self.assigned_to,
            "isAnonymous": self.is_anonymous,
            "attachments": self.attachments,
            "responses": self.responses,
            "resolvedAt": _iso(self.resolved_at),
            "rejectionReason": self.rejection_reason,
            "satisfaction": self.satisfaction,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


@dataclass
class PaginatedResultDTO:
    """
    A page of results.

    Attributes:
        items: Items of the current page
        total: Total items without pagination
        page: Current page
        limit: Page size
    """

    items: List[Any]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        if self.limit <= 0:
            return 0
        return (self.total + self.limit - 1) // self.limit

    @property
    def pagination(self) -> dict:
        return {
            "total": self.total,
            "page": self.page,
            "pages": self.pages,
            "limit": self.limit,
        }

    def to_dict(self, items_key: str = "items") -> dict:
        return {
            items_key: [item.to_dict() if hasattr(item, "to_dict") else item for item in self.items],
            "pagination": self.pagination,
        }


def attachments_from_dicts(raw: Optional[List[dict]]) -> tuple:
    """
    Attachment metadata from the attachment store, as value objects.

    Raises:
        ValidationError: Not a list of objects
    """
    if raw is None:
        return ()
    if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
        raise ValidationError("Attachments must be a list of file objects.", field="attachments")
    return tuple(Attachment.from_dict(item) for item in raw)
