"""
Entities of the Complaints domain.

Entities:
- ComplaintEntity: aggregate root
- ComplaintStatus: lifecycle states
- ComplaintPriority: priority levels
- Attachment, ComplaintResponse, Satisfaction: value objects

Business rules encapsulated here:
- Input validation on creation
- Rejection always carries a reason; leaving rejected clears it
- ``resolved_at`` is stamped the first time the complaint is resolved
- Assigning forces the complaint into review
- Student responses are never internal
- Only the submitter may rate, and only a resolved complaint
- Deletion rights depend on role, ownership and status
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple
import uuid

from src.core.shared.events import utcnow
from src.core.shared.exceptions import (
    AuthorizationError,
    InvalidRatingError,
    InvalidStatusError,
    MissingReasonError,
    StateError,
    ValidationError,
)
from src.core.shared.identity import Caller, Role


def clean_text(value, field_name: str) -> str:
    """
    Stripped text of a free-text field; None reads as empty.

    Raises:
        ValidationError: Value is not a string
    """
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text", field=field_name)
    return value.strip()


class ComplaintStatus(Enum):
    """
    Lifecycle states of a complaint.

    Any state may be set from any other by staff; there is no adjacency
    graph. ``resolved`` and ``rejected`` carry extra bookkeeping.
    """

    PENDING = "pending"
    IN_REVIEW = "in-review"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"
    CLOSED = "closed"

    @classmethod
    def from_string(cls, value: str) -> "ComplaintStatus":
        """
        Converts a string to a status.

        Accepts the wire value ("in-review") or the member name ("IN_REVIEW").

        Raises:
            InvalidStatusError: Unknown value
        """
        if isinstance(value, str):
            normalized = value.strip()
            for status in cls:
                if status.value == normalized.lower():
                    return status
            try:
                return cls[normalized.upper().replace("-", "_")]
            except KeyError:
                pass
        raise InvalidStatusError(f"Invalid status value: {value}")


class ComplaintPriority(Enum):
    """Priority levels, lowest first."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @classmethod
    def from_string(cls, value: str) -> "ComplaintPriority":
        """
        Converts a string to a priority.

        Raises:
            ValidationError: Unknown value
        """
        if isinstance(value, str):
            for priority in cls:
                if priority.value == value.strip().lower():
                    return priority
        raise ValidationError(f"Invalid priority: {value}", field="priority")


@dataclass(frozen=True)
class Attachment:
    """
    Reference to a file kept by the attachment store.

    Attributes:
        filename: Stored file name
        original_name: Name the file was uploaded with
        content_type: MIME type
        size: Size in bytes
        path: Storage path
    """

    filename: str
    original_name: str
    content_type: str
    size: int
    path: str

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "originalName": self.original_name,
            "mimetype": self.content_type,
            "size": self.size,
            "path": self.path,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Attachment":
        """
        Raises:
            ValidationError: Size is not a whole number
        """
        try:
            size = int(data.get("size", 0))
        except (TypeError, ValueError):
            raise ValidationError("Attachment size must be a number of bytes.", field="attachments")
        return cls(
            filename=data.get("filename", ""),
            original_name=data.get("originalName", data.get("original_name", "")),
            content_type=data.get("mimetype", data.get("content_type", "")),
            size=size,
            path=data.get("path", ""),
        )


@dataclass(frozen=True)
class ComplaintResponse:
    """A message appended to a complaint's conversation."""

    author_id: str
    message: str
    is_internal: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "author": self.author_id,
            "message": self.message,
            "isInternal": self.is_internal,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ComplaintResponse":
        created_at = data.get("createdAt")
        return cls(
            id=data.get("id") or str(uuid.uuid4()),
            author_id=data["author"],
            message=data["message"],
            is_internal=bool(data.get("isInternal", False)),
            created_at=datetime.fromisoformat(created_at) if created_at else utcnow(),
        )


@dataclass(frozen=True)
class Satisfaction:
    """Submitter's rating of a resolved complaint."""

    rating: int
    feedback: str = ""

    def to_dict(self) -> dict:
        return {"rating": self.rating, "feedback": self.feedback}


@dataclass
class ComplaintEntity:
    """
    Domain Entity: Complaint.

    Aggregate root of the complaint desk. All state changes go through
    the transition methods below so that the invariants hold.

    Invariants:
    - ``status == REJECTED`` implies a non-empty ``rejection_reason``
    - ``resolved_at`` is set once and never cleared
    - ``satisfaction`` exists only when written by the submitter of a
      resolved complaint
    - ``ticket_id`` and ``submitted_by`` never change

    Example:
        complaint = ComplaintEntity.create(
            ticket_id="VHU-2501-0001",
            title="Broken projector",
            description="The projector in room 12 does not turn on",
            category_id="cat-1",
            submitted_by="student-1",
        )
        complaint.assign_to("staff-1")
        complaint.change_status(ComplaintStatus.RESOLVED)
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    ticket_id: str = ""

    title: str = ""
    description: str = ""
    category_id: str = ""

    status: ComplaintStatus = field(default=ComplaintStatus.PENDING)
    priority: ComplaintPriority = field(default=ComplaintPriority.MEDIUM)

    submitted_by: str = ""
    assigned_to: Optional[str] = None
    is_anonymous: bool = False

    attachments: List[Attachment] = field(default_factory=list)
    responses: List[ComplaintResponse] = field(default_factory=list)

    resolved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    satisfaction: Optional[Satisfaction] = None

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    TITLE_MAX_LENGTH = 200
    DESCRIPTION_MAX_LENGTH = 5000
    MAX_ATTACHMENTS = 3
    MAX_ATTACHMENT_SIZE = 5 * 1024 * 1024

    # =========================================================================
    # Creation
    # =========================================================================

    @classmethod
    def validate_new(
        cls,
        title: str,
        description: str,
        category_id: str,
        submitted_by: str,
        attachments: Optional[List[Attachment]] = None,
    ) -> None:
        """
        Validates creation input without building the entity.

        Use cases call this before allocating a ticket id so that invalid
        input never consumes a sequence value.

        Raises:
            ValidationError: Missing or oversized fields
        """
        title = clean_text(title, "title")
        description = clean_text(description, "description")
        category_id = clean_text(category_id, "category")
        if not title or not description or not category_id:
            raise ValidationError("Please provide title, description, and category.")
        if len(title) > cls.TITLE_MAX_LENGTH:
            raise ValidationError(
                f"Title cannot exceed {cls.TITLE_MAX_LENGTH} characters", field="title"
            )
        if len(description) > cls.DESCRIPTION_MAX_LENGTH:
            raise ValidationError(
                f"Description cannot exceed {cls.DESCRIPTION_MAX_LENGTH} characters",
                field="description",
            )
        if not submitted_by:
            raise ValidationError("Submitter is required", field="submitted_by")
        cls._validate_attachments(attachments or [])

    @classmethod
    def _validate_attachments(cls, attachments: List[Attachment]) -> None:
        if len(attachments) > cls.MAX_ATTACHMENTS:
            raise ValidationError(
                f"A complaint can have at most {cls.MAX_ATTACHMENTS} attachments",
                field="attachments",
            )
        for attachment in attachments:
            if attachment.size > cls.MAX_ATTACHMENT_SIZE:
                raise ValidationError(
                    f"Attachment {attachment.original_name} exceeds 5 MB",
                    field="attachments",
                )

    @classmethod
    def create(
        cls,
        ticket_id: str,
        title: str,
        description: str,
        category_id: str,
        submitted_by: str,
        priority: ComplaintPriority = ComplaintPriority.MEDIUM,
        is_anonymous: bool = False,
        attachments: Optional[List[Attachment]] = None,
        created_at: Optional[datetime] = None,
    ) -> "ComplaintEntity":
        """
        Factory method for a new, pending complaint.

        Args:
            ticket_id: Identifier allocated by the ticket generator
            title: Short title (max 200 characters)
            description: Full description (max 5000 characters)
            category_id: Category reference
            submitted_by: Creating member id
            priority: Priority, medium by default
            is_anonymous: Hide the submitter from non-owning viewers
            attachments: At most 3 attachment references, 5 MB each
            created_at: Creation time, now by default

        Returns:
            New ComplaintEntity

        Raises:
            ValidationError: Invalid input
        """
        cls.validate_new(title, description, category_id, submitted_by, attachments)
        if not ticket_id:
            raise ValidationError("Ticket id is required", field="ticket_id")

        now = created_at or utcnow()
        return cls(
            ticket_id=ticket_id,
            title=title.strip(),
            description=description.strip(),
            category_id=category_id,
            submitted_by=submitted_by,
            priority=priority,
            status=ComplaintStatus.PENDING,
            is_anonymous=bool(is_anonymous),
            attachments=list(attachments or []),
            created_at=now,
            updated_at=now,
        )

    # =========================================================================
    # Transitions
    # =========================================================================

    def change_status(self, new_status: ComplaintStatus, rejection_reason: Optional[str] = None) -> None:
        """
        Moves the complaint to ``new_status``.

        Rules:
        - Rejecting requires a non-empty reason
        - Leaving ``rejected`` clears the reason
        - The first transition to ``resolved`` stamps ``resolved_at``

        Raises:
            MissingReasonError: Rejected without a reason
            ValidationError: Reason is not text
        """
        reason = clean_text(rejection_reason, "rejection_reason")
        if new_status == ComplaintStatus.REJECTED:
            if not reason:
                raise MissingReasonError("Please provide a reason for rejection.")
            self.rejection_reason = reason
        else:
            self.rejection_reason = None

        if new_status == ComplaintStatus.RESOLVED and self.resolved_at is None:
            self.resolved_at = utcnow()

        self.status = new_status
        self._touch()

    def assign_to(self, assignee_id: str) -> None:
        """
        Assigns the complaint and puts it in review.

        Raises:
            ValidationError: Empty assignee id
        """
        if not assignee_id:
            raise ValidationError("Please specify a staff member to assign.", field="assigned_to")
        self.assigned_to = assignee_id
        if self.status == ComplaintStatus.REJECTED:
            self.rejection_reason = None
        self.status = ComplaintStatus.IN_REVIEW
        self._touch()

    def add_response(self, author: Caller, message: str, is_internal: bool = False) -> ComplaintResponse:
        """
        Appends a response to the conversation.

        Students may only answer their own complaints and can never post
        internal notes; their ``is_internal`` flag is forced to False.

        Returns:
            The stored response

        Raises:
            ValidationError: Empty message
            AuthorizationError: Student answering someone else's complaint
        """
        message = clean_text(message, "message")
        if not message:
            raise ValidationError("Please provide a response message.", field="message")
        if author.is_student and author.user_id != self.submitted_by:
            raise AuthorizationError("Not authorized to respond to this complaint.", role=author.role.value)

        response = ComplaintResponse(
            author_id=author.user_id,
            message=message,
            is_internal=bool(is_internal) and not author.is_student,
        )
        self.responses.append(response)
        self._touch()
        return response

    def rate(self, caller_id: str, rating, feedback: Optional[str] = None) -> None:
        """
        Records the submitter's satisfaction.

        A later rating replaces the earlier one.

        Raises:
            InvalidRatingError: Not an integer 1-5
            AuthorizationError: Caller is not the submitter
            StateError: Complaint is not resolved
        """
        rating = self.validate_rating(rating)
        feedback = clean_text(feedback, "feedback")
        if caller_id != self.submitted_by:
            raise AuthorizationError("Only the complaint submitter can rate.")
        if self.status != ComplaintStatus.RESOLVED:
            raise StateError("You can only rate resolved complaints.", rule="rate_requires_resolved")

        self.satisfaction = Satisfaction(rating=rating, feedback=feedback)
        self._touch()

    @staticmethod
    def validate_rating(rating) -> int:
        """
        Rating as an integer from 1 to 5.

        Integral values arrive as 4, 4.0 or "4"; booleans, fractions and
        anything else are refused.

        Raises:
            InvalidRatingError: Not an integer 1-5
        """
        if isinstance(rating, str):
            try:
                rating = float(rating.strip())
            except ValueError:
                rating = None
        if isinstance(rating, float) and rating.is_integer():
            rating = int(rating)
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise InvalidRatingError("Please provide a rating between 1 and 5.")
        return rating

    def ensure_deletable_by(self, caller: Caller) -> None:
        """
        Checks that ``caller`` may delete this complaint.

        - admin: any complaint
        - student: own complaint, only while pending
        - anyone else: never

        Raises:
            AuthorizationError: Not allowed
            StateError: Owning student, complaint no longer pending
        """
        if caller.role == Role.ADMIN:
            return
        if caller.is_student and caller.user_id == self.submitted_by:
            if self.status != ComplaintStatus.PENDING:
                raise StateError("You can only delete pending complaints.", rule="delete_requires_pending")
            return
        raise AuthorizationError("Not authorized to delete this complaint.", role=caller.role.value)

    # =========================================================================
    # Queries
    # =========================================================================

    def is_owned_by(self, user_id: str) -> bool:
        return self.submitted_by == user_id

    def visible_responses(self, viewer: Caller) -> List[ComplaintResponse]:
        """Responses the viewer may read; students never see internal notes."""
        if viewer.is_student:
            return [r for r in self.responses if not r.is_internal]
        return list(self.responses)

    @property
    def resolution_time(self) -> Optional[float]:
        """Days from creation to resolution."""
        if self.resolved_at is None:
            return None
        return (self.resolved_at - self.created_at).total_seconds() / 86400

    def copy(self) -> "ComplaintEntity":
        """Detached copy, used by the in-memory repository."""
        return replace(
            self,
            attachments=list(self.attachments),
            responses=list(self.responses),
        )

    def _touch(self) -> None:
        self.updated_at = utcnow()

    def __str__(self) -> str:
        return f"{self.ticket_id} - {self.title}"


def response_authors(complaint: ComplaintEntity) -> Tuple[str, ...]:
    """Distinct response author ids in conversation order."""
    seen = []
    for response in complaint.responses:
        if response.author_id not in seen:
            seen.append(response.author_id)
    return tuple(seen)
