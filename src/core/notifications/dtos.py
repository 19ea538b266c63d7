"""
DTOs of the Notifications domain.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Mapping, Optional

from src.core.complaints.dtos import parse_positive_int
from src.core.shared.exceptions import ValidationError
from src.core.shared.identity import Caller

from .entities import NotificationEntity


@dataclass(frozen=True)
class ListNotificationsQueryDTO:
    """
    Attributes:
        caller: Recipient asking for their notifications
        unread_only: Only unread notifications
        page: 1-indexed page
        limit: Page size (1-100)
    """

    caller: Caller
    unread_only: bool = False
    page: int = 1
    limit: int = 20

    MAX_LIMIT = 100

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_params(
        cls,
        caller: Caller,
        params: Mapping[str, Any],
        default_limit: int = 20,
        unread_only: bool = False,
    ) -> "ListNotificationsQueryDTO":
        """
        Builds the query from raw page and limit parameters.

        Raises:
            ValidationError: Bad page or limit
        """
        page = parse_positive_int(params.get("page"), "page", 1)
        limit = parse_positive_int(params.get("limit"), "limit", default_limit)
        if limit > cls.MAX_LIMIT:
            raise ValidationError(f"limit cannot exceed {cls.MAX_LIMIT}", field="limit")
        return cls(caller=caller, unread_only=unread_only, page=page, limit=limit)


@dataclass
class NotificationOutputDTO:
    id: str
    title: str
    message: str
    type: str
    related_complaint: Optional[dict]
    is_read: bool
    created_at: datetime

    @classmethod
    def from_entity(
        cls,
        entity: NotificationEntity,
        related_complaint: Optional[dict] = None,
    ) -> "NotificationOutputDTO":
        if related_complaint is None and entity.related_complaint_id:
            related_complaint = {"id": entity.related_complaint_id}
        return cls(
            id=entity.id,
            title=entity.title,
            message=entity.message,
            type=entity.type.value,
            related_complaint=related_complaint,
            is_read=entity.is_read,
            created_at=entity.created_at,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "type": self.type,
            "relatedComplaint": self.related_complaint,
            "isRead": self.is_read,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass
class NotificationListDTO:
    """A page of notifications plus the recipient's unread count."""

    notifications: List[NotificationOutputDTO]
    unread_count: int
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        if self.limit <= 0:
            return 0
        return (self.total + self.limit - 1) // self.limit

    def to_dict(self) -> dict:
        return {
            "notifications": [n.to_dict() for n in self.notifications],
            "unreadCount": self.unread_count,
            "pagination": {
                "total": self.total,
                "page": self.page,
                "pages": self.pages,
                "limit": self.limit,
            },
        }
