"""
Entities of the Notifications domain.

A notification is created by the dispatcher for exactly one recipient and
afterwards only touched by that recipient (read, read-all, delete).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
import uuid

from src.core.shared.events import utcnow
from src.core.shared.exceptions import ValidationError


class NotificationType(Enum):
    COMPLAINT_SUBMITTED = "complaint_submitted"
    COMPLAINT_ASSIGNED = "complaint_assigned"
    COMPLAINT_UPDATED = "complaint_updated"
    COMPLAINT_RESOLVED = "complaint_resolved"
    COMPLAINT_REJECTED = "complaint_rejected"
    NEW_RESPONSE = "new_response"
    SYSTEM = "system"


@dataclass
class NotificationEntity:
    """
    Domain Entity: Notification.

    Attributes:
        recipient_id: Member the notification belongs to
        title: Short headline
        message: Body text
        type: NotificationType
        related_complaint_id: Complaint the notification is about, if any
        is_read: Read flag
        created_at: Creation time
    """

    recipient_id: str = ""
    title: str = ""
    message: str = ""
    type: NotificationType = NotificationType.SYSTEM
    related_complaint_id: Optional[str] = None
    is_read: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def create(
        cls,
        recipient_id: str,
        title: str,
        message: str,
        type: NotificationType = NotificationType.SYSTEM,
        related_complaint_id: Optional[str] = None,
    ) -> "NotificationEntity":
        """
        Raises:
            ValidationError: Missing recipient, title or message
        """
        if not recipient_id:
            raise ValidationError("Notification recipient is required", field="recipient")
        if not title or not title.strip():
            raise ValidationError("Notification title is required", field="title")
        if not message or not message.strip():
            raise ValidationError("Notification message is required", field="message")

        return cls(
            recipient_id=recipient_id,
            title=title.strip(),
            message=message.strip(),
            type=type,
            related_complaint_id=related_complaint_id,
        )

    def mark_read(self) -> None:
        self.is_read = True

    def belongs_to(self, user_id: str) -> bool:
        return self.recipient_id == user_id
