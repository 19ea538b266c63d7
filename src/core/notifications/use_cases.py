"""
Use Cases of the Notifications domain.

All operations are scoped to the caller: another member's notification
id behaves exactly like an unknown id (404).

Use cases:
- ListNotificationsService
- MarkNotificationReadService
- MarkAllNotificationsReadService
- DeleteNotificationService
"""

from typing import Optional
import logging

from src.core.shared.exceptions import NotFoundError
from src.core.shared.identity import Caller

from .dtos import ListNotificationsQueryDTO, NotificationListDTO, NotificationOutputDTO
from .entities import NotificationEntity
from .ports import NotificationRepository

logger = logging.getLogger(__name__)


def get_own_or_404(
    notification_repo: NotificationRepository,
    notification_id: str,
    caller: Caller,
) -> NotificationEntity:
    notification = notification_repo.get_by_id(notification_id) if notification_id else None
    if not notification or not notification.belongs_to(caller.user_id):
        raise NotFoundError("Notification not found.", entity_type="Notification", entity_id=notification_id)
    return notification


class ListNotificationsService:
    """
    Use Case: the caller's notifications, newest first.

    When a complaint repository is given, the related complaint is
    summarized as ``{id, ticketId, title, status}``.
    """

    def __init__(self, notification_repo: NotificationRepository, complaint_repo=None):
        self.notification_repo = notification_repo
        self.complaint_repo = complaint_repo

    def execute(self, query: ListNotificationsQueryDTO) -> NotificationListDTO:
        recipient_id = query.caller.user_id
        notifications = self.notification_repo.list_for_recipient(
            recipient_id,
            unread_only=query.unread_only,
            offset=query.offset,
            limit=query.limit,
        )

        return NotificationListDTO(
            notifications=[
                NotificationOutputDTO.from_entity(n, self._related_complaint(n.related_complaint_id))
                for n in notifications
            ],
            unread_count=self.notification_repo.count_for_recipient(recipient_id, unread_only=True),
            total=self.notification_repo.count_for_recipient(recipient_id, unread_only=query.unread_only),
            page=query.page,
            limit=query.limit,
        )

    def _related_complaint(self, complaint_id: Optional[str]) -> Optional[dict]:
        if not complaint_id or self.complaint_repo is None:
            return None
        complaint = self.complaint_repo.get_by_id(complaint_id)
        if not complaint:
            return None
        return {
            "id": complaint.id,
            "ticketId": complaint.ticket_id,
            "title": complaint.title,
            "status": complaint.status.value,
        }


class MarkNotificationReadService:
    """Use Case: mark one of the caller's notifications as read."""

    def __init__(self, notification_repo: NotificationRepository):
        self.notification_repo = notification_repo

    def execute(self, notification_id: str, caller: Caller) -> NotificationOutputDTO:
        """
        Raises:
            NotFoundError: Unknown id or not the caller's
        """
        notification = get_own_or_404(self.notification_repo, notification_id, caller)
        notification.mark_read()
        self.notification_repo.save(notification)
        return NotificationOutputDTO.from_entity(notification)


class MarkAllNotificationsReadService:
    """Use Case: mark every unread notification of the caller as read."""

    def __init__(self, notification_repo: NotificationRepository):
        self.notification_repo = notification_repo

    def execute(self, caller: Caller) -> int:
        changed = self.notification_repo.mark_all_read(caller.user_id)
        logger.debug(f"Marked {changed} notifications read for {caller.user_id}")
        return changed


class DeleteNotificationService:
    """Use Case: delete one of the caller's notifications."""

    def __init__(self, notification_repo: NotificationRepository):
        self.notification_repo = notification_repo

    def execute(self, notification_id: str, caller: Caller) -> None:
        """
        Raises:
            NotFoundError: Unknown id or not the caller's
        """
        notification = get_own_or_404(self.notification_repo, notification_id, caller)
        self.notification_repo.delete(notification.id)
