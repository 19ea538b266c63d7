"""
NotificationDispatcher - fan-out of complaint events to notifications.

Consumes committed complaint events and stores one notification per
affected recipient:

| Event | Recipients | Type |
|---|---|---|
| ComplaintSubmitted | every staff and admin member | complaint_submitted |
| ComplaintStatusChanged | submitter | complaint_resolved / complaint_rejected / complaint_updated |
| ComplaintAssigned | assignee, then submitter | complaint_assigned, complaint_updated |
| ComplaintResponseAdded | submitter (staff answer, not internal) or assignee (submitter answer) | new_response |

Each recipient is written independently. A failing write is logged and
skipped; it never affects the complaint mutation that already committed,
and there is no retry.
"""

from typing import Callable, Dict, List, Optional
import logging

from src.core.complaints.events import (
    ComplaintAssignedEvent,
    ComplaintResponseAddedEvent,
    ComplaintStatusChangedEvent,
    ComplaintSubmittedEvent,
)
from src.core.complaints.ports import MemberDirectory
from src.core.shared.events import DomainEvent

from .entities import NotificationEntity, NotificationType
from .ports import NotificationRepository

logger = logging.getLogger(__name__)

STAFF_ROLES = ("staff", "admin")

STATUS_NOTIFICATION_TYPES = {
    "resolved": NotificationType.COMPLAINT_RESOLVED,
    "rejected": NotificationType.COMPLAINT_REJECTED,
}


class NotificationDispatcher:
    """
    Turns lifecycle events into notifications.

    Example:
        dispatcher = NotificationDispatcher(notification_repo, member_directory)
        dispatcher.subscribe(publisher)   # publisher calls handle() per event
        dispatcher.handle(event)          # or call it directly (Celery worker)
    """

    def __init__(self, notification_repo: NotificationRepository, member_directory: MemberDirectory):
        self.notification_repo = notification_repo
        self.member_directory = member_directory
        self._routes: Dict[str, Callable[[DomainEvent], List[NotificationEntity]]] = {
            ComplaintSubmittedEvent.__name__: self._on_submitted,
            ComplaintStatusChangedEvent.__name__: self._on_status_changed,
            ComplaintAssignedEvent.__name__: self._on_assigned,
            ComplaintResponseAddedEvent.__name__: self._on_response_added,
        }

    @property
    def event_types(self) -> List[str]:
        return list(self._routes)

    def subscribe(self, publisher) -> None:
        """Registers ``handle`` on a publisher for every routed event type."""
        for event_type in self._routes:
            publisher.register_handler(event_type, self.handle)

    def handle(self, event: DomainEvent) -> List[NotificationEntity]:
        """
        Fans an event out.

        Returns:
            Notifications that were stored
        """
        route = self._routes.get(event.event_type)
        if route is None:
            logger.debug(f"No notifications for {event.event_type}")
            return []

        stored = []
        for notification in route(event):
            if self._store(notification):
                stored.append(notification)

        logger.info(
            f"[NOTIFY] {event.event_type} | aggregate={event.aggregate_id} | "
            f"recipients={len(stored)}"
        )
        return stored

    def notify(
        self,
        recipient_id: str,
        title: str,
        message: str,
        type: NotificationType = NotificationType.SYSTEM,
        related_complaint_id: Optional[str] = None,
    ) -> Optional[NotificationEntity]:
        """Sends a single ad-hoc notification (e.g. system messages)."""
        notification = NotificationEntity.create(recipient_id, title, message, type, related_complaint_id)
        return notification if self._store(notification) else None

    def _store(self, notification: NotificationEntity) -> bool:
        try:
            self.notification_repo.save(notification)
            return True
        except Exception:
            logger.exception(
                f"Failed to store notification '{notification.title}' for {notification.recipient_id}"
            )
            return False

    # =========================================================================
    # Routes
    # =========================================================================

    def _on_submitted(self, event: ComplaintSubmittedEvent) -> List[NotificationEntity]:
        recipients = self.member_directory.list_ids_by_roles(STAFF_ROLES)
        return [
            NotificationEntity.create(
                recipient_id=recipient_id,
                title="New Complaint Submitted",
                message=f'A new complaint "{event.title}" has been submitted ({event.ticket_id}).',
                type=NotificationType.COMPLAINT_SUBMITTED,
                related_complaint_id=event.aggregate_id,
            )
            for recipient_id in recipients
        ]

    def _on_status_changed(self, event: ComplaintStatusChangedEvent) -> List[NotificationEntity]:
        status = event.new_status
        message = f'Your complaint "{event.title}" ({event.ticket_id}) has been {status}.'
        if status == "rejected" and event.rejection_reason:
            message += f" Reason: {event.rejection_reason}"

        return [
            NotificationEntity.create(
                recipient_id=event.submitted_by,
                title=f"Complaint {status[:1].upper()}{status[1:]}",
                message=message,
                type=STATUS_NOTIFICATION_TYPES.get(status, NotificationType.COMPLAINT_UPDATED),
                related_complaint_id=event.aggregate_id,
            )
        ]

    def _on_assigned(self, event: ComplaintAssignedEvent) -> List[NotificationEntity]:
        return [
            NotificationEntity.create(
                recipient_id=event.assigned_to,
                title="Complaint Assigned to You",
                message=f'Complaint "{event.title}" ({event.ticket_id}) has been assigned to you.',
                type=NotificationType.COMPLAINT_ASSIGNED,
                related_complaint_id=event.aggregate_id,
            ),
            NotificationEntity.create(
                recipient_id=event.submitted_by,
                title="Complaint Assigned",
                message=(
                    f'Your complaint "{event.title}" has been assigned to '
                    f"{event.assignee_name or 'a staff member'} for review."
                ),
                type=NotificationType.COMPLAINT_UPDATED,
                related_complaint_id=event.aggregate_id,
            ),
        ]

    def _on_response_added(self, event: ComplaintResponseAddedEvent) -> List[NotificationEntity]:
        author_is_staff = event.author_role in STAFF_ROLES

        if author_is_staff and not event.is_internal and event.author_id != event.submitted_by:
            return [
                NotificationEntity.create(
                    recipient_id=event.submitted_by,
                    title="New Response on Your Complaint",
                    message=(
                        f'A new response has been added to your complaint "{event.title}" '
                        f"({event.ticket_id})."
                    ),
                    type=NotificationType.NEW_RESPONSE,
                    related_complaint_id=event.aggregate_id,
                )
            ]

        if not author_is_staff and event.assigned_to and event.author_id == event.submitted_by:
            return [
                NotificationEntity.create(
                    recipient_id=event.assigned_to,
                    title="Student Replied",
                    message=f'Student replied to complaint "{event.title}" ({event.ticket_id}).',
                    type=NotificationType.NEW_RESPONSE,
                    related_complaint_id=event.aggregate_id,
                )
            ]

        return []
