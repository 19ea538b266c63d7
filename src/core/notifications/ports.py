"""
Ports of the Notifications domain.

- NotificationRepository: persistence, scoped by recipient
- InMemoryNotificationRepository: dict-backed implementation for tests
"""

from typing import Dict, List, Optional, Protocol, runtime_checkable

from .entities import NotificationEntity


@runtime_checkable
class NotificationRepository(Protocol):
    """
    Persistence of notifications.

    Implementations:
    - DjangoNotificationRepository (ORM)
    - InMemoryNotificationRepository (tests)
    """

    def save(self, notification: NotificationEntity) -> None:
        ...

    def get_by_id(self, notification_id: str) -> Optional[NotificationEntity]:
        ...

    def delete(self, notification_id: str) -> None:
        ...

    def list_for_recipient(
        self,
        recipient_id: str,
        unread_only: bool = False,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[NotificationEntity]:
        """Newest first."""
        ...

    def count_for_recipient(self, recipient_id: str, unread_only: bool = False) -> int:
        ...

    def mark_all_read(self, recipient_id: str) -> int:
        """
        Returns:
            Number of notifications that changed
        """
        ...


class InMemoryNotificationRepository:
    """In-memory NotificationRepository. Not for production."""

    def __init__(self):
        self._notifications: Dict[str, NotificationEntity] = {}

    def save(self, notification: NotificationEntity) -> None:
        self._notifications[notification.id] = notification

    def get_by_id(self, notification_id: str) -> Optional[NotificationEntity]:
        return self._notifications.get(notification_id)

    def delete(self, notification_id: str) -> None:
        self._notifications.pop(notification_id, None)

    def _for(self, recipient_id: str, unread_only: bool) -> List[NotificationEntity]:
        items = [
            n for n in self._notifications.values()
            if n.recipient_id == recipient_id and not (unread_only and n.is_read)
        ]
        items.sort(key=lambda n: n.created_at, reverse=True)
        return items

    def list_for_recipient(
        self,
        recipient_id: str,
        unread_only: bool = False,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[NotificationEntity]:
        end = None if limit is None else offset + limit
        return self._for(recipient_id, unread_only)[offset:end]

    def count_for_recipient(self, recipient_id: str, unread_only: bool = False) -> int:
        return len(self._for(recipient_id, unread_only))

    def mark_all_read(self, recipient_id: str) -> int:
        changed = 0
        for notification in self._for(recipient_id, unread_only=True):
            notification.mark_read()
            changed += 1
        return changed

    def list_all(self) -> List[NotificationEntity]:
        return list(self._notifications.values())

    def clear(self) -> None:
        self._notifications.clear()
