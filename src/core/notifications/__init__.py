"""
Notifications domain - pull-based member notifications.

Contents:
- NotificationEntity, NotificationType
- NotificationDispatcher (event fan-out)
- Use Cases (list, mark read, mark all read, delete)
"""

from .dispatcher import NotificationDispatcher
from .entities import NotificationEntity, NotificationType
from .ports import InMemoryNotificationRepository, NotificationRepository
from .use_cases import (
    DeleteNotificationService,
    ListNotificationsService,
    MarkAllNotificationsReadService,
    MarkNotificationReadService,
)

__all__ = [
    "NotificationDispatcher",
    "NotificationEntity",
    "NotificationType",
    "InMemoryNotificationRepository",
    "NotificationRepository",
    "DeleteNotificationService",
    "ListNotificationsService",
    "MarkAllNotificationsReadService",
    "MarkNotificationReadService",
]
