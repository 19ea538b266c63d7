"""
Django ORM implementation of NotificationRepository.
"""

from typing import List, Optional
import logging

from src.core.notifications.entities import NotificationEntity, NotificationType

from ..shared.repository import BaseRepository
from .models import NotificationModel

logger = logging.getLogger(__name__)


class NotificationMapper:
    """NotificationEntity <-> NotificationModel."""

    @staticmethod
    def to_model_fields(entity: NotificationEntity) -> dict:
        return {
            'recipient_id': entity.recipient_id,
            'title': entity.title,
            'message': entity.message,
            'type': entity.type.value,
            'related_complaint_id': entity.related_complaint_id,
            'is_read': entity.is_read,
            'created_at': entity.created_at,
        }

    @staticmethod
    def to_entity(model: NotificationModel) -> NotificationEntity:
        return NotificationEntity(
            id=model.id,
            recipient_id=model.recipient_id,
            title=model.title,
            message=model.message,
            type=NotificationType(model.type),
            related_complaint_id=model.related_complaint_id,
            is_read=model.is_read,
            created_at=model.created_at,
        )


class DjangoNotificationRepository(BaseRepository[NotificationEntity, NotificationModel]):

    model_class = NotificationModel

    def to_entity(self, model: NotificationModel) -> NotificationEntity:
        return NotificationMapper.to_entity(model)

    def to_model_fields(self, entity: NotificationEntity) -> dict:
        return NotificationMapper.to_model_fields(entity)

    def _inbox(self, recipient_id: str, unread_only: bool):
        qs = self._get_base_queryset().filter(recipient_id=recipient_id)
        if unread_only:
            qs = qs.filter(is_read=False)
        return qs

    def list_for_recipient(
        self,
        recipient_id: str,
        unread_only: bool = False,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[NotificationEntity]:
        qs = self._inbox(recipient_id, unread_only).order_by('-created_at')
        return self._slice(qs, offset, limit)

    def count_for_recipient(self, recipient_id: str, unread_only: bool = False) -> int:
        return self._inbox(recipient_id, unread_only).count()

    def mark_all_read(self, recipient_id: str) -> int:
        changed = self._inbox(recipient_id, unread_only=True).update(is_read=True)
        logger.info(f"{changed} notification(s) marked read for {recipient_id}")
        return changed
