"""
Repository Base - common Django ORM plumbing for the repositories.

Provides:
- create-or-update through ``update_or_create``
- lookup by primary key with DoesNotExist handled
- delete
- slicing helper for offset/limit pagination

Principles:
- Repositories are stateless
- No business logic, only persistence and queries
"""

from abc import ABC, abstractmethod
from typing import Generic, List, Optional, Type, TypeVar
import logging

from django.db import models
from django.db.models import QuerySet

logger = logging.getLogger(__name__)

T = TypeVar("T")  # Entity type
M = TypeVar("M", bound=models.Model)  # Model type


class BaseRepository(ABC, Generic[T, M]):
    """
    Abstract base for Django repositories.

    Type Parameters:
        T: Domain entity type
        M: Django model type

    Example:
        class DjangoNotificationRepository(BaseRepository[NotificationEntity, NotificationModel]):
            model_class = NotificationModel

            def to_entity(self, model):
                return NotificationMapper.to_entity(model)

            def to_model_fields(self, entity):
                return NotificationMapper.to_model_fields(entity)
    """

    model_class: Type[M]

    @abstractmethod
    def to_entity(self, model: M) -> T:
        raise NotImplementedError

    @abstractmethod
    def to_model_fields(self, entity: T) -> dict:
        """Column values for the entity, primary key excluded."""
        raise NotImplementedError

    def _get_base_queryset(self) -> QuerySet:
        return self.model_class.objects.all()

    def save(self, entity: T) -> None:
        """
        Persists the entity (create or update).

        Args:
            entity: Entity to persist
        """
        _, created = self.model_class.objects.update_or_create(
            id=getattr(entity, "id"),
            defaults=self.to_model_fields(entity),
        )
        logger.info(f"{self.model_class.__name__} {'created' if created else 'updated'}: {entity.id}")

    def get_by_id(self, entity_id: str) -> Optional[T]:
        try:
            model = self._get_base_queryset().get(id=entity_id)
            return self.to_entity(model)
        except self.model_class.DoesNotExist:
            logger.debug(f"{self.model_class.__name__} not found: {entity_id}")
            return None

    def delete(self, entity_id: str) -> bool:
        """
        Returns:
            True if a row was removed
        """
        deleted_count, _ = self.model_class.objects.filter(id=entity_id).delete()
        if deleted_count:
            logger.info(f"{self.model_class.__name__} deleted: {entity_id}")
        return deleted_count > 0

    def _slice(self, qs: QuerySet, offset: int = 0, limit: Optional[int] = None) -> List[T]:
        """Applies offset/limit and converts to entities."""
        rows = qs[offset:] if limit is None else qs[offset:offset + limit]
        return [self.to_entity(m) for m in rows]
