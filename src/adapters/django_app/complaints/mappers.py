"""
Mappers between core entities and Django models.

Responsibilities:
- ComplaintEntity <-> ComplaintModel
- CategoryModel -> CategoryInfo, MemberModel -> MemberInfo
- DomainEvent -> DomainEventModel (event store)

Mappers are stateless and never validate; data loaded from the database
was validated when it was created.
"""

from src.core.complaints.entities import (
    Attachment,
    ComplaintEntity,
    ComplaintPriority,
    ComplaintResponse,
    ComplaintStatus,
    Satisfaction,
)
from src.core.complaints.ports import CategoryInfo, MemberInfo
from src.core.shared.events import DomainEvent

from .models import CategoryModel, ComplaintModel, DomainEventModel, MemberModel


class ComplaintMapper:
    """ComplaintEntity <-> ComplaintModel."""

    @staticmethod
    def to_model_fields(entity: ComplaintEntity) -> dict:
        """Column values for ``update_or_create`` (everything except the pk)."""
        return {
            'ticket_id': entity.ticket_id,
            'title': entity.title,
            'description': entity.description,
            'category_id': entity.category_id,
            'status': entity.status.value,
            'priority': entity.priority.value,
            'submitted_by': entity.submitted_by,
            'assigned_to': entity.assigned_to,
            'is_anonymous': entity.is_anonymous,
            'attachments': [a.to_dict() for a in entity.attachments],
            'responses': [r.to_dict() for r in entity.responses],
            'resolved_at': entity.resolved_at,
            'rejection_reason': entity.rejection_reason,
            'satisfaction_rating': entity.satisfaction.rating if entity.satisfaction else None,
            'satisfaction_feedback': entity.satisfaction.feedback if entity.satisfaction else '',
            'created_at': entity.created_at,
            'updated_at': entity.updated_at,
        }

    @classmethod
    def to_model(cls, entity: ComplaintEntity) -> ComplaintModel:
        """Unsaved model; the repository decides how to persist it."""
        return ComplaintModel(id=entity.id, **cls.to_model_fields(entity))

    @staticmethod
    def to_entity(model: ComplaintModel) -> ComplaintEntity:
        satisfaction = None
        if model.satisfaction_rating is not None:
            satisfaction = Satisfaction(
                rating=model.satisfaction_rating,
                feedback=model.satisfaction_feedback or '',
            )

        return ComplaintEntity(
            id=model.id,
            ticket_id=model.ticket_id,
            title=model.title,
            description=model.description,
            category_id=model.category_id,
            status=ComplaintStatus(model.status),
            priority=ComplaintPriority(model.priority),
            submitted_by=model.submitted_by,
            assigned_to=model.assigned_to,
            is_anonymous=model.is_anonymous,
            attachments=[Attachment.from_dict(a) for a in model.attachments or []],
            responses=[ComplaintResponse.from_dict(r) for r in model.responses or []],
            resolved_at=model.resolved_at,
            rejection_reason=model.rejection_reason,
            satisfaction=satisfaction,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


class CategoryMapper:

    @staticmethod
    def to_info(model: CategoryModel) -> CategoryInfo:
        return CategoryInfo(
            id=model.id,
            name=model.name,
            is_active=model.is_active,
            icon=model.icon,
            color=model.color,
            description=model.description,
            complaint_count=model.complaint_count,
        )


class MemberMapper:

    @staticmethod
    def to_info(model: MemberModel) -> MemberInfo:
        return MemberInfo(
            id=model.id,
            name=model.name,
            role=model.role,
            email=model.email,
            department=model.department,
        )


class DomainEventMapper:
    """DomainEvent -> DomainEventModel."""

    @staticmethod
    def to_model(event: DomainEvent, sequence: int = 0) -> DomainEventModel:
        return DomainEventModel(
            event_id=event.event_id,
            event_type=event.event_type,
            aggregate_type=event.aggregate_type,
            aggregate_id=event.aggregate_id,
            event_data=event._get_event_data(),
            version=event.version,
            sequence=sequence,
            occurred_at=event.occurred_at,
        )

    @staticmethod
    def to_dict(model: DomainEventModel) -> dict:
        """Same shape as ``DomainEvent.to_dict``."""
        return {
            'event_id': model.event_id,
            'event_type': model.event_type,
            'aggregate_id': model.aggregate_id,
            'aggregate_type': model.aggregate_type,
            'occurred_at': model.occurred_at.isoformat(),
            'version': model.version,
            'data': model.event_data,
        }
