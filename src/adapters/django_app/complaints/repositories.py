"""
Django ORM implementations of the Complaints ports.

- DjangoComplaintRepository: ComplaintRepository
- DjangoCategoryCatalog: CategoryCatalog
- DjangoMemberDirectory: MemberDirectory
- DjangoTicketSequence: TicketSequence
- DjangoEventStore: EventStore

Queries are expressed with ``Q`` objects built from the storage-agnostic
``ComplaintFilter`` so the database does the filtering, sorting and
slicing.
"""

from typing import Dict, List, Optional, Sequence, Tuple
import logging

from django.db import IntegrityError, transaction
from django.db.models import Avg, Count, F, Q

from src.core.complaints.access import ComplaintFilter
from src.core.complaints.entities import ComplaintEntity, ComplaintStatus
from src.core.complaints.ports import SORTABLE_FIELDS, CategoryInfo, MemberInfo
from src.core.shared.events import DomainEvent
from src.core.shared.exceptions import ConflictError
from src.core.shared.interfaces import EventStore

from ..shared.repository import BaseRepository
from .mappers import CategoryMapper, ComplaintMapper, DomainEventMapper, MemberMapper
from .models import (
    CategoryModel,
    ComplaintModel,
    DomainEventModel,
    MemberModel,
    TicketSequenceModel,
)

logger = logging.getLogger(__name__)


def filter_to_q(complaint_filter: Optional[ComplaintFilter]) -> Q:
    """Translates a ComplaintFilter into a Q object."""
    q = Q()
    if complaint_filter is None:
        return q

    if complaint_filter.submitted_by is not None:
        q &= Q(submitted_by=complaint_filter.submitted_by)

    if complaint_filter.assignee_scope is not None:
        scope = Q(pk__in=[])
        for assignee in complaint_filter.assignee_scope:
            scope |= Q(assigned_to__isnull=True) if assignee is None else Q(assigned_to=assignee)
        q &= scope

    if complaint_filter.status is not None:
        q &= Q(status=complaint_filter.status.value)
    if complaint_filter.priority is not None:
        q &= Q(priority=complaint_filter.priority.value)
    if complaint_filter.category_id is not None:
        q &= Q(category_id=complaint_filter.category_id)
    if complaint_filter.assigned_to is not None:
        q &= Q(assigned_to=complaint_filter.assigned_to)

    if complaint_filter.search:
        term = complaint_filter.search
        q &= (
            Q(title__icontains=term)
            | Q(description__icontains=term)
            | Q(ticket_id__icontains=term)
        )

    return q


class DjangoComplaintRepository(BaseRepository[ComplaintEntity, ComplaintModel]):
    """
    Complaint repository on the Django ORM.

    Example:
        repo = DjangoComplaintRepository()
        repo.save(complaint)
        page = repo.list_filtered(ComplaintFilter(submitted_by=user_id), limit=10)
    """

    model_class = ComplaintModel

    def to_entity(self, model: ComplaintModel) -> ComplaintEntity:
        return ComplaintMapper.to_entity(model)

    def to_model_fields(self, entity: ComplaintEntity) -> dict:
        return ComplaintMapper.to_model_fields(entity)

    def save(self, complaint: ComplaintEntity) -> None:
        """
        Raises:
            ConflictError: ticket id already used by another complaint
        """
        try:
            with transaction.atomic():
                super().save(complaint)
        except IntegrityError as e:
            logger.warning(f"Integrity error saving complaint {complaint.id}: {e}")
            raise ConflictError(f"Duplicate ticket id {complaint.ticket_id}", field="ticket_id") from e

    def list_filtered(
        self,
        complaint_filter: ComplaintFilter,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[ComplaintEntity]:
        if sort_by not in SORTABLE_FIELDS:
            sort_by = "created_at"
        prefix = "-" if sort_order == "desc" else ""

        qs = self._get_base_queryset().filter(filter_to_q(complaint_filter)).order_by(f"{prefix}{sort_by}")
        return self._slice(qs, offset, limit)

    def count(self, complaint_filter: Optional[ComplaintFilter] = None) -> int:
        return self.model_class.objects.filter(filter_to_q(complaint_filter)).count()

    def count_by(self, field_name: str, complaint_filter: Optional[ComplaintFilter] = None) -> Dict[str, int]:
        if field_name not in ("status", "priority"):
            raise ValueError(f"Cannot group complaints by {field_name}")

        rows = (
            self.model_class.objects
            .filter(filter_to_q(complaint_filter))
            .order_by()
            .values(field_name)
            .annotate(count=Count("id"))
        )
        return {row[field_name]: row["count"] for row in rows}

    def average_resolution_days(self) -> float:
        durations = [
            (resolved_at - created_at).total_seconds() / 86400
            for created_at, resolved_at in (
                self.model_class.objects
                .filter(status=ComplaintStatus.RESOLVED.value, resolved_at__isnull=False)
                .values_list("created_at", "resolved_at")
            )
        ]
        if not durations:
            return 0.0
        return sum(durations) / len(durations)

    def rating_summary(self) -> Tuple[float, int]:
        summary = self.model_class.objects.filter(satisfaction_rating__isnull=False).aggregate(
            avg=Avg("satisfaction_rating"),
            total=Count("id"),
        )
        return float(summary["avg"] or 0.0), summary["total"]


class DjangoCategoryCatalog:
    """CategoryCatalog on the ``categories`` table."""

    def get(self, category_id: str) -> Optional[CategoryInfo]:
        model = CategoryModel.objects.filter(id=category_id).first()
        if model is None:
            logger.debug(f"Category not found: {category_id}")
            return None
        return CategoryMapper.to_info(model)

    def increment_complaint_count(self, category_id: str, delta: int = 1) -> None:
        CategoryModel.objects.filter(id=category_id).update(complaint_count=F("complaint_count") + delta)

    def count_active(self) -> int:
        return CategoryModel.objects.filter(is_active=True).count()


class DjangoMemberDirectory:
    """MemberDirectory on the ``members`` table."""

    def get_member(self, user_id: str) -> Optional[MemberInfo]:
        model = MemberModel.objects.filter(id=user_id, is_active=True).first()
        if model is None:
            logger.debug(f"Member not found: {user_id}")
            return None
        return MemberMapper.to_info(model)

    def list_ids_by_roles(self, roles: Sequence[str]) -> List[str]:
        return list(
            MemberModel.objects.filter(role__in=list(roles), is_active=True).values_list("id", flat=True)
        )

    def count_by_role(self, role: Optional[str] = None) -> int:
        qs = MemberModel.objects.filter(is_active=True)
        if role is not None:
            qs = qs.filter(role=role)
        return qs.count()


class DjangoTicketSequence:
    """
    Atomic counter row.

    ``UPDATE ... SET value = value + 1`` takes a row lock, so concurrent
    transactions serialize on it and never read the same value.
    """

    def __init__(self, name: str = "complaints"):
        self.name = name

    def next_value(self) -> int:
        with transaction.atomic():
            TicketSequenceModel.objects.get_or_create(name=self.name)
            TicketSequenceModel.objects.filter(name=self.name).update(value=F("value") + 1)
            return TicketSequenceModel.objects.values_list("value", flat=True).get(name=self.name)


class DjangoEventStore(EventStore):
    """Event store on the ``domain_events`` table."""

    def append(self, event: DomainEvent, sequence: int) -> None:
        DomainEventMapper.to_model(event, sequence).save(force_insert=True)
        logger.debug(f"Event stored: {event.event_type} #{sequence} for {event.aggregate_id}")

    def get_events_for_aggregate(self, aggregate_id: str) -> List[dict]:
        models = DomainEventModel.objects.filter(aggregate_id=aggregate_id).order_by("sequence", "recorded_at")
        return [DomainEventMapper.to_dict(m) for m in models]

    def last_sequence(self, aggregate_id: str) -> int:
        last = (
            DomainEventModel.objects
            .filter(aggregate_id=aggregate_id)
            .order_by("-sequence")
            .values_list("sequence", flat=True)
            .first()
        )
        return last or 0
