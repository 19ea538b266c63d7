"""
Tests for the Unit of Work implementations.

The Django one runs inside the test transaction, so its ``atomic`` block
is a savepoint; commit and rollback behave the same way for the rows it
touches.
"""

from unittest.mock import Mock

import pytest

from src.adapters.django_app.complaints.models import ComplaintModel, DomainEventModel
from src.adapters.django_app.complaints.repositories import DjangoComplaintRepository, DjangoEventStore
from src.adapters.django_app.events.publishers import InMemoryEventPublisher
from src.adapters.django_app.shared.unit_of_work import DjangoUnitOfWork, InMemoryUnitOfWork
from src.core.complaints.entities import ComplaintEntity, ComplaintStatus
from src.core.complaints.events import ComplaintStatusChangedEvent, ComplaintSubmittedEvent


def new_complaint():
    return ComplaintEntity.create(
        ticket_id="VHU-2503-0001",
        title="Broken projector",
        description="Room 12 projector does not turn on",
        category_id="cat-it",
        submitted_by="student-1",
    )


def submitted(complaint):
    return ComplaintSubmittedEvent(
        aggregate_id=complaint.id,
        ticket_id=complaint.ticket_id,
        title=complaint.title,
        submitted_by=complaint.submitted_by,
    )


@pytest.mark.django_db
class TestDjangoUnitOfWork:

    @pytest.fixture
    def publisher(self):
        return InMemoryEventPublisher()

    @pytest.fixture
    def uow(self, publisher):
        return DjangoUnitOfWork(event_publisher=publisher, event_store=DjangoEventStore())

    def test_commit_stores_and_publishes(self, uow, publisher):
        complaint = new_complaint()

        with uow:
            DjangoComplaintRepository().save(complaint)
            uow.publish_event(submitted(complaint))
            uow.publish_event(ComplaintStatusChangedEvent(
                aggregate_id=complaint.id, old_status="pending", new_status="in-review",
            ))
            assert publisher.published_events == []

        assert uow.is_committed
        assert ComplaintModel.objects.filter(id=complaint.id).exists()
        assert list(
            DomainEventModel.objects.filter(aggregate_id=complaint.id)
            .order_by("sequence").values_list("sequence", "event_type")
        ) == [(1, "ComplaintSubmittedEvent"), (2, "ComplaintStatusChangedEvent")]
        assert [e.event_type for e in publisher.published_events] == [
            "ComplaintSubmittedEvent",
            "ComplaintStatusChangedEvent",
        ]

    def test_rollback_on_exception(self, uow, publisher):
        complaint = new_complaint()

        with pytest.raises(RuntimeError):
            with uow:
                DjangoComplaintRepository().save(complaint)
                uow.publish_event(submitted(complaint))
                raise RuntimeError("boom")

        assert uow.is_rolled_back
        assert not ComplaintModel.objects.filter(id=complaint.id).exists()
        assert DomainEventModel.objects.count() == 0
        assert publisher.published_events == []
        assert uow.collect_events() == []

    def test_sequence_continues_the_stream(self, publisher):
        complaint = new_complaint()
        store = DjangoEventStore()

        with DjangoUnitOfWork(publisher, store) as first:
            first.publish_event(submitted(complaint))

        with DjangoUnitOfWork(publisher, store) as second:
            second.publish_event(ComplaintStatusChangedEvent(
                aggregate_id=complaint.id, new_status=ComplaintStatus.IN_REVIEW.value,
            ))

        assert store.last_sequence(complaint.id) == 2

    def test_publisher_failure_keeps_the_commit(self):
        publisher = Mock()
        publisher.publish.side_effect = RuntimeError("broker down")
        complaint = new_complaint()

        with DjangoUnitOfWork(publisher, DjangoEventStore()) as uow:
            DjangoComplaintRepository().save(complaint)
            uow.publish_event(submitted(complaint))

        assert uow.is_committed
        assert ComplaintModel.objects.filter(id=complaint.id).exists()
        assert DomainEventModel.objects.filter(aggregate_id=complaint.id).count() == 1
        publisher.publish.assert_called_once()

    def test_commit_without_store_or_publisher(self):
        complaint = new_complaint()

        with DjangoUnitOfWork() as uow:
            DjangoComplaintRepository().save(complaint)
            uow.publish_event(submitted(complaint))

        assert uow.is_committed
        assert DomainEventModel.objects.count() == 0

    def test_second_commit_is_ignored(self, uow, publisher):
        complaint = new_complaint()
        with uow:
            uow.publish_event(submitted(complaint))

        uow.commit()

        assert len(publisher.published_events) == 1


class TestInMemoryUnitOfWork:

    def test_commit(self):
        publisher = InMemoryEventPublisher()
        uow = InMemoryUnitOfWork(event_publisher=publisher)
        event = submitted(new_complaint())

        with uow:
            uow.publish_event(event)

        assert uow.committed
        assert uow.published_events == [event]
        assert publisher.published_events == [event]

    def test_rollback(self):
        uow = InMemoryUnitOfWork()

        with pytest.raises(ValueError):
            with uow:
                uow.publish_event(submitted(new_complaint()))
                raise ValueError("invalid")

        assert uow.rolled_back
        assert not uow.committed
        assert uow.published_events == []

    def test_reset(self):
        uow = InMemoryUnitOfWork()
        with uow:
            uow.publish_event(submitted(new_complaint()))

        uow.reset()

        assert not uow.committed
        assert uow.published_events == []
