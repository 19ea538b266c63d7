"""
Unit tests for the Notifications use cases.

Every operation is scoped to the caller: another member's notification
behaves like an unknown id.
"""

from datetime import timedelta

import pytest

from src.core.complaints.entities import ComplaintEntity
from src.core.notifications.dtos import ListNotificationsQueryDTO
from src.core.notifications.entities import NotificationEntity, NotificationType
from src.core.notifications.use_cases import (
    DeleteNotificationService,
    ListNotificationsService,
    MarkAllNotificationsReadService,
    MarkNotificationReadService,
)
from src.core.shared.exceptions import NotFoundError, ValidationError


@pytest.fixture
def inbox(notification_repo, student, other_student):
    """Three notifications for the student (oldest first), one for someone else."""
    created = []
    for i in range(3):
        notification = NotificationEntity.create(student.user_id, f"Update {i}", f"Message {i}",
                                                 NotificationType.COMPLAINT_UPDATED)
        notification.created_at = notification.created_at + timedelta(seconds=i)
        notification_repo.save(notification)
        created.append(notification)

    foreign = NotificationEntity.create(other_student.user_id, "Other", "Not yours")
    notification_repo.save(foreign)
    return created, foreign


class TestNotificationEntity:

    @pytest.mark.parametrize("recipient,title,message", [
        ("", "Title", "Body"),
        ("student-1", " ", "Body"),
        ("student-1", "Title", ""),
    ])
    def test_required_fields(self, recipient, title, message):
        with pytest.raises(ValidationError):
            NotificationEntity.create(recipient, title, message)


class TestListNotificationsQuery:

    def test_defaults(self, student):
        query = ListNotificationsQueryDTO.from_params(student, {}, default_limit=15, unread_only=True)

        assert (query.page, query.limit, query.unread_only) == (1, 15, True)

    @pytest.mark.parametrize("params", [{"limit": "101"}, {"limit": "0"}, {"page": "x"}])
    def test_bad_paging(self, student, params):
        with pytest.raises(ValidationError) as exc_info:
            ListNotificationsQueryDTO.from_params(student, params)

        assert exc_info.value.field in ("limit", "page")


class TestListNotificationsService:

    def test_newest_first_and_own_only(self, inbox, notification_repo, student):
        service = ListNotificationsService(notification_repo)

        result = service.execute(ListNotificationsQueryDTO(caller=student))

        assert [n.title for n in result.notifications] == ["Update 2", "Update 1", "Update 0"]
        assert result.unread_count == 3
        assert result.total == 3

    def test_unread_only_and_pagination(self, inbox, notification_repo, student):
        created, _ = inbox
        created[2].mark_read()
        service = ListNotificationsService(notification_repo)

        result = service.execute(ListNotificationsQueryDTO(caller=student, unread_only=True, page=2, limit=1))

        assert [n.title for n in result.notifications] == ["Update 0"]
        assert result.to_dict()["pagination"] == {"total": 2, "page": 2, "pages": 2, "limit": 1}
        assert result.to_dict()["unreadCount"] == 2

    def test_related_complaint_summary(self, notification_repo, complaint_repo, student):
        complaint = ComplaintEntity.create(
            ticket_id="VHU-2503-0001",
            title="WiFi down",
            description="Block 4",
            category_id="cat-it",
            submitted_by=student.user_id,
        )
        complaint_repo.save(complaint)
        notification_repo.save(NotificationEntity.create(
            student.user_id, "Complaint Resolved", "Done", NotificationType.COMPLAINT_RESOLVED, complaint.id,
        ))

        result = ListNotificationsService(notification_repo, complaint_repo).execute(
            ListNotificationsQueryDTO(caller=student)
        )

        assert result.notifications[0].related_complaint == {
            "id": complaint.id,
            "ticketId": "VHU-2503-0001",
            "title": "WiFi down",
            "status": "pending",
        }

    def test_deleted_complaint_keeps_only_the_id(self, notification_repo, complaint_repo, student):
        notification_repo.save(NotificationEntity.create(student.user_id, "Gone", "Deleted", related_complaint_id="x"))

        result = ListNotificationsService(notification_repo, complaint_repo).execute(
            ListNotificationsQueryDTO(caller=student)
        )

        assert result.notifications[0].related_complaint == {"id": "x"}


class TestMarkRead:

    def test_mark_one(self, inbox, notification_repo, student):
        created, _ = inbox

        output = MarkNotificationReadService(notification_repo).execute(created[0].id, student)

        assert output.is_read is True
        assert notification_repo.count_for_recipient(student.user_id, unread_only=True) == 2

    def test_foreign_notification_is_not_found(self, inbox, notification_repo, student):
        _, foreign = inbox

        with pytest.raises(NotFoundError):
            MarkNotificationReadService(notification_repo).execute(foreign.id, student)

        assert notification_repo.get_by_id(foreign.id).is_read is False

    def test_mark_all(self, inbox, notification_repo, student, other_student):
        changed = MarkAllNotificationsReadService(notification_repo).execute(student)

        assert changed == 3
        assert notification_repo.count_for_recipient(student.user_id, unread_only=True) == 0
        assert notification_repo.count_for_recipient(other_student.user_id, unread_only=True) == 1

    def test_mark_all_twice(self, inbox, notification_repo, student):
        service = MarkAllNotificationsReadService(notification_repo)
        service.execute(student)

        assert service.execute(student) == 0


class TestDeleteNotificationService:

    def test_delete_own(self, inbox, notification_repo, student):
        created, _ = inbox

        DeleteNotificationService(notification_repo).execute(created[0].id, student)

        assert notification_repo.get_by_id(created[0].id) is None

    def test_delete_foreign(self, inbox, notification_repo, student):
        _, foreign = inbox

        with pytest.raises(NotFoundError):
            DeleteNotificationService(notification_repo).execute(foreign.id, student)

    def test_delete_unknown(self, notification_repo, student):
        with pytest.raises(NotFoundError):
            DeleteNotificationService(notification_repo).execute("missing", student)
