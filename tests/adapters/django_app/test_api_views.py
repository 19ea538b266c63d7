"""
Tests for the JSON API.

Requests go through Django's test client, the real container and the
in-memory SQLite database; notifications are written by the sync
publisher right after each commit.
"""

from unittest.mock import Mock

import pytest
from dependency_injector import providers

from src.adapters.django_app.complaints.models import CategoryModel, ComplaintModel, DomainEventModel
from src.adapters.django_app.notifications.models import NotificationModel
from src.config.container import get_container

pytestmark = pytest.mark.django_db


def url(complaint, action=""):
    base = f"/api/complaints/{complaint['id']}/"
    return f"{base}{action}/" if action else base


class TestEnvelope:

    def test_health_is_public(self, client):
        response = client.get("/api/health/")

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "VoiceHU API is running", "health": "ok"}

    def test_missing_identity(self, api):
        response = api("get", "/api/complaints/")

        assert response.status_code == 401
        assert response.json()["success"] is False
        assert response.json()["error"] == "AUTHENTICATION_REQUIRED"

    def test_unknown_role(self, client, members):
        response = client.get("/api/complaints/", HTTP_X_USER_ID="student-1", HTTP_X_USER_ROLE="dean")

        assert response.status_code == 401

    def test_malformed_json(self, api, student):
        response = api("post", "/api/complaints/", student, "{not json")

        assert response.status_code == 400
        assert response.json()["error"] == "BAD_REQUEST"

    def test_unexpected_error_is_hidden(self, api, admin):
        failing = Mock()
        failing.execute.side_effect = RuntimeError("database exploded")
        get_container().complaint_stats_service.override(providers.Object(failing))

        response = api("get", "/api/complaints/stats/", admin)

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Server Error", "error": "INTERNAL_ERROR"}


class TestCreateComplaint:

    def test_created(self, filed):
        assert filed["status"] == "pending"
        assert filed["priority"] == "high"
        assert filed["ticketId"].startswith("VHU-")
        assert filed["ticketId"].endswith("-0001")
        assert filed["category"]["name"] == "IT Services"
        assert filed["submittedBy"]["name"] == "Kenenisa Bekele"

    def test_message(self, api, student):
        response = api("post", "/api/complaints/", student, {
            "title": "Library closed early",
            "description": "The library closed at 6pm on Tuesday.",
            "category": "cat-it",
        })

        assert response.json()["message"] == "Complaint submitted successfully!"

    def test_side_effects(self, filed):
        assert CategoryModel.objects.get(id="cat-it").complaint_count == 1
        assert sorted(NotificationModel.objects.values_list("recipient_id", flat=True)) == [
            "admin-1", "staff-1", "staff-2",
        ]
        assert DomainEventModel.objects.filter(aggregate_id=filed["id"]).count() == 1

    def test_missing_fields(self, api, student):
        response = api("post", "/api/complaints/", student, {"title": "Only a title"})

        assert response.status_code == 400
        assert response.json()["message"] == "Please provide title, description, and category."
        assert ComplaintModel.objects.count() == 0

    def test_inactive_category(self, api, student):
        response = api("post", "/api/complaints/", student, {
            "title": "Old", "description": "Old category", "categoryId": "cat-retired",
        })

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_CATEGORY"

    def test_non_text_title(self, api, student):
        response = api("post", "/api/complaints/", student, {
            "title": 123, "description": "Numbers for a title", "categoryId": "cat-it",
        })

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR_TITLE"
        assert ComplaintModel.objects.count() == 0

    @pytest.mark.parametrize("attachments", [["a.png"], {"a": 1}, "a.png"])
    def test_malformed_attachments(self, api, student, attachments):
        response = api("post", "/api/complaints/", student, {
            "title": "Broken door", "description": "See attached", "categoryId": "cat-it",
            "attachments": attachments,
        })

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR_ATTACHMENTS"

    def test_sequential_ticket_ids(self, api, student, filed):
        response = api("post", "/api/complaints/", student, {
            "title": "Second", "description": "Second complaint", "categoryId": "cat-it",
        })

        assert response.json()["complaint"]["ticketId"].endswith("-0002")


class TestListAndGet:

    def test_student_sees_own_only(self, api, filed, student, other_student):
        api("post", "/api/complaints/", other_student, {
            "title": "WiFi slow", "description": "Slow in the library", "categoryId": "cat-it",
        })

        mine = api("get", "/api/complaints/?search=wifi", student).json()
        theirs = api("get", "/api/complaints/", other_student).json()

        assert [c["id"] for c in mine["complaints"]] == [filed["id"]]
        assert mine["pagination"] == {"total": 1, "page": 1, "pages": 1, "limit": 10}
        assert len(theirs["complaints"]) == 1
        assert theirs["complaints"][0]["id"] != filed["id"]

    def test_admin_filters(self, api, filed, admin):
        pending = api("get", "/api/complaints/?status=pending&priority=high", admin).json()
        resolved = api("get", "/api/complaints/?status=resolved", admin).json()

        assert pending["pagination"]["total"] == 1
        assert resolved["complaints"] == []

    def test_bad_filter(self, api, admin):
        response = api("get", "/api/complaints/?status=archived", admin)

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_STATUS"

    def test_get_owner(self, api, filed, student):
        response = api("get", url(filed), student)

        assert response.status_code == 200
        assert response.json()["complaint"]["ticketId"] == filed["ticketId"]

    def test_get_foreign(self, api, filed, other_student):
        assert api("get", url(filed), other_student).status_code == 403

    def test_get_unknown(self, api, admin):
        response = api("get", "/api/complaints/does-not-exist/", admin)

        assert response.status_code == 404
        assert response.json()["message"] == "Complaint not found."


class TestStatus:

    def test_update(self, api, filed, staff):
        response = api("put", url(filed, "status"), staff, {"status": "in-progress"})

        assert response.status_code == 200
        assert response.json()["message"] == "Complaint status updated to in-progress."
        assert ComplaintModel.objects.get(id=filed["id"]).status == "in-progress"

    def test_reject_without_reason(self, api, filed, staff):
        response = api("put", url(filed, "status"), staff, {"status": "rejected"})

        assert response.status_code == 400
        assert response.json()["error"] == "MISSING_REASON"
        assert ComplaintModel.objects.get(id=filed["id"]).status == "pending"

    def test_non_text_reason(self, api, filed, staff):
        response = api("put", url(filed, "status"), staff, {"status": "rejected", "rejectionReason": ["dup"]})

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR_REJECTION_REASON"

    def test_reject_notifies_submitter(self, api, filed, staff):
        api("put", url(filed, "status"), staff, {"status": "rejected", "rejectionReason": "Duplicate"})

        notification = NotificationModel.objects.get(recipient_id="student-1")
        assert notification.type == "complaint_rejected"
        assert notification.related_complaint_id == filed["id"]

    def test_resolved_at(self, api, filed, admin):
        first = api("put", url(filed, "status"), admin, {"status": "resolved"}).json()["complaint"]
        api("put", url(filed, "status"), admin, {"status": "in-progress"})
        again = api("put", url(filed, "status"), admin, {"status": "resolved"}).json()["complaint"]

        assert first["resolvedAt"] is not None
        assert again["resolvedAt"] == first["resolvedAt"]

    def test_student_forbidden(self, api, filed, student):
        assert api("put", url(filed, "status"), student, {"status": "closed"}).status_code == 403

    def test_events_are_sequenced(self, api, filed, staff):
        api("put", url(filed, "status"), staff, {"status": "in-review"})
        api("put", url(filed, "status"), staff, {"status": "in-progress"})

        sequences = list(
            DomainEventModel.objects.filter(aggregate_id=filed["id"]).order_by("sequence").values_list(
                "sequence", "event_type",
            )
        )
        assert sequences == [
            (1, "ComplaintSubmittedEvent"),
            (2, "ComplaintStatusChangedEvent"),
            (3, "ComplaintStatusChangedEvent"),
        ]


class TestAssign:

    def test_assign(self, api, filed, admin):
        response = api("put", url(filed, "assign"), admin, {"assignedTo": "staff-1"})

        body = response.json()
        assert response.status_code == 200
        assert body["message"] == "Complaint assigned to Dr. Abebe Kebede."
        assert body["complaint"]["status"] == "in-review"
        assert NotificationModel.objects.filter(recipient_id="student-1", type="complaint_updated").count() == 1

    def test_assign_to_student(self, api, filed, admin):
        response = api("put", url(filed, "assign"), admin, {"assignedTo": "student-2"})

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_ASSIGNEE"

    def test_non_text_assignee(self, api, filed, admin):
        response = api("put", url(filed, "assign"), admin, {"assignedTo": ["staff-1"]})

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR_ASSIGNED_TO"

    def test_staff_cannot_assign(self, api, filed, staff):
        assert api("put", url(filed, "assign"), staff, {"assignedTo": "staff-1"}).status_code == 403


class TestRespond:

    def test_student_internal_flag_ignored(self, api, filed, student):
        response = api("post", url(filed, "respond"), student, {"message": "Any news?", "isInternal": True})

        assert response.status_code == 200
        assert response.json()["complaint"]["responses"][0]["isInternal"] is False
        assert ComplaintModel.objects.get(id=filed["id"]).responses[0]["isInternal"] is False

    def test_internal_note_hidden_from_student(self, api, filed, staff, student):
        api("post", url(filed, "respond"), staff, {"message": "Router replaced", "isInternal": True})

        as_student = api("get", url(filed), student).json()["complaint"]
        as_staff = api("get", url(filed), staff).json()["complaint"]

        assert as_student["responses"] == []
        assert as_staff["responses"][0]["author"]["name"] == "Dr. Abebe Kebede"

    def test_empty_message(self, api, filed, staff):
        assert api("post", url(filed, "respond"), staff, {"message": ""}).status_code == 400

    def test_non_text_message(self, api, filed, staff):
        response = api("post", url(filed, "respond"), staff, {"message": 42})

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR_MESSAGE"

    def test_foreign_student(self, api, filed, other_student):
        assert api("post", url(filed, "respond"), other_student, {"message": "Me too"}).status_code == 403


class TestRate:

    def test_pending_then_resolved(self, api, filed, student, staff):
        """Rating a pending complaint is a state error; once resolved it succeeds."""
        pending = api("put", url(filed, "rate"), student, {"rating": 4})
        api("put", url(filed, "status"), staff, {"status": "resolved"})
        resolved = api("put", url(filed, "rate"), student, {"rating": 4, "feedback": "Fixed quickly"})

        assert pending.status_code == 400
        assert pending.json()["error"] == "INVALID_STATE"
        assert resolved.status_code == 200
        assert resolved.json()["message"] == "Thank you for your feedback!"
        assert resolved.json()["complaint"]["satisfaction"] == {"rating": 4, "feedback": "Fixed quickly"}

    def test_invalid_rating(self, api, filed, student):
        response = api("put", url(filed, "rate"), student, {"rating": 7})

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_RATING"

    def test_numeric_string_rating(self, api, filed, student, staff):
        api("put", url(filed, "status"), staff, {"status": "resolved"})

        response = api("put", url(filed, "rate"), student, {"rating": "4"})

        assert response.status_code == 200
        assert response.json()["complaint"]["satisfaction"]["rating"] == 4
        assert ComplaintModel.objects.get(id=filed["id"]).satisfaction_rating == 4

    def test_staff_cannot_rate(self, api, filed, staff):
        assert api("put", url(filed, "rate"), staff, {"rating": 5}).status_code == 403


class TestDelete:

    def test_owner_deletes_pending(self, api, filed, student):
        response = api("delete", url(filed), student)

        assert response.status_code == 200
        assert response.json()["message"] == "Complaint deleted successfully."
        assert not ComplaintModel.objects.filter(id=filed["id"]).exists()
        assert CategoryModel.objects.get(id="cat-it").complaint_count == 0

    def test_owner_after_review(self, api, filed, student, staff):
        api("put", url(filed, "status"), staff, {"status": "in-review"})

        assert api("delete", url(filed), student).status_code == 400

    def test_staff_forbidden(self, api, filed, staff):
        assert api("delete", url(filed), staff).status_code == 403

    def test_admin(self, api, filed, admin):
        assert api("delete", url(filed), admin).status_code == 200


class TestStats:

    def test_admin_stats(self, api, filed, admin):
        stats = api("get", "/api/complaints/stats/", admin).json()["stats"]

        assert stats["totalComplaints"] == 1
        assert stats["statusCounts"] == {"pending": 1}
        assert stats["totalUsers"] == 5
        assert stats["totalCategories"] == 1

    def test_staff_stats_are_scoped(self, api, filed, admin, staff, other_staff):
        api("put", url(filed, "assign"), admin, {"assignedTo": "staff-1"})

        assert api("get", "/api/complaints/stats/", staff).json()["stats"]["totalComplaints"] == 1
        assert api("get", "/api/complaints/stats/", other_staff).json()["stats"]["totalComplaints"] == 0


class TestNotifications:

    def test_list(self, api, filed, staff):
        body = api("get", "/api/notifications/", staff).json()

        assert body["success"] is True
        assert body["unreadCount"] == 1
        assert body["notifications"][0]["type"] == "complaint_submitted"
        assert body["notifications"][0]["relatedComplaint"]["ticketId"] == filed["ticketId"]

    def test_limit_is_capped(self, api, filed, staff):
        assert api("get", "/api/notifications/?limit=100", staff).status_code == 200

        response = api("get", "/api/notifications/?limit=101", staff)

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR_LIMIT"

    def test_mark_read(self, api, filed, staff):
        notification_id = NotificationModel.objects.get(recipient_id="staff-1").id

        response = api("put", f"/api/notifications/{notification_id}/read/", staff)

        assert response.status_code == 200
        assert response.json()["notification"]["isRead"] is True
        assert api("get", "/api/notifications/?unreadOnly=true", staff).json()["notifications"] == []

    def test_foreign_notification(self, api, filed, other_staff):
        notification_id = NotificationModel.objects.get(recipient_id="staff-1").id

        assert api("put", f"/api/notifications/{notification_id}/read/", other_staff).status_code == 404
        assert api("delete", f"/api/notifications/{notification_id}/", other_staff).status_code == 404

    def test_read_all(self, api, filed, admin):
        response = api("put", "/api/notifications/read-all/", admin)

        assert response.json() == {"success": True, "message": "All notifications marked as read.", "updated": 1}

    def test_delete(self, api, filed, admin):
        notification_id = NotificationModel.objects.get(recipient_id="admin-1").id

        response = api("delete", f"/api/notifications/{notification_id}/", admin)

        assert response.json()["message"] == "Notification deleted."
        assert not NotificationModel.objects.filter(id=notification_id).exists()
