"""
Unit tests for the Complaints domain entities.

Covers creation validation, every lifecycle transition and the derived
fields the transitions maintain.
"""

import pytest

from src.core.complaints.entities import (
    Attachment,
    ComplaintEntity,
    ComplaintPriority,
    ComplaintResponse,
    ComplaintStatus,
)
from src.core.shared.exceptions import (
    AuthorizationError,
    InvalidRatingError,
    InvalidStatusError,
    MissingReasonError,
    StateError,
    ValidationError,
)
from src.core.shared.identity import Caller, Role


def make_complaint(**overrides) -> ComplaintEntity:
    data = {
        "ticket_id": "VHU-2503-0001",
        "title": "Broken projector",
        "description": "The projector in Lab 2 does not turn on.",
        "category_id": "cat-it",
        "submitted_by": "student-1",
    }
    data.update(overrides)
    return ComplaintEntity.create(**data)


def attachment(size: int = 1024, name: str = "photo.jpg") -> Attachment:
    return Attachment(
        filename=f"1700000000-{name}",
        original_name=name,
        content_type="image/jpeg",
        size=size,
        path=f"uploads/{name}",
    )


class TestComplaintStatus:

    @pytest.mark.parametrize("raw,expected", [
        ("pending", ComplaintStatus.PENDING),
        ("in-review", ComplaintStatus.IN_REVIEW),
        ("IN_PROGRESS", ComplaintStatus.IN_PROGRESS),
        (" Resolved ", ComplaintStatus.RESOLVED),
        ("closed", ComplaintStatus.CLOSED),
    ])
    def test_from_string(self, raw, expected):
        assert ComplaintStatus.from_string(raw) == expected

    @pytest.mark.parametrize("raw", ["archived", "", None, 3])
    def test_from_string_rejects_unknown_values(self, raw):
        with pytest.raises(InvalidStatusError):
            ComplaintStatus.from_string(raw)


class TestComplaintPriority:

    def test_unknown_priority_is_a_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            ComplaintPriority.from_string("critical")

        assert exc_info.value.field == "priority"


class TestComplaintCreation:
    """Factory method and creation rules."""

    def test_create_defaults(self):
        complaint = make_complaint()

        assert complaint.status == ComplaintStatus.PENDING
        assert complaint.priority == ComplaintPriority.MEDIUM
        assert complaint.assigned_to is None
        assert complaint.resolved_at is None
        assert complaint.rejection_reason is None
        assert complaint.satisfaction is None
        assert complaint.responses == []
        assert complaint.created_at == complaint.updated_at

    def test_create_strips_text(self):
        complaint = make_complaint(title="  Broken projector  ", description="  Lab 2  ")

        assert complaint.title == "Broken projector"
        assert complaint.description == "Lab 2"

    @pytest.mark.parametrize("field_name", ["title", "description", "category_id"])
    def test_missing_required_field(self, field_name):
        with pytest.raises(ValidationError) as exc_info:
            make_complaint(**{field_name: ""})

        assert exc_info.value.message == "Please provide title, description, and category."

    def test_blank_title_is_missing(self):
        with pytest.raises(ValidationError):
            make_complaint(title="   ")

    @pytest.mark.parametrize("field_name, value, reported", [
        ("title", 123, "title"),
        ("description", ["text"], "description"),
        ("category_id", {"id": "cat-it"}, "category"),
    ])
    def test_non_text_field_is_rejected(self, field_name, value, reported):
        with pytest.raises(ValidationError) as exc_info:
            make_complaint(**{field_name: value})

        assert exc_info.value.field == reported

    def test_title_too_long(self):
        with pytest.raises(ValidationError) as exc_info:
            make_complaint(title="x" * 201)

        assert exc_info.value.field == "title"

    def test_description_too_long(self):
        with pytest.raises(ValidationError) as exc_info:
            make_complaint(description="x" * 5001)

        assert exc_info.value.field == "description"

    def test_ticket_id_required(self):
        with pytest.raises(ValidationError) as exc_info:
            make_complaint(ticket_id="")

        assert exc_info.value.field == "ticket_id"

    def test_at_most_three_attachments(self):
        make_complaint(attachments=[attachment(name=f"{i}.jpg") for i in range(3)])

        with pytest.raises(ValidationError) as exc_info:
            make_complaint(attachments=[attachment(name=f"{i}.jpg") for i in range(4)])

        assert exc_info.value.field == "attachments"

    def test_attachment_size_limit(self):
        with pytest.raises(ValidationError):
            make_complaint(attachments=[attachment(size=5 * 1024 * 1024 + 1)])

    def test_attachment_size_must_be_numeric(self):
        with pytest.raises(ValidationError) as exc_info:
            Attachment.from_dict({"filename": "a.png", "size": "big"})

        assert exc_info.value.field == "attachments"


class TestChangeStatus:

    def test_reject_requires_reason(self):
        complaint = make_complaint()

        with pytest.raises(MissingReasonError):
            complaint.change_status(ComplaintStatus.REJECTED)

        with pytest.raises(MissingReasonError):
            complaint.change_status(ComplaintStatus.REJECTED, "   ")

        assert complaint.status == ComplaintStatus.PENDING

    def test_reject_stores_reason(self):
        complaint = make_complaint()
        complaint.change_status(ComplaintStatus.REJECTED, " Duplicate of VHU-2503-0002 ")

        assert complaint.status == ComplaintStatus.REJECTED
        assert complaint.rejection_reason == "Duplicate of VHU-2503-0002"

    def test_leaving_rejected_clears_reason(self):
        complaint = make_complaint()
        complaint.change_status(ComplaintStatus.REJECTED, "Out of scope")
        complaint.change_status(ComplaintStatus.IN_PROGRESS)

        assert complaint.rejection_reason is None

    def test_resolved_at_is_stamped_once(self):
        complaint = make_complaint()
        complaint.change_status(ComplaintStatus.RESOLVED)
        first = complaint.resolved_at

        complaint.change_status(ComplaintStatus.IN_PROGRESS)
        complaint.change_status(ComplaintStatus.RESOLVED)

        assert first is not None
        assert complaint.resolved_at == first
        assert complaint.resolution_time is not None

    def test_any_status_can_follow_any_other(self):
        complaint = make_complaint()
        for status in (ComplaintStatus.CLOSED, ComplaintStatus.PENDING, ComplaintStatus.RESOLVED,
                       ComplaintStatus.IN_REVIEW):
            complaint.change_status(status)
            assert complaint.status == status


class TestAssignment:

    def test_assign_forces_in_review(self):
        complaint = make_complaint()
        complaint.change_status(ComplaintStatus.IN_PROGRESS)

        complaint.assign_to("staff-1")

        assert complaint.assigned_to == "staff-1"
        assert complaint.status == ComplaintStatus.IN_REVIEW

    def test_assign_rejected_complaint_clears_reason(self):
        complaint = make_complaint()
        complaint.change_status(ComplaintStatus.REJECTED, "Spam")

        complaint.assign_to("staff-1")

        assert complaint.rejection_reason is None

    def test_assignee_required(self):
        with pytest.raises(ValidationError):
            make_complaint().assign_to("")


class TestResponses:

    def test_student_response_is_never_internal(self):
        complaint = make_complaint()
        response = complaint.add_response(Caller("student-1", Role.STUDENT), "Any update?", is_internal=True)

        assert response.is_internal is False

    def test_staff_can_post_internal_note(self):
        complaint = make_complaint()
        response = complaint.add_response(Caller("staff-1", Role.STAFF), "Checking with IT", is_internal=True)

        assert response.is_internal is True

    def test_student_cannot_answer_foreign_complaint(self):
        complaint = make_complaint()

        with pytest.raises(AuthorizationError):
            complaint.add_response(Caller("student-2", Role.STUDENT), "Me too")

    def test_empty_message(self):
        with pytest.raises(ValidationError):
            make_complaint().add_response(Caller("staff-1", Role.STAFF), "  ")

    def test_non_text_message(self):
        with pytest.raises(ValidationError) as exc_info:
            make_complaint().add_response(Caller("staff-1", Role.STAFF), 42)

        assert exc_info.value.field == "message"

    def test_visible_responses_hide_internal_notes_from_students(self):
        complaint = make_complaint()
        complaint.add_response(Caller("staff-1", Role.STAFF), "Internal", is_internal=True)
        complaint.add_response(Caller("staff-1", Role.STAFF), "Public")

        assert [r.message for r in complaint.visible_responses(Caller("student-1", Role.STUDENT))] == ["Public"]
        assert len(complaint.visible_responses(Caller("admin-1", Role.ADMIN))) == 2

    def test_response_round_trips_through_dict(self):
        response = ComplaintResponse(author_id="staff-1", message="On it", is_internal=True)

        restored = ComplaintResponse.from_dict(response.to_dict())

        assert restored == response


class TestRating:

    @pytest.mark.parametrize("status", [s for s in ComplaintStatus if s != ComplaintStatus.RESOLVED])
    def test_rate_requires_resolved(self, status):
        complaint = make_complaint()
        complaint.change_status(status, "reason" if status == ComplaintStatus.REJECTED else None)

        with pytest.raises(StateError):
            complaint.rate("student-1", 4)

    def test_only_submitter_may_rate(self):
        complaint = make_complaint()
        complaint.change_status(ComplaintStatus.RESOLVED)

        with pytest.raises(AuthorizationError):
            complaint.rate("student-2", 4)

    @pytest.mark.parametrize("rating", [0, 6, 3.5, "4.5", "four", None, True])
    def test_rating_range(self, rating):
        complaint = make_complaint()
        complaint.change_status(ComplaintStatus.RESOLVED)

        with pytest.raises(InvalidRatingError):
            complaint.rate("student-1", rating)

    @pytest.mark.parametrize("rating", ["4", " 4 ", 4.0])
    def test_integral_rating_is_coerced(self, rating):
        complaint = make_complaint()
        complaint.change_status(ComplaintStatus.RESOLVED)

        complaint.rate("student-1", rating)

        assert complaint.satisfaction.rating == 4
        assert type(complaint.satisfaction.rating) is int

    def test_second_rating_overwrites_first(self):
        complaint = make_complaint()
        complaint.change_status(ComplaintStatus.RESOLVED)

        complaint.rate("student-1", 2, "Slow")
        complaint.rate("student-1", 5, " Fixed in the end ")

        assert complaint.satisfaction.rating == 5
        assert complaint.satisfaction.feedback == "Fixed in the end"

    def test_non_text_feedback(self):
        complaint = make_complaint()
        complaint.change_status(ComplaintStatus.RESOLVED)

        with pytest.raises(ValidationError):
            complaint.rate("student-1", 4, 5)

        assert complaint.satisfaction is None


class TestDeletionRights:

    def test_admin_deletes_anything(self):
        complaint = make_complaint()
        complaint.change_status(ComplaintStatus.RESOLVED)

        complaint.ensure_deletable_by(Caller("admin-1", Role.ADMIN))

    def test_owner_deletes_pending(self):
        make_complaint().ensure_deletable_by(Caller("student-1", Role.STUDENT))

    def test_owner_cannot_delete_after_pending(self):
        complaint = make_complaint()
        complaint.change_status(ComplaintStatus.IN_REVIEW)

        with pytest.raises(StateError):
            complaint.ensure_deletable_by(Caller("student-1", Role.STUDENT))

    @pytest.mark.parametrize("caller", [
        Caller("student-2", Role.STUDENT),
        Caller("staff-1", Role.STAFF),
    ])
    def test_others_are_not_authorized(self, caller):
        with pytest.raises(AuthorizationError):
            make_complaint().ensure_deletable_by(caller)
