"""
Use Cases (Application Services) of the Complaints domain.

Use cases:
- CreateComplaintService: file a complaint
- UpdateStatusService: move a complaint through its lifecycle
- AssignComplaintService: hand a complaint to a staff member
- AddResponseService: answer in the conversation
- RateComplaintService: satisfaction rating by the submitter
- DeleteComplaintService: hard delete
- GetComplaintService: read one complaint
- ListComplaintsService: role-scoped, filtered, paginated listing
- ComplaintStatsService: dashboard figures

Responsibilities:
- Authorize the caller
- Coordinate entities, repositories and collaborators
- Manage the transaction (UoW) and queue domain events
- Return output DTOs filtered for the caller

A failed precondition raises before anything is persisted; the UoW rolls
back and drops queued events.
"""

from typing import Iterable, List, Optional
import logging

from src.core.shared.exceptions import (
    AuthorizationError,
    InvalidAssigneeError,
    InvalidCategoryError,
    MissingReasonError,
    NotFoundError,
    ValidationError,
)
from src.core.shared.identity import Caller, Role
from src.core.shared.interfaces import UnitOfWork

from .access import RoleScopedAccessFilter
from .dtos import (
    AddResponseInputDTO,
    AssignComplaintInputDTO,
    ComplaintOutputDTO,
    CreateComplaintInputDTO,
    DeleteComplaintInputDTO,
    ListComplaintsQueryDTO,
    PaginatedResultDTO,
    RateComplaintInputDTO,
    RelatedData,
    UpdateStatusInputDTO,
)
from .entities import ComplaintEntity, ComplaintPriority, ComplaintStatus, clean_text, response_authors
from .events import (
    ComplaintAssignedEvent,
    ComplaintDeletedEvent,
    ComplaintRatedEvent,
    ComplaintResponseAddedEvent,
    ComplaintStatusChangedEvent,
    ComplaintSubmittedEvent,
)
from .ports import CategoryCatalog, ComplaintRepository, MemberDirectory
from .ticket_ids import TicketIdentifierGenerator

logger = logging.getLogger(__name__)


def require_role(caller: Caller, *roles: Role) -> None:
    """
    Raises:
        AuthorizationError: Caller's role is not in ``roles``
    """
    if caller.role not in roles:
        raise AuthorizationError(
            f"User role '{caller.role.value}' is not authorized to access this route.",
            role=caller.role.value,
        )


def get_or_404(complaint_repo: ComplaintRepository, complaint_id: str) -> ComplaintEntity:
    complaint = complaint_repo.get_by_id(complaint_id) if complaint_id else None
    if not complaint:
        raise NotFoundError("Complaint not found.", entity_type="Complaint", entity_id=complaint_id)
    return complaint


class ComplaintPresenter:
    """
    Populates output DTOs with category and member details.

    Looks every referenced id up once per batch.
    """

    def __init__(self, category_catalog: CategoryCatalog, member_directory: MemberDirectory):
        self.category_catalog = category_catalog
        self.member_directory = member_directory

    def related_for(self, complaints: Iterable[ComplaintEntity]) -> RelatedData:
        related = RelatedData()
        for complaint in complaints:
            if complaint.category_id and complaint.category_id not in related.categories:
                category = self.category_catalog.get(complaint.category_id)
                if category:
                    related.categories[category.id] = category
            user_ids = (complaint.submitted_by, complaint.assigned_to) + response_authors(complaint)
            for user_id in user_ids:
                if user_id and user_id not in related.members:
                    member = self.member_directory.get_member(user_id)
                    if member:
                        related.members[member.id] = member
        return related

    def present(self, complaint: ComplaintEntity, viewer: Caller) -> ComplaintOutputDTO:
        return ComplaintOutputDTO.from_entity(complaint, viewer, self.related_for([complaint]))

    def present_many(self, complaints: List[ComplaintEntity], viewer: Caller) -> List[ComplaintOutputDTO]:
        related = self.related_for(complaints)
        return [ComplaintOutputDTO.from_entity(c, viewer, related) for c in complaints]


# =============================================================================
# Commands
# =============================================================================

class CreateComplaintService:
    """
    Use Case: file a new complaint.

    Flow:
    1. Validate input (before a ticket id is consumed)
    2. Check the category exists and is active
    3. Allocate the ticket id inside the transaction
    4. Persist and bump the category counter
    5. Queue ComplaintSubmittedEvent (fan-out to staff and admins)

    Example:
        service = CreateComplaintService(repo, catalog, directory, generator, uow)
        output = service.execute(CreateComplaintInputDTO(
            caller=Caller("student-1", Role.STUDENT),
            title="Wifi down",
            description="No connection in dorm B since Monday",
            category_id="cat-it",
        ))
        output.ticket_id  # 'VHU-2503-0001'
    """

    def __init__(
        self,
        complaint_repo: ComplaintRepository,
        category_catalog: CategoryCatalog,
        member_directory: MemberDirectory,
        ticket_generator: TicketIdentifierGenerator,
        uow: UnitOfWork,
    ):
        self.complaint_repo = complaint_repo
        self.category_catalog = category_catalog
        self.ticket_generator = ticket_generator
        self.uow = uow
        self.presenter = ComplaintPresenter(category_catalog, member_directory)

    def execute(self, input_dto: CreateComplaintInputDTO) -> ComplaintOutputDTO:
        """
        Raises:
            ValidationError: Invalid input
            InvalidCategoryError: Category missing or inactive
        """
        caller = input_dto.caller
        attachments = list(input_dto.attachments)
        ComplaintEntity.validate_new(
            input_dto.title,
            input_dto.description,
            input_dto.category_id,
            caller.user_id,
            attachments,
        )
        priority = ComplaintPriority.from_string(input_dto.priority or "medium")

        category = self.category_catalog.get(input_dto.category_id)
        if not category or not category.is_active:
            raise InvalidCategoryError("Invalid or inactive category.")

        with self.uow:
            complaint = ComplaintEntity.create(
                ticket_id=self.ticket_generator.next_identifier(),
                title=input_dto.title,
                description=input_dto.description,
                category_id=category.id,
                submitted_by=caller.user_id,
                priority=priority,
                is_anonymous=input_dto.is_anonymous,
                attachments=attachments,
            )
            self.complaint_repo.save(complaint)
            self.category_catalog.increment_complaint_count(category.id, 1)

            self.uow.publish_event(
                ComplaintSubmittedEvent(
                    aggregate_id=complaint.id,
                    ticket_id=complaint.ticket_id,
                    title=complaint.title,
                    submitted_by=complaint.submitted_by,
                    category_id=complaint.category_id,
                    priority=complaint.priority.value,
                    is_anonymous=complaint.is_anonymous,
                )
            )

        logger.info(f"Complaint {complaint.ticket_id} submitted by {caller.user_id}")
        return self.presenter.present(complaint, caller)


class UpdateStatusService:
    """
    Use Case: change the status of a complaint (staff and admin).

    Any listed status may be set directly. Rejecting needs a reason.
    """

    def __init__(
        self,
        complaint_repo: ComplaintRepository,
        category_catalog: CategoryCatalog,
        member_directory: MemberDirectory,
        uow: UnitOfWork,
    ):
        self.complaint_repo = complaint_repo
        self.uow = uow
        self.presenter = ComplaintPresenter(category_catalog, member_directory)

    def execute(self, input_dto: UpdateStatusInputDTO) -> ComplaintOutputDTO:
        """
        Raises:
            AuthorizationError: Caller is a student
            InvalidStatusError: Unknown status
            MissingReasonError: Rejected without a reason
            NotFoundError: Unknown complaint
        """
        caller = input_dto.caller
        require_role(caller, Role.STAFF, Role.ADMIN)
        new_status = ComplaintStatus.from_string(input_dto.status)
        if new_status == ComplaintStatus.REJECTED and not clean_text(input_dto.rejection_reason, "rejection_reason"):
            raise MissingReasonError("Please provide a reason for rejection.")

        with self.uow:
            complaint = get_or_404(self.complaint_repo, input_dto.complaint_id)
            old_status = complaint.status

            complaint.change_status(new_status, input_dto.rejection_reason)
            self.complaint_repo.save(complaint)

            self.uow.publish_event(
                ComplaintStatusChangedEvent(
                    aggregate_id=complaint.id,
                    ticket_id=complaint.ticket_id,
                    title=complaint.title,
                    submitted_by=complaint.submitted_by,
                    old_status=old_status.value,
                    new_status=new_status.value,
                    rejection_reason=complaint.rejection_reason,
                    changed_by=caller.user_id,
                )
            )

        logger.info(f"Complaint {complaint.ticket_id}: {old_status.value} -> {new_status.value}")
        return self.presenter.present(complaint, caller)


class AssignComplaintService:
    """
    Use Case: assign a complaint to a staff member (admin only).

    Assigning always moves the complaint to ``in-review``.
    """

    def __init__(
        self,
        complaint_repo: ComplaintRepository,
        category_catalog: CategoryCatalog,
        member_directory: MemberDirectory,
        uow: UnitOfWork,
    ):
        self.complaint_repo = complaint_repo
        self.member_directory = member_directory
        self.uow = uow
        self.presenter = ComplaintPresenter(category_catalog, member_directory)

    def execute(self, input_dto: AssignComplaintInputDTO) -> ComplaintOutputDTO:
        """
        Raises:
            AuthorizationError: Caller is not an admin
            ValidationError: No assignee given
            InvalidAssigneeError: Assignee unknown or not staff/admin
            NotFoundError: Unknown complaint
        """
        caller = input_dto.caller
        require_role(caller, Role.ADMIN)
        if not input_dto.assignee_id or not isinstance(input_dto.assignee_id, str):
            raise ValidationError("Please specify a staff member to assign.", field="assigned_to")

        assignee = self.member_directory.get_member(input_dto.assignee_id)
        if not assignee or not assignee.is_staff:
            raise InvalidAssigneeError("Invalid staff member.")

        with self.uow:
            complaint = get_or_404(self.complaint_repo, input_dto.complaint_id)
            complaint.assign_to(assignee.id)
            self.complaint_repo.save(complaint)

            self.uow.publish_event(
                ComplaintAssignedEvent(
                    aggregate_id=complaint.id,
                    ticket_id=complaint.ticket_id,
                    title=complaint.title,
                    submitted_by=complaint.submitted_by,
                    assigned_to=assignee.id,
                    assignee_name=assignee.name,
                    assigned_by=caller.user_id,
                )
            )

        logger.info(f"Complaint {complaint.ticket_id} assigned to {assignee.id}")
        return self.presenter.present(complaint, caller)


class AddResponseService:
    """Use Case: add a response to a complaint's conversation."""

    def __init__(
        self,
        complaint_repo: ComplaintRepository,
        category_catalog: CategoryCatalog,
        member_directory: MemberDirectory,
        uow: UnitOfWork,
    ):
        self.complaint_repo = complaint_repo
        self.uow = uow
        self.presenter = ComplaintPresenter(category_catalog, member_directory)

    def execute(self, input_dto: AddResponseInputDTO) -> ComplaintOutputDTO:
        """
        Raises:
            ValidationError: Empty message
            NotFoundError: Unknown complaint
            AuthorizationError: Student answering someone else's complaint
        """
        caller = input_dto.caller
        if not clean_text(input_dto.message, "message"):
            raise ValidationError("Please provide a response message.", field="message")

        with self.uow:
            complaint = get_or_404(self.complaint_repo, input_dto.complaint_id)
            response = complaint.add_response(caller, input_dto.message, input_dto.is_internal)
            self.complaint_repo.save(complaint)

            self.uow.publish_event(
                ComplaintResponseAddedEvent(
                    aggregate_id=complaint.id,
                    ticket_id=complaint.ticket_id,
                    title=complaint.title,
                    submitted_by=complaint.submitted_by,
                    response_id=response.id,
                    author_id=caller.user_id,
                    author_role=caller.role.value,
                    is_internal=response.is_internal,
                    assigned_to=complaint.assigned_to,
                )
            )

        return self.presenter.present(complaint, caller)


class RateComplaintService:
    """
    Use Case: the submitter rates a resolved complaint.

    Rating again overwrites the earlier rating.
    """

    def __init__(
        self,
        complaint_repo: ComplaintRepository,
        category_catalog: CategoryCatalog,
        member_directory: MemberDirectory,
        uow: UnitOfWork,
    ):
        self.complaint_repo = complaint_repo
        self.uow = uow
        self.presenter = ComplaintPresenter(category_catalog, member_directory)

    def execute(self, input_dto: RateComplaintInputDTO) -> ComplaintOutputDTO:
        """
        Raises:
            InvalidRatingError: Not an integer 1-5
            NotFoundError: Unknown complaint
            AuthorizationError: Caller is not the submitter
            StateError: Complaint is not resolved
        """
        caller = input_dto.caller
        rating = ComplaintEntity.validate_rating(input_dto.rating)

        with self.uow:
            complaint = get_or_404(self.complaint_repo, input_dto.complaint_id)
            complaint.rate(caller.user_id, rating, input_dto.feedback)
            self.complaint_repo.save(complaint)

            self.uow.publish_event(
                ComplaintRatedEvent(
                    aggregate_id=complaint.id,
                    ticket_id=complaint.ticket_id,
                    title=complaint.title,
                    submitted_by=complaint.submitted_by,
                    rating=complaint.satisfaction.rating,
                    feedback=complaint.satisfaction.feedback,
                )
            )

        return self.presenter.present(complaint, caller)


class DeleteComplaintService:
    """
    Use Case: hard delete.

    Admins delete anything; a student deletes their own complaint while it
    is still pending.
    """

    def __init__(
        self,
        complaint_repo: ComplaintRepository,
        category_catalog: CategoryCatalog,
        uow: UnitOfWork,
    ):
        self.complaint_repo = complaint_repo
        self.category_catalog = category_catalog
        self.uow = uow

    def execute(self, input_dto: DeleteComplaintInputDTO) -> None:
        """
        Raises:
            NotFoundError: Unknown complaint
            AuthorizationError: Caller may not delete it
            StateError: Owning student, complaint not pending
        """
        caller = input_dto.caller
        with self.uow:
            complaint = get_or_404(self.complaint_repo, input_dto.complaint_id)
            complaint.ensure_deletable_by(caller)

            self.complaint_repo.delete(complaint.id)
            self.category_catalog.increment_complaint_count(complaint.category_id, -1)

            self.uow.publish_event(
                ComplaintDeletedEvent(
                    aggregate_id=complaint.id,
                    ticket_id=complaint.ticket_id,
                    title=complaint.title,
                    submitted_by=complaint.submitted_by,
                    deleted_by=caller.user_id,
                    category_id=complaint.category_id,
                )
            )

        logger.info(f"Complaint {complaint.ticket_id} deleted by {caller.user_id}")


# =============================================================================
# Queries
# =============================================================================

class GetComplaintService:
    """
    Use Case: read one complaint.

    Read only, no UoW.
    """

    def __init__(
        self,
        complaint_repo: ComplaintRepository,
        category_catalog: CategoryCatalog,
        member_directory: MemberDirectory,
        access_filter: Optional[RoleScopedAccessFilter] = None,
    ):
        self.complaint_repo = complaint_repo
        self.access_filter = access_filter or RoleScopedAccessFilter()
        self.presenter = ComplaintPresenter(category_catalog, member_directory)

    def execute(self, complaint_id: str, caller: Caller) -> ComplaintOutputDTO:
        """
        Raises:
            NotFoundError: Unknown complaint
            AuthorizationError: Student opening someone else's complaint
        """
        complaint = get_or_404(self.complaint_repo, complaint_id)
        if not self.access_filter.can_view(caller, complaint):
            raise AuthorizationError("Not authorized to view this complaint.", role=caller.role.value)
        return self.presenter.present(complaint, caller)


class ListComplaintsService:
    """Use Case: role-scoped paginated listing."""

    def __init__(
        self,
        complaint_repo: ComplaintRepository,
        category_catalog: CategoryCatalog,
        member_directory: MemberDirectory,
        access_filter: Optional[RoleScopedAccessFilter] = None,
    ):
        self.complaint_repo = complaint_repo
        self.access_filter = access_filter or RoleScopedAccessFilter()
        self.presenter = ComplaintPresenter(category_catalog, member_directory)

    def execute(self, query: ListComplaintsQueryDTO) -> PaginatedResultDTO:
        complaint_filter = self.access_filter.build(
            query.caller,
            status=query.status,
            priority=query.priority,
            category_id=query.category_id,
            assigned_to=query.assigned_to,
            submitted_by=query.submitted_by,
            search=query.search,
        )
        complaints = self.complaint_repo.list_filtered(
            complaint_filter,
            sort_by=query.sort_by,
            sort_order=query.sort_order,
            offset=query.offset,
            limit=query.limit,
        )
        total = self.complaint_repo.count(complaint_filter)

        return PaginatedResultDTO(
            items=self.presenter.present_many(complaints, query.caller),
            total=total,
            page=query.page,
            limit=query.limit,
        )


class ComplaintStatsService:
    """
    Use Case: dashboard statistics.

    Every caller gets counts over the complaints they can see. Admins also
    get member, category, resolution-time and satisfaction figures.
    """

    RECENT_LIMIT = 5

    def __init__(
        self,
        complaint_repo: ComplaintRepository,
        category_catalog: CategoryCatalog,
        member_directory: MemberDirectory,
        access_filter: Optional[RoleScopedAccessFilter] = None,
    ):
        self.complaint_repo = complaint_repo
        self.category_catalog = category_catalog
        self.member_directory = member_directory
        self.access_filter = access_filter or RoleScopedAccessFilter()
        self.presenter = ComplaintPresenter(category_catalog, member_directory)

    def execute(self, caller: Caller) -> dict:
        """
        Returns:
            Counts over the complaints the caller can see; admins also get
            member, category, resolution and satisfaction figures
        """
        scope = self.access_filter.scope_filter(caller)
        recent = self.complaint_repo.list_filtered(scope, limit=self.RECENT_LIMIT)

        stats = {
            "totalComplaints": self.complaint_repo.count(scope),
            "statusCounts": self.complaint_repo.count_by("status", scope),
            "priorityCounts": self.complaint_repo.count_by("priority", scope),
            "recentComplaints": [c.to_dict() for c in self.presenter.present_many(recent, caller)],
        }

        if caller.is_admin:
            avg_rating, rated_count = self.complaint_repo.rating_summary()
            stats.update({
                "totalUsers": self.member_directory.count_by_role(),
                "totalStudents": self.member_directory.count_by_role(Role.STUDENT.value),
                "totalStaff": self.member_directory.count_by_role(Role.STAFF.value),
                "totalCategories": self.category_catalog.count_active(),
                "avgResolutionTime": round(self.complaint_repo.average_resolution_days(), 1),
                "avgSatisfaction": round(avg_rating, 1),
                "ratedCount": rated_count,
            })

        return stats
