"""
Role-scoped visibility of complaints.

Turns a caller plus list parameters into a ``ComplaintFilter`` that the
repositories understand, and answers whether a caller may open a single
complaint.

Scopes:
    student -> submitted_by == caller
    staff   -> assigned_to == caller OR assigned_to is null
    admin   -> everything

All additional filters are ANDed with the scope. A search term never
widens a student's scope. For staff the source behaviour is kept by
default: searching drops the assignment scope. ``search_widens_staff_scope``
turns that off.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from src.core.shared.identity import Caller, Role

from .entities import ComplaintEntity, ComplaintPriority, ComplaintStatus


@dataclass(frozen=True)
class ComplaintFilter:
    """
    Storage-agnostic complaint predicate.

    Attributes:
        submitted_by: Only complaints of this submitter
        assignee_scope: Allowed ``assigned_to`` values; ``None`` inside the
            tuple stands for "unassigned". ``None`` means no restriction.
        status: Exact status
        priority: Exact priority
        category_id: Exact category
        assigned_to: Exact assignee
        search: Case-insensitive substring of title, description or ticket id
    """

    submitted_by: Optional[str] = None
    assignee_scope: Optional[Tuple[Optional[str], ...]] = None
    status: Optional[ComplaintStatus] = None
    priority: Optional[ComplaintPriority] = None
    category_id: Optional[str] = None
    assigned_to: Optional[str] = None
    search: Optional[str] = None

    def matches(self, complaint: ComplaintEntity) -> bool:
        """In-memory evaluation, mirrors the ORM translation."""
        if self.submitted_by is not None and complaint.submitted_by != self.submitted_by:
            return False
        if self.assignee_scope is not None and complaint.assigned_to not in self.assignee_scope:
            return False
        if self.status is not None and complaint.status != self.status:
            return False
        if self.priority is not None and complaint.priority != self.priority:
            return False
        if self.category_id is not None and complaint.category_id != self.category_id:
            return False
        if self.assigned_to is not None and complaint.assigned_to != self.assigned_to:
            return False
        if self.search:
            term = self.search.lower()
            haystacks = (complaint.title, complaint.description, complaint.ticket_id)
            if not any(term in (h or "").lower() for h in haystacks):
                return False
        return True


class RoleScopedAccessFilter:
    """
    Builds visibility predicates for callers.

    Example:
        access = RoleScopedAccessFilter()
        complaint_filter = access.build(caller, status=ComplaintStatus.PENDING)
        complaints = repo.list_filtered(complaint_filter)
    """

    def __init__(self, search_widens_staff_scope: bool = True):
        self.search_widens_staff_scope = search_widens_staff_scope

    def build(
        self,
        caller: Caller,
        status: Optional[ComplaintStatus] = None,
        priority: Optional[ComplaintPriority] = None,
        category_id: Optional[str] = None,
        assigned_to: Optional[str] = None,
        submitted_by: Optional[str] = None,
        search: Optional[str] = None,
    ) -> ComplaintFilter:
        """
        Combines the caller's scope with the requested filters.

        ``submitted_by`` is ignored for students; they are always pinned to
        their own complaints.
        """
        search = (search or "").strip() or None
        scope = self.scope_for(caller)

        if caller.is_student:
            owner = caller.user_id
        else:
            owner = submitted_by or None

        if caller.role == Role.STAFF and search and self.search_widens_staff_scope:
            scope = None

        return ComplaintFilter(
            submitted_by=owner,
            assignee_scope=scope,
            status=status,
            priority=priority,
            category_id=category_id or None,
            assigned_to=assigned_to or None,
            search=search,
        )

    def scope_filter(self, caller: Caller) -> ComplaintFilter:
        """Role scope alone, used by dashboard statistics."""
        return ComplaintFilter(
            submitted_by=caller.user_id if caller.is_student else None,
            assignee_scope=self.scope_for(caller),
        )

    @staticmethod
    def scope_for(caller: Caller) -> Optional[Tuple[Optional[str], ...]]:
        if caller.role == Role.STAFF:
            return (caller.user_id, None)
        return None

    @staticmethod
    def can_view(caller: Caller, complaint: ComplaintEntity) -> bool:
        """Students may open only their own complaints; staff and admin any."""
        if caller.is_student:
            return complaint.submitted_by == caller.user_id
        return True
