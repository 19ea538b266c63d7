"""
Ports (Interfaces) of the Complaints domain.

Contracts the infrastructure adapters implement:
- ComplaintRepository: persistence and filtered queries of complaints
- CategoryCatalog: category validity and complaint counters
- MemberDirectory: roles and names of members
- TicketSequence: atomic increment-and-fetch counter

Each port has an in-memory implementation used by the unit tests and
for local prototyping.

Example:
    # Django adapter
    class DjangoComplaintRepository:
        def save(self, complaint: ComplaintEntity) -> None:
            model = ComplaintMapper.to_model(complaint)
            model.save()
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence, Tuple, runtime_checkable
import threading

from src.core.shared.exceptions import ConflictError

from .access import ComplaintFilter
from .entities import ComplaintEntity, ComplaintStatus


SORTABLE_FIELDS = ("created_at", "updated_at", "priority", "status", "ticket_id", "title")


@dataclass(frozen=True)
class CategoryInfo:
    """Catalog view of a category."""

    id: str
    name: str
    is_active: bool = True
    icon: str = ""
    color: str = ""
    description: str = ""
    complaint_count: int = 0

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "icon": self.icon, "color": self.color}


@dataclass(frozen=True)
class MemberInfo:
    """Directory view of a member."""

    id: str
    name: str
    role: str
    email: str = ""
    department: str = ""

    @property
    def is_staff(self) -> bool:
        return self.role in ("staff", "admin")

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "email": self.email, "role": self.role}


# =============================================================================
# Protocols
# =============================================================================

@runtime_checkable
class ComplaintRepository(Protocol):
    """
    Persistence of complaints.

    Implementations:
    - DjangoComplaintRepository (ORM)
    - InMemoryComplaintRepository (tests)
    """

    def save(self, complaint: ComplaintEntity) -> None:
        """
        Persists a complaint (create or update).

        Raises:
            ConflictError: ``ticket_id`` already used by another complaint
        """
        ...

    def get_by_id(self, complaint_id: str) -> Optional[ComplaintEntity]:
        ...

    def delete(self, complaint_id: str) -> None:
        ...

    def list_filtered(
        self,
        complaint_filter: ComplaintFilter,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[ComplaintEntity]:
        """
        Complaints matching ``complaint_filter``, sorted and sliced.

        Args:
            complaint_filter: Visibility and filter predicate
            sort_by: One of ``SORTABLE_FIELDS``
            sort_order: "asc" or "desc"
            offset: Items to skip
            limit: Maximum items, None for all
        """
        ...

    def count(self, complaint_filter: Optional[ComplaintFilter] = None) -> int:
        ...

    def count_by(self, field_name: str, complaint_filter: Optional[ComplaintFilter] = None) -> Dict[str, int]:
        """
        Counts grouped by ``status`` or ``priority``.

        Returns:
            Mapping of wire value to count, only non-zero groups
        """
        ...

    def average_resolution_days(self) -> float:
        """Mean days from creation to resolution over resolved complaints."""
        ...

    def rating_summary(self) -> Tuple[float, int]:
        """(mean rating, number of rated complaints)."""
        ...


@runtime_checkable
class CategoryCatalog(Protocol):
    """Category side of the system, owned by the catalog service."""

    def get(self, category_id: str) -> Optional[CategoryInfo]:
        ...

    def increment_complaint_count(self, category_id: str, delta: int = 1) -> None:
        """Best-effort counter update."""
        ...

    def count_active(self) -> int:
        ...


@runtime_checkable
class MemberDirectory(Protocol):
    """Read side of the identity service."""

    def get_member(self, user_id: str) -> Optional[MemberInfo]:
        ...

    def list_ids_by_roles(self, roles: Sequence[str]) -> List[str]:
        ...

    def count_by_role(self, role: Optional[str] = None) -> int:
        """Members holding ``role``, or all members when None."""
        ...


@runtime_checkable
class TicketSequence(Protocol):
    """Atomic increment-and-fetch; the first value is 1."""

    def next_value(self) -> int:
        ...


# =============================================================================
# In-memory implementations
# =============================================================================

def sort_key(field_name: str):
    """Sort key for entity attributes; enums sort by their wire value."""

    def key(complaint: ComplaintEntity):
        value = getattr(complaint, field_name)
        return getattr(value, "value", value)

    return key


class InMemoryComplaintRepository:
    """
    In-memory ComplaintRepository.

    Stores detached copies so that callers cannot mutate stored state
    without calling ``save``. Not for production.
    """

    def __init__(self):
        self._complaints: Dict[str, ComplaintEntity] = {}
        self._lock = threading.Lock()

    def save(self, complaint: ComplaintEntity) -> None:
        with self._lock:
            for other in self._complaints.values():
                if other.id != complaint.id and other.ticket_id == complaint.ticket_id:
                    raise ConflictError(f"Duplicate ticket id {complaint.ticket_id}", field="ticket_id")
            self._complaints[complaint.id] = complaint.copy()

    def get_by_id(self, complaint_id: str) -> Optional[ComplaintEntity]:
        complaint = self._complaints.get(complaint_id)
        return complaint.copy() if complaint else None

    def delete(self, complaint_id: str) -> None:
        self._complaints.pop(complaint_id, None)

    def list_filtered(
        self,
        complaint_filter: ComplaintFilter,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[ComplaintEntity]:
        matched = [c for c in self._complaints.values() if complaint_filter.matches(c)]
        matched.sort(key=sort_key(sort_by), reverse=sort_order == "desc")
        end = None if limit is None else offset + limit
        return [c.copy() for c in matched[offset:end]]

    def count(self, complaint_filter: Optional[ComplaintFilter] = None) -> int:
        complaint_filter = complaint_filter or ComplaintFilter()
        return sum(1 for c in self._complaints.values() if complaint_filter.matches(c))

    def count_by(self, field_name: str, complaint_filter: Optional[ComplaintFilter] = None) -> Dict[str, int]:
        complaint_filter = complaint_filter or ComplaintFilter()
        counts: Dict[str, int] = {}
        for complaint in self._complaints.values():
            if complaint_filter.matches(complaint):
                value = getattr(complaint, field_name).value
                counts[value] = counts.get(value, 0) + 1
        return counts

    def average_resolution_days(self) -> float:
        durations = [
            c.resolution_time
            for c in self._complaints.values()
            if c.status == ComplaintStatus.RESOLVED and c.resolved_at is not None
        ]
        if not durations:
            return 0.0
        return sum(durations) / len(durations)

    def rating_summary(self) -> Tuple[float, int]:
        ratings = [c.satisfaction.rating for c in self._complaints.values() if c.satisfaction]
        if not ratings:
            return 0.0, 0
        return sum(ratings) / len(ratings), len(ratings)

    def clear(self) -> None:
        self._complaints.clear()


class InMemoryCategoryCatalog:
    """Category catalog backed by a dict."""

    def __init__(self, categories: Optional[List[CategoryInfo]] = None):
        self._categories: Dict[str, CategoryInfo] = {c.id: c for c in categories or []}
        self.counters: Dict[str, int] = {c.id: c.complaint_count for c in categories or []}

    def add(self, category: CategoryInfo) -> None:
        self._categories[category.id] = category
        self.counters.setdefault(category.id, category.complaint_count)

    def get(self, category_id: str) -> Optional[CategoryInfo]:
        return self._categories.get(category_id)

    def increment_complaint_count(self, category_id: str, delta: int = 1) -> None:
        if category_id in self._categories:
            self.counters[category_id] = self.counters.get(category_id, 0) + delta

    def count_active(self) -> int:
        return sum(1 for c in self._categories.values() if c.is_active)


class InMemoryMemberDirectory:
    """Member directory backed by a dict."""

    def __init__(self, members: Optional[List[MemberInfo]] = None):
        self._members: Dict[str, MemberInfo] = {m.id: m for m in members or []}

    def add(self, member: MemberInfo) -> None:
        self._members[member.id] = member

    def get_member(self, user_id: str) -> Optional[MemberInfo]:
        return self._members.get(user_id)

    def list_ids_by_roles(self, roles: Sequence[str]) -> List[str]:
        return [m.id for m in self._members.values() if m.role in roles]

    def count_by_role(self, role: Optional[str] = None) -> int:
        if role is None:
            return len(self._members)
        return sum(1 for m in self._members.values() if m.role == role)


@dataclass
class InMemoryTicketSequence:
    """Thread-safe counter."""

    value: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def next_value(self) -> int:
        with self._lock:
            self.value += 1
            return self.value
