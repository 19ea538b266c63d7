"""
Caller identity as handed over by the identity service.

The core never authenticates anyone; it receives ``(user_id, role)`` and
decides what that caller may see and do.
"""

from dataclasses import dataclass
from enum import Enum

from .exceptions import AuthenticationError


class Role(Enum):
    """Roles known to the complaint desk."""

    STUDENT = "student"
    STAFF = "staff"
    ADMIN = "admin"

    @property
    def is_staff(self) -> bool:
        """Staff and admin both handle complaints."""
        return self in (Role.STAFF, Role.ADMIN)

    @classmethod
    def from_string(cls, value: str) -> "Role":
        """
        Converts a string to a Role.

        Raises:
            ValueError: Unknown role
        """
        for role in cls:
            if role.value == (value or "").strip().lower():
                return role
        raise ValueError(f"Invalid role: {value}")


@dataclass(frozen=True)
class Caller:
    """
    Authenticated caller.

    Attributes:
        user_id: Member id
        role: Member role
    """

    user_id: str
    role: Role

    @classmethod
    def of(cls, user_id: str, role: str) -> "Caller":
        """
        Builds a caller from raw identity values.

        Raises:
            AuthenticationError: Missing id or unknown role
        """
        if not user_id or not role:
            raise AuthenticationError()
        try:
            return cls(user_id=str(user_id), role=Role.from_string(role))
        except ValueError:
            raise AuthenticationError(f"Unknown role: {role}")

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_staff(self) -> bool:
        return self.role.is_staff
