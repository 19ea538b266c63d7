"""
Shared Domain Components.

Components used by every domain:
- Domain exceptions
- Interfaces (Ports)
- Base class for Domain Events
- Caller identity
"""

from .exceptions import (
    DomainException,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ConflictError,
    StateError,
    InternalError,
)
from .events import DomainEvent
from .identity import Caller, Role
from .interfaces import UnitOfWork, EventPublisher

__all__ = [
    "DomainException",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "StateError",
    "InternalError",
    "DomainEvent",
    "Caller",
    "Role",
    "UnitOfWork",
    "EventPublisher",
]
