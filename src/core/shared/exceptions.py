"""
Domain exceptions for the VoiceHU complaint desk.

Every error raised by the core carries a human readable ``message`` and a
machine ``code`` so that adapters can translate it without inspecting
strings.

Hierarchy:
    DomainException (base)
    ├── ValidationError (bad input, 400)
    │   ├── InvalidCategoryError
    │   ├── InvalidStatusError
    │   ├── MissingReasonError
    │   ├── InvalidAssigneeError
    │   └── InvalidRatingError
    ├── AuthenticationError (no caller identity, 401)
    ├── AuthorizationError (caller may not do this, 403)
    ├── NotFoundError (unknown id, 404)
    ├── ConflictError (duplicate unique value, 400)
    ├── StateError (operation illegal in current state, 400)
    └── InternalError (unexpected failure, 500)
"""


class DomainException(Exception):
    """
    Base class for every domain error.

    Example:
        try:
            complaint.rate(caller_id, 5)
        except DomainException as e:
            logger.error(f"Domain error: {e}")
    """

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Serializes the exception (used by the HTTP envelope)."""
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(DomainException):
    """
    Input failed validation.

    Example:
        if len(title) > 200:
            raise ValidationError("Title cannot exceed 200 characters", field="title")
    """

    def __init__(self, message: str, field: str = None, code: str = None):
        self.field = field
        if code is None:
            code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class InvalidCategoryError(ValidationError):
    """Category does not exist or is inactive."""

    def __init__(self, message: str = "Invalid or inactive category"):
        super().__init__(message, field="category", code="INVALID_CATEGORY")


class InvalidStatusError(ValidationError):
    """Status value is not one of the known lifecycle states."""

    def __init__(self, message: str = "Invalid status"):
        super().__init__(message, field="status", code="INVALID_STATUS")


class MissingReasonError(ValidationError):
    """Rejecting a complaint without a rejection reason."""

    def __init__(self, message: str = "Rejection reason is required"):
        super().__init__(message, field="rejection_reason", code="MISSING_REASON")


class InvalidAssigneeError(ValidationError):
    """Assignee does not exist or is not staff/admin."""

    def __init__(self, message: str = "Can only assign to staff or admin"):
        super().__init__(message, field="assigned_to", code="INVALID_ASSIGNEE")


class InvalidRatingError(ValidationError):
    """Rating is not an integer between 1 and 5."""

    def __init__(self, message: str = "Rating must be between 1 and 5"):
        super().__init__(message, field="rating", code="INVALID_RATING")


class AuthenticationError(DomainException):
    """No usable caller identity was supplied."""

    def __init__(self, message: str = "Not authorized, no identity"):
        super().__init__(message, "AUTHENTICATION_REQUIRED")


class AuthorizationError(DomainException):
    """
    Caller is identified but not allowed to perform the operation.

    Attributes:
        role: Role of the caller, when known
    """

    def __init__(self, message: str = "Not authorized", role: str = None):
        self.role = role
        super().__init__(message, "FORBIDDEN")


class NotFoundError(DomainException):
    """
    Entity not found.

    Example:
        complaint = repo.get_by_id(complaint_id)
        if not complaint:
            raise NotFoundError("Complaint not found", "Complaint", complaint_id)
    """

    def __init__(self, message: str, entity_type: str = None, entity_id: str = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class ConflictError(DomainException):
    """A unique value (ticket id, e-mail) already exists."""

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message, "CONFLICT")


class StateError(DomainException):
    """
    Operation is not legal for the entity's current state.

    Example:
        if complaint.status != ComplaintStatus.RESOLVED:
            raise StateError("Can only rate resolved complaints", rule="rate_requires_resolved")
    """

    def __init__(self, message: str, rule: str = None):
        self.rule = rule
        super().__init__(message, "INVALID_STATE")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result


class InternalError(DomainException):
    """Unexpected failure in a collaborator."""

    def __init__(self, message: str = "Server Error"):
        super().__init__(message, "INTERNAL_ERROR")
