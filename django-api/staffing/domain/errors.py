"""Domain error codes for the staffing module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    STAFF_NOT_FOUND = "STAFF_NOT_FOUND"
    SCHEDULE_NOT_FOUND = "SCHEDULE_NOT_FOUND"
    ROLE_NOT_FOUND = "ROLE_NOT_FOUND"
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    ACCESS_DENIED = "ACCESS_DENIED"
    LOAD_FAILED = "LOAD_FAILED"
    NO_PUBLIC_SESSION = "NO_PUBLIC_SESSION"
    BATCH_WRITE_FAILED = "BATCH_WRITE_FAILED"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised when user input breaks a domain rule; nothing is written."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.VALIDATION_FAILED, message=message)


class NotFoundError(DomainError):
    """Base for stale or unknown references."""


class SessionNotFoundError(NotFoundError):
    """Raised when a session does not exist."""

    def __init__(self, session_id: str) -> None:
        super().__init__(code=ErrorCode.SESSION_NOT_FOUND, message="Session not found")
        object.__setattr__(self, "session_id", session_id)


class StaffNotFoundError(NotFoundError):
    """Raised when a staff member does not exist."""

    def __init__(self, staff_id: str) -> None:
        super().__init__(code=ErrorCode.STAFF_NOT_FOUND, message="Staff member not found")
        object.__setattr__(self, "staff_id", staff_id)


class ScheduleNotFoundError(NotFoundError):
    """Raised when a schedule item does not exist."""

    def __init__(self, schedule_id: str) -> None:
        super().__init__(code=ErrorCode.SCHEDULE_NOT_FOUND, message="Schedule item not found")
        object.__setattr__(self, "schedule_id", schedule_id)


class RoleNotFoundError(NotFoundError):
    """Raised when a role does not exist."""

    def __init__(self, role_id: str) -> None:
        super().__init__(code=ErrorCode.ROLE_NOT_FOUND, message="Role not found")
        object.__setattr__(self, "role_id", role_id)


class TemplateNotFoundError(NotFoundError):
    """Raised when a schedule template does not exist."""

    def __init__(self, template_id: str) -> None:
        super().__init__(code=ErrorCode.TEMPLATE_NOT_FOUND, message="Schedule template not found")
        object.__setattr__(self, "template_id", template_id)


class AccessDeniedError(DomainError):
    """Raised when the store refuses a read, e.g. a viewer on a private session."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ACCESS_DENIED,
            message="Access denied, please refresh",
        )


class LoadFailedError(DomainError):
    """Raised on transport or connectivity failures."""

    def __init__(self) -> None:
        super().__init__(code=ErrorCode.LOAD_FAILED, message="Failed to load data")


class NoPublicSessionError(DomainError):
    """Raised when no session is currently shared with viewers."""

    def __init__(self, message: str = "No session is currently public") -> None:
        super().__init__(code=ErrorCode.NO_PUBLIC_SESSION, message=message)


class BatchWriteError(DomainError):
    """Raised when an atomic batch could not be committed; nothing was applied."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.BATCH_WRITE_FAILED,
            message="Batch write failed, no changes were applied",
        )
