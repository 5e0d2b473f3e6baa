"""Domain errors raised by the meet and book services.

Each error carries a code and a user-safe message. The routes map codes
to HTTP status codes; services never deal with HTTP.
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    NOT_FOUND = 'NOT_FOUND'
    FORBIDDEN = 'FORBIDDEN'
    INVALID_PHASE = 'INVALID_PHASE'
    INVALID_TRANSITION = 'INVALID_TRANSITION'
    PRECONDITION_FAILED = 'PRECONDITION_FAILED'
    INVALID_ALLOCATION = 'INVALID_ALLOCATION'
    INVALID_SELECTION = 'INVALID_SELECTION'
    INVALID_STATE = 'INVALID_STATE'
    VALIDATION_ERROR = 'VALIDATION_ERROR'


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code = None

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFound(DomainError):
    """Referenced meet, book, candidate or date option does not exist."""
    code = ErrorCode.NOT_FOUND


class Forbidden(DomainError):
    """Actor lacks the privilege the operation needs."""
    code = ErrorCode.FORBIDDEN


class InvalidPhase(DomainError):
    """Operation is not permitted in the meet's current phase."""
    code = ErrorCode.INVALID_PHASE


class InvalidTransition(DomainError):
    """Requested phase change is not in the transition table."""
    code = ErrorCode.INVALID_TRANSITION

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot transition from {current} to {target}")
        self.current = current
        self.target = target


class PreconditionFailed(DomainError):
    """Phase transition requirements are not met."""
    code = ErrorCode.PRECONDITION_FAILED


class InvalidAllocation(DomainError):
    """Points or ranks were not distributed according to the rules."""
    code = ErrorCode.INVALID_ALLOCATION


class InvalidSelection(DomainError):
    """Book selection outside the allowed candidate rules."""
    code = ErrorCode.INVALID_SELECTION


class InvalidState(DomainError):
    """Action attempted before its prerequisite state was reached."""
    code = ErrorCode.INVALID_STATE


class ValidationError(DomainError):
    """Malformed or missing request fields."""
    code = ErrorCode.VALIDATION_ERROR
