"""Domain error taxonomy shared by the façade, the cascade engine and the API."""

from __future__ import annotations

from enum import Enum


class Operation(str, Enum):
    """Kind of store operation an error relates to."""

    GENERAL = "GNL"
    INSERT = "INS"
    UPDATE = "UPD"
    DELETE = "DEL"
    FIND = "FND"

    @property
    def full_name(self) -> str:
        return _OPERATION_NAMES[self]


_OPERATION_NAMES: dict[Operation, str] = {
    Operation.GENERAL: "General",
    Operation.INSERT: "Insertion",
    Operation.UPDATE: "Update",
    Operation.DELETE: "Deletion",
    Operation.FIND: "Finding",
}


class DomainError(Exception):
    """Base class for errors surfaced to callers of the façade."""

    status_code = 500

    def __init__(self, message: str, *, operation: Operation = Operation.GENERAL) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation


class ValidationError(DomainError):
    """Malformed entity shape; the mutation is rejected before it reaches the store."""

    status_code = 400


class NotFoundError(DomainError):
    status_code = 404

    def __init__(self, entity: str, identifier: object, *, operation: Operation = Operation.FIND) -> None:
        super().__init__(f"{entity} {identifier} not found", operation=operation)
        self.entity = entity
        self.identifier = identifier


class ConstraintViolation(DomainError):
    """Uniqueness, foreign-key or check violation reported by the store."""

    status_code = 409


class SessionExpiredError(DomainError):
    status_code = 401


class CascadeFailure(DomainError):
    """The two-phase user deletion could not complete and was rolled back."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message, operation=Operation.DELETE)


class SchedulerRunFailure(DomainError):
    """A housekeeping run did not complete; the next scheduled tick retries."""

    def __init__(self, message: str) -> None:
        super().__init__(message, operation=Operation.DELETE)
