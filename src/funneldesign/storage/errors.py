"""Storage failure kinds surfaced uniformly to callers."""

from __future__ import annotations

from enum import Enum


class StorageErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
    READ_FAILED = "READ_FAILED"
    WRITE_FAILED = "WRITE_FAILED"
    DELETE_FAILED = "DELETE_FAILED"
    INVALID_DATA = "INVALID_DATA"


# Conditions the caller can act on; everything else is an I/O fault.
_EXPECTED = {
    StorageErrorCode.NOT_FOUND,
    StorageErrorCode.PROJECT_NOT_FOUND,
    StorageErrorCode.INVALID_DATA,
}


class StorageError(Exception):
    """A storage operation failed. The underlying cause is chained."""

    def __init__(
        self,
        message: str,
        code: StorageErrorCode,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.cause = cause

    def is_expected(self) -> bool:
        return self.code in _EXPECTED


class ProjectNotFoundError(StorageError):
    def __init__(self, project_id: str) -> None:
        super().__init__(f"Project {project_id} not found", StorageErrorCode.PROJECT_NOT_FOUND)
        self.project_id = project_id


class EntityNotFoundError(StorageError):
    def __init__(self, entity_id: str, label: str = "Entity") -> None:
        super().__init__(f"{label} {entity_id} not found", StorageErrorCode.NOT_FOUND)
        self.entity_id = entity_id


class InvalidDataError(StorageError):
    """Payload rejected by boundary validation."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message, StorageErrorCode.INVALID_DATA, cause)
