"""
Registry errors for skillreg.

Defines the error taxonomy returned by registry operations and the
Result wrapper that carries either a value or a typed error.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorCode(str, Enum):
    """Classification of registry failures."""

    NOT_FOUND = "NOT_FOUND"
    VERSION_ALREADY_EXISTS = "VERSION_ALREADY_EXISTS"
    FORBIDDEN = "FORBIDDEN"
    INVALID_INPUT = "INVALID_INPUT"
    CORRUPT_STORAGE_DATA = "CORRUPT_STORAGE_DATA"


class RegistryError(Exception):
    """Base exception for registry errors."""

    code: ErrorCode

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(RegistryError):
    """Requested skill, version or profile does not exist."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")
        self.resource = resource


class VersionAlreadyExistsError(RegistryError):
    """A version was published twice."""

    code = ErrorCode.VERSION_ALREADY_EXISTS

    def __init__(self, namespace: str, name: str, version: str):
        super().__init__(f"Version {version} already exists for @{namespace}/{name}")
        self.namespace = namespace
        self.name = name
        self.version = version


class ForbiddenError(RegistryError):
    """Caller identity does not own the target namespace."""

    code = ErrorCode.FORBIDDEN

    def __init__(self, action: str):
        super().__init__(f"Forbidden: {action}")
        self.action = action


class InvalidInputError(RegistryError):
    """Caller supplied content or fields that fail validation."""

    code = ErrorCode.INVALID_INPUT

    def __init__(self, field: str, reason: str):
        super().__init__(f"Invalid {field}: {reason}")
        self.field = field
        self.reason = reason


class CorruptStorageDataError(RegistryError):
    """A stored document exists but cannot be trusted."""

    code = ErrorCode.CORRUPT_STORAGE_DATA

    def __init__(self, key: str, reason: str):
        super().__init__(f"Corrupt data at {key}: {reason}")
        self.key = key
        self.reason = reason


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a registry operation.

    Exactly one of ``value`` or ``error`` is meaningful: ``error`` is None
    on success. Use ``unwrap()`` to get the value or raise the error.
    """

    value: T | None = None
    error: RegistryError | None = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        """Build a successful result."""
        return cls(value=value)

    @classmethod
    def failure(cls, error: RegistryError) -> "Result[T]":
        """Build a failed result."""
        return cls(error=error)

    @property
    def ok(self) -> bool:
        """Whether the operation succeeded."""
        return self.error is None

    @property
    def code(self) -> ErrorCode | None:
        """Error code of a failed result, None on success."""
        return self.error.code if self.error is not None else None

    def unwrap(self) -> T:
        """Return the value, raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
