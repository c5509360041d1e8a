"""Result type for explicit error handling.

Provisioning outcomes are returned as values rather than raised, so callers
must look at the failure kind before deciding to retry, alert or abort.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, NoReturn, TypeVar, Union

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type
U = TypeVar("U")  # Mapped type


class ResultError(Exception):
    """Raised when unwrapping a Result fails."""

    pass


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Represents a successful result."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the success value. Safe to call since this is Ok."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def unwrap_err(self) -> NoReturn:
        """Get the error value. Raises since this is Ok."""
        raise ResultError(f"Called unwrap_err on Ok value: {self.value}")

    def map(self, fn: Callable[[T], U]) -> "Ok[U]":
        """Transform the success value."""
        return Ok(fn(self.value))

    def map_err(self, fn: Callable[[E], U]) -> "Ok[T]":
        return self

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True)
class Err(Generic[E]):
    """Represents an error result."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        """Get the success value. Raises since this is Err."""
        raise ResultError(f"Called unwrap on Err value: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> E:
        """Get the error value. Safe to call since this is Err."""
        return self.error

    def map(self, fn: Callable[[T], U]) -> "Err[E]":
        return self

    def map_err(self, fn: Callable[[E], U]) -> "Err[U]":
        """Transform the error value."""
        return Err(fn(self.error))

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Type alias for Result
Result = Union[Ok[T], Err[E]]


class ErrorKind(Enum):
    """Distinguishable reasons a stream could not be made ready."""

    INVALID_STATE = "invalid_state"
    DELETE_TIMEOUT = "delete_timeout"
    ACTIVATION_TIMEOUT = "activation_timeout"
    LOOKUP_FAILURE = "lookup_failure"
    CREATE_FAILURE = "create_failure"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ProvisioningError:
    """Error from an ensure-ready or status call."""

    kind: ErrorKind
    stream: str
    message: str
    status: str | None = None
    cause: Exception | None = None

    @property
    def exit_code(self) -> int:
        return ExitCode.for_kind(self.kind)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "stream": self.stream,
            "message": self.message,
            "status": self.status,
            "cause": str(self.cause) if self.cause else None,
        }

    def __str__(self) -> str:
        if self.cause:
            return f"[{self.kind.value}] {self.message}: {self.cause}"
        return f"[{self.kind.value}] {self.message}"


@dataclass(frozen=True)
class ConfigError:
    """Error in configuration."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"Config error in '{self.field}': {self.message}"


# Exit codes
class ExitCode:
    """Exit codes for CLI."""

    SUCCESS = 0
    GENERAL_ERROR = 1

    CONFIG_ERROR = 10

    # Provisioning errors (20-29)
    INVALID_STATE = 20
    DELETE_TIMEOUT = 21
    ACTIVATION_TIMEOUT = 22
    LOOKUP_FAILURE = 23
    CREATE_FAILURE = 24

    CANCELLED = 130

    @classmethod
    def for_kind(cls, kind: ErrorKind) -> int:
        return getattr(cls, kind.name, cls.GENERAL_ERROR)
