"""
Outcome type returned by every gateway operation.

A result carries either a value (None meaning "not found") or a classified
failure. failure.message is the text shown to the user when notified.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class FailureKind(str, Enum):
    """Why an operation failed."""

    VALIDATION = "validation"  # Rejected locally, no remote call made
    TRANSIENT_REMOTE = "transient_remote"  # Network, timeout, overload; retry may succeed
    PERMANENT_REMOTE = "permanent_remote"  # Auth rejection, permission denial, missing record
    DECODE = "decode"  # Stored record has the wrong shape


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str
    title: str = "Error"

    @property
    def notifiable(self) -> bool:
        """Decode failures are only logged; everything else is shown to the user."""
        return self.kind != FailureKind.DECODE


@dataclass(frozen=True)
class GatewayResult(Generic[T]):
    value: Optional[T] = None
    failure: Optional[Failure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "GatewayResult[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, failure: Failure) -> "GatewayResult[T]":
        return cls(failure=failure)
