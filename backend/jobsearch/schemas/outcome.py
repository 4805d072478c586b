"""
Tagged results for calls to external collaborators.

Search, page fetch and the generative model can each degrade to fixed
substitute data. Callers get the data together with how it was obtained
instead of a plausible-looking payload that hides a failure.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FALLBACK = "fallback"
    FAILED = "failed"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Attributes:
        status: How the value was produced
        value: Real data (success), substitute data (fallback), None (failed)
        reason: Short machine-readable cause for fallback/failed
    """

    status: OutcomeStatus
    value: Optional[T] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    @property
    def is_fallback(self) -> bool:
        return self.status is OutcomeStatus.FALLBACK

    @property
    def failed(self) -> bool:
        return self.status is OutcomeStatus.FAILED

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(OutcomeStatus.SUCCESS, value)

    @classmethod
    def fallback(cls, value: T, reason: str) -> "Outcome[T]":
        return cls(OutcomeStatus.FALLBACK, value, reason)

    @classmethod
    def failure(cls, reason: str) -> "Outcome[T]":
        return cls(OutcomeStatus.FAILED, None, reason)
