"""
Service layer errors and fetch outcomes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class FailureReason(str, Enum):
    """Why a remote fetch failed."""

    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    DECODE = "decode"
    SERVER_ERROR = "server_error"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class FetchFailure:
    """Classified fetch failure."""

    reason: FailureReason
    message: str
    status: int | None = None  # only set for SERVER_ERROR

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class FetchOutcome(Generic[T]):
    """
    Tagged result of a fetch: either ``ok`` with a value or a ``failure``.

    Usage:
        outcome = await fetcher.fetch("/api/products", ProductsResponse)
        if outcome.ok:
            use(outcome.value)
        else:
            logger.warning(outcome.failure.message)
    """

    value: T | None = None
    failure: FetchFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: T) -> "FetchOutcome[T]":
        return cls(value=value)

    @classmethod
    def failed(
        cls,
        reason: FailureReason,
        message: str,
        status: int | None = None,
    ) -> "FetchOutcome[T]":
        return cls(failure=FetchFailure(reason=reason, message=message, status=status))


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, service_id: str | None = None):
        self.service_id = service_id
        super().__init__(message)


class ResourceUnavailableError(ServiceError):
    """A resource could not be fetched and no cached copy exists."""

    def __init__(self, service_id: str, failure: FetchFailure):
        self.failure = failure
        super().__init__(
            f"Resource '{service_id}' unavailable: {failure.message}",
            service_id=service_id,
        )
