"""Error taxonomy for external calls and research runs.

Collaborators classify their failures into an :class:`ErrorKind` at the
boundary, so the resilience layer only has to look at ``kind`` and
``retry_after`` rather than inspecting SDK-specific exception shapes.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Closed classification of external call failures."""
    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"
    FATAL = "fatal"


RETRYABLE_KINDS = frozenset({ErrorKind.RATE_LIMITED, ErrorKind.TRANSIENT})


class ResearchError(Exception):
    """Base class for all research engine errors."""


class ExternalCallError(ResearchError):
    """A classified failure raised by a search or LLM collaborator."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        retry_after: Optional[float] = None,
        provider: str = "",
    ):
        super().__init__(message)
        self.kind = kind
        self.retry_after = retry_after
        self.provider = provider

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS

    def __repr__(self) -> str:
        return f"ExternalCallError(kind={self.kind.value!r}, message={str(self)!r}, provider={self.provider!r})"


class CallTimeoutError(ResearchError, TimeoutError):
    """The resilience deadline elapsed before the call finished."""

    def __init__(self, operation: str, timeout: float):
        super().__init__(f"{operation} timed out after {timeout:g}s")
        self.operation = operation
        self.timeout = timeout


class MaxRetriesExceeded(ResearchError):
    """Retryable failures persisted for every allowed attempt."""

    def __init__(self, attempts: int, last_error: BaseException):
        super().__init__(f"Failed after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class ConfigurationError(ResearchError, ValueError):
    """Invalid research configuration or missing credentials."""
