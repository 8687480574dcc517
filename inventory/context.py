"""
Cancellation context shared by the work items of one collection run.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, TypeVar

from .constants import ERROR_MESSAGES
from .exceptions import CollectionCancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RunContext:
    """
    Cancellation signal for a whole run.

    A run is cancelled explicitly via ``cancel()`` or implicitly once its
    optional deadline passes. Work items call ``check()`` before every
    blocking call.
    """

    def __init__(self, timeout: Optional[float] = None):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: Optional[str] = None
        self._deadline = time.monotonic() + timeout if timeout else None

    def cancel(self, reason: str = "cancelled") -> None:
        with self._lock:
            if self._reason is None:
                self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel("deadline exceeded")
            return True
        return False

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def check(self) -> None:
        """Raise CollectionCancelled if the run has been cancelled."""
        if self.cancelled:
            raise CollectionCancelled(
                ERROR_MESSAGES["run_cancelled"].format(reason=self._reason)
            )

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds; return True if cancelled meanwhile."""
        if self._deadline is not None:
            timeout = max(0.0, min(timeout, self._deadline - time.monotonic()))
        self._event.wait(timeout)
        return self.cancelled

    def for_pair(self, collector: str, region: str) -> "PairContext":
        return PairContext(self, collector, region)


@dataclass(frozen=True)
class PairWarning:
    """A recoverable failure recorded while collecting one (collector, region) pair."""

    collector: str
    region: str
    message: str

    def __str__(self) -> str:
        return f"{self.collector} [{self.region}]: {self.message}"


@dataclass(frozen=True)
class BestEffort(Generic[T]):
    """Result of an auxiliary call: the value, or the fallback plus a warning."""

    value: T
    warning: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.warning is not None


class PairContext:
    """Per work item view of a RunContext that also collects warnings."""

    def __init__(self, run: RunContext, collector: str, region: str):
        self.run = run
        self.collector = collector
        self.region = region
        self.warnings: List[PairWarning] = []

    @property
    def cancelled(self) -> bool:
        return self.run.cancelled

    def check(self) -> None:
        self.run.check()

    def wait(self, timeout: float) -> bool:
        return self.run.wait(timeout)

    def warn(self, message: str) -> PairWarning:
        warning = PairWarning(self.collector, self.region, message)
        self.warnings.append(warning)
        logger.warning("%s", warning)
        return warning

    def best_effort(
        self,
        description: str,
        call: Callable[..., T],
        *args: Any,
        fallback: Any = None,
        **kwargs: Any,
    ) -> BestEffort:
        """
        Run an auxiliary enrichment call, degrading to ``fallback`` on failure.

        Cancellation still propagates; any other exception is recorded as a
        warning on this pair.

        Args:
            description: What the call fetches, used in the warning message
            call: Callable performing the API request
            fallback: Value returned when the call fails

        Returns:
            BestEffort holding the call result or the fallback
        """
        self.check()
        try:
            return BestEffort(call(*args, **kwargs))
        except CollectionCancelled:
            raise
        except Exception as e:
            message = f"{description}: {e}"
            self.warn(message)
            return BestEffort(fallback, message)
