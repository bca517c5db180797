"""
Progress reporting and cooperative cancellation.

Long operations (project scans, pairwise content comparison, bulk apply)
report ``(step, total, label)`` to an optional host callback and poll a
CancellationToken at each iteration boundary. Cancellation never raises: the
operation stops and returns its partial result.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


class CancellationToken:
    """Thread-safe cancellation flag."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def __bool__(self) -> bool:
        return self.cancelled


class ProgressTracker:
    """Step counter for one operation.

    Forwards every step to the host callback (purely observational) and
    exposes the cancellation check used by the loop driving the operation.

    Usage:
        tracker = ProgressTracker("Regrouping", total=len(items), callback=cb, token=token)
        for item in items:
            if tracker.should_stop():
                break
            ...
            tracker.increment(item)
        tracker.complete()
    """

    def __init__(
        self,
        operation: str,
        total: int,
        callback: Optional[ProgressCallback] = None,
        token: Optional[CancellationToken] = None,
    ):
        self.operation = operation
        self.total = total
        self.current = 0
        self._callback = callback
        self._token = token
        self._start = time.monotonic()
        self._stopped = False

    def should_stop(self) -> bool:
        """True once cancellation was requested; logs the first observation."""
        if self._token is not None and self._token.cancelled:
            if not self._stopped:
                self._stopped = True
                logger.warning(f"{self.operation} cancelled at step {self.current}/{self.total}")
            return True
        return False

    @property
    def stopped(self) -> bool:
        return self._stopped

    def increment(self, label: str = "") -> None:
        self.current += 1
        self._report(label)

    def set_progress(self, step: int, label: str = "") -> None:
        self.current = step
        self._report(label)

    @property
    def fraction(self) -> float:
        if self.total == 0:
            return 0.0
        return self.current / self.total

    def eta_seconds(self) -> Optional[float]:
        """Estimated seconds remaining, or None when it cannot be computed yet."""
        if self.current == 0 or self.total == 0:
            return None
        elapsed = time.monotonic() - self._start
        return elapsed / self.current * (self.total - self.current)

    def complete(self) -> None:
        elapsed = time.monotonic() - self._start
        if not self._stopped:
            logger.info(
                f"{self.operation} completed in {elapsed:.2f}s ({self.current}/{self.total} steps)"
            )

    def _report(self, label: str) -> None:
        if self._callback is None:
            return
        try:
            self._callback(self.current, self.total, label or self.operation)
        except Exception as e:
            # The host UI is observational only; its failures must not abort the operation
            logger.error(f"Progress callback failed during {self.operation}: {e}")
