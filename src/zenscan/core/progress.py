"""Progress reporting and cooperative cancellation."""

from __future__ import annotations

import threading
import time
from typing import Callable

ProgressCallback = Callable[[float, str], None]  # (fraction in [0, 1], status)


class CancelToken:
    """Shared flag checked by long-running work between steps."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class ProgressReporter:
    """Wraps a progress callback with clamping and rate limiting.

    Reported fractions never decrease and stay in ``[0, 1]``. Updates
    closer together than *interval* seconds are dropped unless forced,
    so per-file loops can call :meth:`update` freely.
    """

    def __init__(self, callback: ProgressCallback | None, interval: float = 0.1) -> None:
        self._callback = callback
        self._interval = interval
        self._last_time = 0.0
        self._fraction = 0.0

    @property
    def fraction(self) -> float:
        return self._fraction

    def update(self, fraction: float, status: str, *, force: bool = False) -> None:
        fraction = min(max(fraction, self._fraction), 1.0)
        now = time.monotonic()
        if not force and now - self._last_time < self._interval:
            self._fraction = fraction
            return
        self._fraction = fraction
        self._last_time = now
        if self._callback is not None:
            self._callback(fraction, status)

    def scaled(self, start: float, end: float) -> ProgressCallback:
        """Return a callback mapping a nested ``[0, 1]`` range onto ``[start, end]``."""

        def _report(fraction: float, status: str) -> None:
            self.update(start + (end - start) * fraction, status)

        return _report
