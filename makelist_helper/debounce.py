"""Restartable single-shot timers and a coalescing buffer built on them."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DeferredTask:
    """Run ``callback`` once, ``delay_seconds`` after the most recent ``schedule``.

    Scheduling again before the timer fires restarts the window. ``cancel``
    clears the pending run without invoking the callback.
    """

    def __init__(self, delay_seconds: float, callback: Callable[[], None], name: str = "makelist-helper-deferred") -> None:
        self.delay_seconds = delay_seconds
        self._callback = callback
        self._name = name
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def _fire(self, timer: threading.Timer) -> None:
        with self._lock:
            if self._timer is not timer:
                return
            self._timer = None
        try:
            self._callback()
        except Exception:
            logger.exception("Deferred task %s failed", self._name)

    def schedule(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            timer = threading.Timer(self.delay_seconds, lambda: self._fire(timer))
            timer.name = self._name
            timer.daemon = True
            self._timer = timer
        timer.start()

    def cancel(self) -> None:
        with self._lock:
            timer = self._timer
            self._timer = None
        if timer is not None:
            timer.cancel()


class CoalescingBuffer(Generic[T]):
    """Collect items and flush them as one batch after a quiet window."""

    def __init__(
        self,
        delay_seconds: float,
        on_flush: Callable[[list[T]], None],
        name: str = "makelist-helper-coalesce",
    ) -> None:
        self._on_flush = on_flush
        self._lock = threading.Lock()
        self._items: list[T] = []
        self._task = DeferredTask(delay_seconds, self._flush, name=name)

    def add(self, item: T) -> None:
        with self._lock:
            if item not in self._items:
                self._items.append(item)
        self._task.schedule()

    def drain(self) -> list[T]:
        with self._lock:
            items = self._items
            self._items = []
        return items

    def _flush(self) -> None:
        items = self.drain()
        if items:
            self._on_flush(items)

    def cancel(self) -> None:
        """Drop pending items and the pending flush."""
        self._task.cancel()
        self.drain()


__all__ = ["CoalescingBuffer", "DeferredTask"]
