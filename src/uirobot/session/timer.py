"""Cancelable one-shot timer bound to the asyncio event loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class CancelableTimer:
    """Runs a callback once after a delay, unless cancelled first.

    Starting the timer again cancels the pending callback, so at most one
    callback is ever scheduled. The handle is dropped before the callback
    runs, which lets the callback restart the timer.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None

    @property
    def active(self) -> bool:
        return self._handle is not None

    def start(self, delay: float, callback: Callable[[], None]) -> None:
        """Schedule ``callback`` after ``delay`` seconds, replacing any pending one."""
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(delay, self._fire, callback)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, callback: Callable[[], None]) -> None:
        self._handle = None
        callback()
