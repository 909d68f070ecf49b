"""
Redraw debouncing.

Requests made within ``delay`` seconds of each other collapse into a single
call. Mutations are never deferred, only the redraw. With a running asyncio
loop the call fires from ``loop.call_later``; without one the request stays
pending until ``flush()``.
"""

import asyncio
from typing import Callable

from gantt.logging_config import get_logger

logger = get_logger(__name__)


class RedrawScheduler:
    def __init__(self, callback: Callable[[], None], delay: float = 0.016):
        self.callback = callback
        self.delay = delay
        self.pending = False
        self._handle: asyncio.TimerHandle | None = None

    def schedule(self) -> None:
        self.pending = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return

        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self.delay, self._fire)

    def _fire(self) -> None:
        self._handle = None
        self.flush()

    def flush(self) -> bool:
        """Run a pending redraw now. Returns False if nothing was pending."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if not self.pending:
            return False
        self.pending = False
        self.callback()
        return True

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self.pending = False
