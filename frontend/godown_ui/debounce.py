"""
Trailing-edge debounce on the running asyncio loop.
"""

import asyncio
from typing import Any, Callable, Optional

SEARCH_DELAY = 0.1


class Debouncer:
    """
    Calls ``callback`` with the latest arguments once ``delay`` seconds pass
    without another call. ``cancel()`` drops a pending call.
    """

    def __init__(self, callback: Callable[..., Any], delay: float = SEARCH_DELAY):
        self.callback = callback
        self.delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def __call__(self, *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, args)

    def _fire(self, args) -> None:
        self._handle = None
        self.callback(*args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
