from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class Debouncer:
    """Coalesce rapid calls on the running event loop; only the last one runs.

    A call that arrives while another is pending cancels it. The callback
    runs on the loop once ``window`` seconds pass with no newer call.
    """

    def __init__(self, window: float, *, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self.window = max(0.0, float(window))
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self.superseded = 0

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def call(self, fn: Callable[..., Any], *args: Any) -> None:
        loop = self._loop or asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
            self.superseded += 1
            logger.debug("Debounced call superseded (%d so far)", self.superseded)
        self._handle = loop.call_later(self.window, self._fire, fn, args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Drop any pending call and run ``fn`` now."""
        self.cancel()
        return fn(*args)

    def _fire(self, fn: Callable[..., Any], args: tuple) -> None:
        self._handle = None
        fn(*args)
