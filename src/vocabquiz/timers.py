import asyncio
import logging
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class SessionTimers:
    """At most one pending one-shot callback per key, on the running loop."""

    def __init__(self):
        self._handles: Dict[str, asyncio.TimerHandle] = {}

    def schedule(self, key: str, delay: float, callback: Callable[..., Any], *args) -> asyncio.TimerHandle:
        self.cancel(key)
        loop = asyncio.get_running_loop()
        handle = loop.call_later(delay, self._fire, key, callback, args)
        self._handles[key] = handle
        return handle

    def _fire(self, key: str, callback: Callable[..., Any], args: tuple):
        self._handles.pop(key, None)
        try:
            callback(*args)
        except Exception:
            logger.exception(f"Timer callback for {key} failed")

    def cancel(self, key: str) -> bool:
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self):
        for key in list(self._handles):
            self.cancel(key)

    def pending(self, key: str) -> bool:
        return key in self._handles

    def remaining(self, key: str) -> Optional[float]:
        handle = self._handles.get(key)
        if handle is None:
            return None
        try:
            now = asyncio.get_running_loop().time()
        except RuntimeError:
            return None
        return max(0.0, handle.when() - now)
