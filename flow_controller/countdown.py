"""Per-question countdown with a single authoritative expiry event."""
from __future__ import annotations

import asyncio
from typing import Callable, List

ExpiryListener = Callable[["Countdown"], None]


class Countdown:
    """One-second-resolution timer owned by a single question.

    ``tick`` decrements by one second; reaching zero fires the expiry listeners
    exactly once. A cancelled countdown never fires.
    """

    def __init__(self, seconds: int, *, question_index: int) -> None:
        self.question_index = question_index
        self.remaining = max(int(seconds), 0)
        self._expired = False
        self._cancelled = False
        self._listeners: List[ExpiryListener] = []

    @property
    def expired(self) -> bool:
        return self._expired

    @property
    def active(self) -> bool:
        return not (self._expired or self._cancelled)

    def subscribe(self, listener: ExpiryListener) -> None:
        self._listeners.append(listener)

    def cancel(self) -> None:
        self._cancelled = True

    def tick(self) -> bool:
        """Advance one second; return True only on the tick that expires the timer."""

        if not self.active:
            return False
        if self.remaining > 0:
            self.remaining -= 1
        if self.remaining > 0:
            return False
        self._expired = True
        for listener in list(self._listeners):
            listener(self)
        return True

    async def run(self, interval: float = 1.0) -> bool:
        """Tick every ``interval`` seconds until expiry or cancellation."""

        while self.active:
            await asyncio.sleep(interval)
            if self.tick():
                return True
        return self._expired


__all__ = ["Countdown", "ExpiryListener"]
