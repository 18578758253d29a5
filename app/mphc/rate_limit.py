from __future__ import annotations

import time
from typing import Callable


class IntervalGate:
    """Fixed pause between consecutive downloads, as a courtesy to the court server."""

    def __init__(self, delay_ms: int, *, sleep: Callable[[float], None] = time.sleep) -> None:
        self.delay_ms = max(0, int(delay_ms))
        self._sleep = sleep
        self.waits = 0

    def wait(self) -> None:
        self.waits += 1
        if self.delay_ms:
            self._sleep(self.delay_ms / 1000)


class NoDelay(IntervalGate):
    """Gate that never sleeps; handy for tests and dry runs."""

    def __init__(self) -> None:
        super().__init__(0)


__all__ = ["IntervalGate", "NoDelay"]
