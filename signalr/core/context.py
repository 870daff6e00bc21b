from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict, Optional


class Context:
    """Cancellation scope shared by a listen call and the handlers it dispatches to.

    Cancelling the context makes `listen` return cleanly at its next suspension point.
    A `timeout` (seconds) schedules cancellation and needs a running event loop.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self._done = asyncio.Event()
        self._timer: Optional[asyncio.TimerHandle] = None
        if timeout is not None:
            self._timer = asyncio.get_running_loop().call_later(timeout, self.cancel)

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._done.set()

    def cancelled(self) -> bool:
        return self._done.is_set()

    async def wait(self) -> None:
        await self._done.wait()


@dataclass
class InvocationContext:
    """Context handed to handler methods: the listen scope plus envelope metadata."""

    parent: Context
    target: str
    invocation_id: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)

    def cancel(self) -> None:
        self.parent.cancel()

    def cancelled(self) -> bool:
        return self.parent.cancelled()

    async def wait(self) -> None:
        await self.parent.wait()


__all__ = ["Context", "InvocationContext"]
