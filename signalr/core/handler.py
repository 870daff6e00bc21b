from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, List, Optional

from .context import InvocationContext

DefaultFunc = Callable[[InvocationContext, str, List[Any]], Any]
StartFunc = Callable[[], Any]


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class Handler(ABC):
    """
    Receives invocations pushed by the hub.

    Every invocation whose target has no matching method lands in `default`. Subclasses
    may add public methods named after targets, taking `(ctx, arg1, ..., argN)`; the
    arguments are decoded into the annotated parameter types before the call. A handler
    may also define `on_start()`, called once when the connection is ready.

    Returning or raising an exception from any of these stops the listen loop.
    """

    @abstractmethod
    async def default(self, ctx: InvocationContext, target: str, args: List[Any]) -> Optional[Exception]:
        ...


class FunctionHandler(Handler):
    """Adapts a plain `(ctx, target, args)` callable, sync or async, into a Handler."""

    def __init__(self, func: DefaultFunc) -> None:
        self._func = func

    async def default(self, ctx: InvocationContext, target: str, args: List[Any]) -> Optional[Exception]:
        return await _maybe_await(self._func(ctx, target, args))


class NotifiedHandler(Handler):
    """Wraps a handler and adds an on-start callback; typed methods of `base` stay reachable."""

    def __init__(self, base: Handler, on_start: StartFunc) -> None:
        self._base = base
        self._on_start = on_start

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._base, name)

    async def default(self, ctx: InvocationContext, target: str, args: List[Any]) -> Optional[Exception]:
        return await _maybe_await(self._base.default(ctx, target, args))

    async def on_start(self) -> None:
        await _maybe_await(self._on_start())


def get_on_start(handler: Any) -> Optional[StartFunc]:
    """Return the handler's on-start hook if it provides one."""
    hook = getattr(handler, "on_start", None)
    return hook if callable(hook) else None


async def notify_start(handler: Any) -> bool:
    hook = get_on_start(handler)
    if hook is None:
        return False
    await _maybe_await(hook())
    return True


__all__ = ["Handler", "FunctionHandler", "NotifiedHandler", "get_on_start", "notify_start"]
