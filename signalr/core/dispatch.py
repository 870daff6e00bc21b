from __future__ import annotations

import inspect
import json
import logging
import typing
from functools import lru_cache
from typing import Any, Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from signalr.protocol.errors import DispatchError
from signalr.protocol.messages import InvocationMessage

from .context import Context, InvocationContext

logger = logging.getLogger(__name__)

# Handler attributes that are never treated as invocation targets.
RESERVED_TARGETS = frozenset({"default", "on_start"})

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


class _DecodeFailed(Exception):
    pass


def find_target_method(handler: Any, target: str) -> Optional[Any]:
    """Public callable attribute named exactly `target`, if the handler has one."""
    if not target or target.startswith("_") or target in RESERVED_TARGETS:
        return None
    method = getattr(handler, target, None)
    if method is None or inspect.isclass(method) or not callable(method):
        return None
    return method


def argument_types(method: Any) -> Optional[List[Any]]:
    """
    Declared types of the parameters that follow the context parameter, or None if the
    method cannot receive a positional invocation (no context slot, *args, required
    keyword-only parameters, annotations that do not resolve).
    """
    try:
        signature = inspect.signature(method)
    except (TypeError, ValueError):
        return None

    params = []
    for param in signature.parameters.values():
        if param.kind == inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind == inspect.Parameter.KEYWORD_ONLY and param.default is inspect.Parameter.empty:
            return None
        if param.kind in _POSITIONAL:
            params.append(param)
    if not params:
        return None

    try:
        hints = typing.get_type_hints(method)
    except (NameError, TypeError, AttributeError):
        if any(isinstance(param.annotation, str) for param in params[1:]):
            return None
        hints = {}

    types = []
    for param in params[1:]:
        hint = hints.get(param.name, param.annotation)
        if hint is inspect.Parameter.empty:
            hint = Any
        types.append(hint)
    return types


@lru_cache(maxsize=256)
def _adapter(tp: Any) -> TypeAdapter:
    return TypeAdapter(tp)


def decode_argument(tp: Any, raw: Any) -> Any:
    """Decode one raw JSON value into `tp` with JSON-mode strictness (no string->int coercion)."""
    if tp is Any:
        return raw
    try:
        adapter = _adapter(tp)
    except TypeError:
        # unhashable type hint, skip the cache
        adapter = TypeAdapter(tp)
    return adapter.validate_json(json.dumps(raw), strict=True)


def _decode_all(types: List[Any], raw_args: List[Any], target: str) -> List[Any]:
    decoded = []
    for index, (tp, raw) in enumerate(zip(types, raw_args)):
        try:
            decoded.append(decode_argument(tp, raw))
        except (ValidationError, TypeError, ValueError) as exc:
            logger.warning("Argument %s of %s does not decode as %r, using default handler: %s", index, target, tp, exc)
            raise _DecodeFailed() from exc
    return decoded


async def _invoke(target: str, func: Any, *args: Any) -> None:
    try:
        result = func(*args)
        if inspect.isawaitable(result):
            result = await result
    except Exception as exc:
        raise DispatchError(target, str(exc) or repr(exc)) from exc

    if result is None:
        return
    if isinstance(result, BaseException):
        raise DispatchError(target, str(result) or repr(result)) from result
    logger.warning("ran into a return we didn't know how to deal with from %s: %r", target, result)


def invocation_context(ctx: Context, msg: InvocationMessage) -> InvocationContext:
    headers: Dict[str, str] = dict(msg.headers or {})
    return InvocationContext(parent=ctx, target=msg.target, invocation_id=msg.invocation_id, headers=headers)


async def dispatch(ctx: Context, handler: Any, msg: InvocationMessage) -> None:
    """Route one invocation to a typed handler method, or to `handler.default`."""
    call_ctx = invocation_context(ctx, msg)
    raw_args = list(msg.arguments)

    method = find_target_method(handler, msg.target)
    if method is not None:
        types = argument_types(method)
        if types is not None and len(types) == len(raw_args):
            try:
                decoded = _decode_all(types, raw_args, msg.target)
            except _DecodeFailed:
                pass
            else:
                logger.debug("Dispatching %s to typed handler method", msg.target)
                await _invoke(msg.target, method, call_ctx, *decoded)
                return

    logger.debug("Dispatching %s to default handler", msg.target)
    await _invoke(msg.target, handler.default, call_ctx, msg.target, raw_args)


__all__ = ["RESERVED_TARGETS", "argument_types", "decode_argument", "dispatch", "find_target_method"]
