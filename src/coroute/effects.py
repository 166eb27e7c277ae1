"""Effect driver for generator, awaitable and plain handlers.

``task(fn, *args)`` invokes ``fn`` synchronously and returns an
``asyncio.Future`` that settles with the handler's final value or error,
whatever the handler's style:

- plain function: the future is already settled with the return value (or
  the raised exception);
- awaitable-returning function or ``async def``: the awaitable is scheduled
  with ``asyncio.ensure_future``;
- generator function: a task drives the generator, resolving each yielded
  effect and sending the result back in (errors are thrown back in).
- async generator: rejected with ``TypeError``.

Yieldable effects
-----------------
- ``call(fn, *args, **kwargs)``: run ``fn``; an awaitable or generator result is
  driven to completion. ``fn`` may be a ``(obj, "method")`` pair.
- ``delay(ms)``: sleep for ``ms`` milliseconds.
- any awaitable: awaited.
- a list or tuple of effects: resolved concurrently, yields a list.
- anything else is sent back unchanged.

Arguments are trimmed to what ``fn`` declares, so a ``(req, res)`` handler
can sit in a chain that always passes ``(req, res, next)``.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generator, Optional, Sequence, Tuple

__all__ = ["Call", "Delay", "call", "delay", "fit_arguments", "task"]


@dataclass(frozen=True)
class Call:
    """Effect describing a function call to run on the generator's behalf."""

    fn: Any
    args: Tuple[Any, ...] = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)

    def resolve_target(self) -> Callable:
        if isinstance(self.fn, (list, tuple)):
            context, name = self.fn
            return getattr(context, name)
        return self.fn


@dataclass(frozen=True)
class Delay:
    """Effect suspending the generator for ``ms`` milliseconds."""

    ms: float


def call(fn: Any, *args: Any, **kwargs: Any) -> Call:
    return Call(fn, args, kwargs)


def delay(ms: float) -> Delay:
    return Delay(ms)


def fit_arguments(fn: Callable, args: Sequence[Any]) -> Tuple[Any, ...]:
    """Return the leading slice of ``args`` that ``fn`` can accept positionally."""
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return tuple(args)
    count = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return tuple(args)
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            count += 1
    return tuple(args[:count])


def task(fn: Callable, *args: Any) -> "asyncio.Future[Any]":
    """Invoke ``fn`` and return a future settling with its outcome.

    Must be called while an event loop is running.
    """
    loop = asyncio.get_running_loop()
    try:
        result = fn(*fit_arguments(fn, args))
    except Exception as exc:
        future = loop.create_future()
        future.set_exception(exc)
        return future
    if inspect.isgenerator(result):
        return loop.create_task(_drive(result))
    if inspect.isasyncgen(result):
        future = loop.create_future()
        name = getattr(fn, "__name__", type(fn).__name__)
        future.set_exception(TypeError(f"{name!r} returned an async generator, which cannot be driven"))
        return future
    if inspect.isawaitable(result):
        return asyncio.ensure_future(result)
    future = loop.create_future()
    future.set_result(result)
    return future


async def _drive(gen: Generator[Any, Any, Any]) -> Any:
    value: Any = None
    error: Optional[Exception] = None
    while True:
        try:
            if error is not None:
                effect = gen.throw(error)
            else:
                effect = gen.send(value)
        except StopIteration as stop:
            return stop.value
        value, error = None, None
        try:
            value = await _resolve(effect)
        except Exception as exc:
            error = exc


async def _resolve(effect: Any) -> Any:
    if isinstance(effect, Call):
        result = effect.resolve_target()(*effect.args, **effect.kwargs)
        return await _settle(result)
    if isinstance(effect, Delay):
        await asyncio.sleep(effect.ms / 1000)
        return None
    if isinstance(effect, (list, tuple)):
        return list(await asyncio.gather(*(_resolve(item) for item in effect)))
    return await _settle(effect)


async def _settle(result: Any) -> Any:
    if inspect.isgenerator(result):
        return await _drive(result)
    if inspect.isawaitable(result):
        return await result
    return result
