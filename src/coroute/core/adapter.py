"""Handler adapter: one uniform continuation-style handler per raw handler.

``wrap_handler(handler)`` validates and classifies ``handler`` once and
returns an adapter declaring the same positional arity class:

- normal: ``adapted(req, res, next, *rest)``
- error: ``adapted(err, req, res, next, *rest)``

so the dispatcher's own arity inspection keeps routing it to the success or
the error path. Non-callables and async generator functions raise
:class:`~coroute.errors.HandlerTypeError` immediately, which makes bad
registrations fail at the registration call.

At invocation the adapter:

1. picks the continuation: the last positional argument, or the one before
   it when the last is a string (per-parameter bindings are invoked as
   ``(req, res, next, value)``);
2. drives the raw handler with every positional argument through
   :func:`coroute.effects.task`, wrapped by the router's plugins if any;
3. when the future settles, maps the outcome with
   :mod:`coroute.core.outcome`.

The adapter never blocks: it returns as soon as the drive is scheduled. A
cancelled drive leaves the chain where it is. A handler that calls ``next``
itself and also resolves to ``"next"`` or ``"route"`` triggers the
continuation twice; this is intended behaviour, not guarded against.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from functools import partial
from typing import Any, Callable, Optional, Sequence, Tuple

from coroute.effects import task
from coroute.errors import HandlerTypeError
from coroute.plugins._base_plugin import BasePlugin, HandlerEntry

from .arity import ArityClass, classify
from .outcome import apply_outcome, forward_rejection

__all__ = ["find_continuation", "handler_name", "wrap_handler"]

logger = logging.getLogger("coroute")


def handler_name(handler: Callable) -> str:
    return getattr(handler, "__name__", None) or type(handler).__name__


def find_continuation(args: Sequence[Any]) -> Callable:
    """Return the continuation among a handler's positional arguments."""
    next = args[-1]
    if isinstance(next, str):
        next = args[-2]
    return next


def wrap_handler(
    handler: Any,
    *,
    router: Any = None,
    plugins: Sequence[BasePlugin] = (),
    name: Optional[str] = None,
) -> Callable:
    """Adapt ``handler`` to the continuation protocol.

    Args:
        handler: continuation-style, awaitable-returning, ``async def`` or
            generator handler.
        router: owner passed to plugin hooks.
        plugins: plugins wrapping the drive step; read at every invocation.
        name: entry name override (defaults to the handler's ``__name__``).

    Raises:
        HandlerTypeError: ``handler`` is not callable, or is an async
            generator function.
    """
    if not callable(handler):
        raise HandlerTypeError(handler)
    if inspect.isasyncgenfunction(handler):
        raise HandlerTypeError(
            handler,
            "Expected a callback function but got an async generator function "
            f"{handler_name(handler)!r}; yield effects from a plain generator instead",
        )

    entry = HandlerEntry(
        name=name or handler_name(handler),
        func=handler,
        arity=classify(handler),
        router=router,
    )

    def run(args: Tuple[Any, ...]) -> None:
        next = find_continuation(args)
        drive: Callable[..., "asyncio.Future[Any]"] = partial(task, handler)
        for plugin in reversed(list(plugins)):
            if plugin.is_enabled(entry.name):
                drive = plugin.wrap_handler(router, entry, drive)
        drive(*args).add_done_callback(partial(_settle, entry, next))

    if entry.arity is ArityClass.ERROR:

        def adapted(err, req, res, next, *rest):
            run((err, req, res, next) + rest)

    else:

        def adapted(req, res, next, *rest):
            run((req, res, next) + rest)

    adapted.__name__ = entry.name
    adapted.__qualname__ = f"wrap_handler.<{entry.name}>"
    adapted.__doc__ = getattr(handler, "__doc__", None)
    adapted.raw_handler = handler  # type: ignore[attr-defined]
    adapted.entry = entry  # type: ignore[attr-defined]
    return adapted


def _settle(entry: HandlerEntry, next: Callable, future: "asyncio.Future[Any]") -> None:
    if future.cancelled():
        logger.debug("%s: drive cancelled, chain not advanced", entry.name)
        return
    exc = future.exception()
    if exc is not None:
        forward_rejection(exc, next)
        return
    apply_outcome(future.result(), next)
