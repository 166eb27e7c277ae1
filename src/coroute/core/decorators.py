"""Marker helpers declaring a handler's kind explicitly.

Handlers are normally classified by how many positional parameters they
declare (four means error handler). These decorators store an explicit kind
on the function instead, for handlers whose shape does not say it, e.g.::

    @error_handler
    async def report(err, req, res):
        res.status(500).send(str(err))

``handler(kind)`` stores ``kind`` under ``KIND_ATTR_NAME``; the decorated
function is otherwise returned unchanged. Only ``"normal"`` and ``"error"``
are accepted.
"""

from __future__ import annotations

from typing import Callable

__all__ = ["KIND_ATTR_NAME", "error_handler", "handler"]

KIND_ATTR_NAME = "__coroute_kind__"

_KINDS = ("normal", "error")


def handler(kind: str = "normal") -> Callable[[Callable], Callable]:
    """Mark a function as a ``"normal"`` or ``"error"`` handler."""
    if kind not in _KINDS:
        raise ValueError(f"Unknown handler kind {kind!r}; expected one of {_KINDS}")

    def decorator(func: Callable) -> Callable:
        setattr(func, KIND_ATTR_NAME, kind)
        return func

    return decorator


def error_handler(func: Callable) -> Callable:
    """Shortcut for ``handler("error")``."""
    return handler("error")(func)
