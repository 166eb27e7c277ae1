"""Handler arity classification.

``classify(fn)`` decides once, at registration time, whether a raw handler
runs on the success path or on the error path:

- an explicit marker set by :func:`~coroute.core.decorators.handler` wins;
- otherwise exactly four declared positional parameters mean
  :attr:`ArityClass.ERROR`, anything else :attr:`ArityClass.NORMAL`.

The count uses the same introspection as the chain dispatcher
(:func:`~coroute.chain.layer.positional_arity`), so an adapter declared with
the class's parameter count is routed exactly like the raw handler would be.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable

from coroute.chain.layer import positional_arity

from .decorators import KIND_ATTR_NAME

__all__ = ["ArityClass", "classify", "positional_arity"]

ERROR_HANDLER_ARITY = 4


class ArityClass(str, Enum):
    NORMAL = "normal"
    ERROR = "error"


def classify(fn: Callable) -> ArityClass:
    kind = getattr(fn, KIND_ATTR_NAME, None)
    if kind is not None:
        return ArityClass(kind)
    if positional_arity(fn) == ERROR_HANDLER_ARITY:
        return ArityClass.ERROR
    return ArityClass.NORMAL
