"""Per-path route object of the chain dispatcher.

A :class:`Route` holds an ordered stack of method-specific layers for one
path. Each verb action (``get``, ``post``, ``m_search``...) and ``all`` appends
handlers and returns the route so calls can be chained::

    dispatcher.route("/users/:id").get(load).all(audit)

``dispatch`` walks the stack for the request method: ``next()`` advances,
``next("route")`` leaves the route (back to the dispatcher), ``next(err)``
switches to the error handlers remaining in this route.
"""

from __future__ import annotations

from typing import Any, Callable, List, Set

from .layer import Layer, is_error, is_sentinel
from .methods import METHODS, action_name

__all__ = ["Route"]


class Route:
    """Ordered stack of handlers bound to one path."""

    def __init__(self, path: Any) -> None:
        self.path = path
        self.stack: List[Layer] = []
        self.methods: Set[str] = set()

    def handles_method(self, method: str) -> bool:
        if "_all" in self.methods:
            return True
        name = method.lower()
        if name == "head" and "head" not in self.methods:
            name = "get"
        return name in self.methods

    def dispatch(self, req: Any, res: Any, done: Callable) -> None:
        if not self.stack:
            done()
            return
        method = req.method.lower()
        if method == "head" and "head" not in self.methods:
            method = "get"
        req.route = self
        idx = 0

        def next(err: Any = None) -> None:
            nonlocal idx
            if is_sentinel(err, "route"):
                done()
                return
            if is_sentinel(err, "router"):
                done(err)
                return
            while idx < len(self.stack):
                layer = self.stack[idx]
                idx += 1
                if layer.method is not None and layer.method != method:
                    continue
                if is_error(err):
                    layer.handle_error(err, req, res, next)
                else:
                    layer.handle_request(req, res, next)
                return
            done(err)

        next()

    def all(self, *handlers: Callable) -> "Route":
        for handle in handlers:
            self._push(None, handle, "all")
        self.methods.add("_all")
        return self

    def _push(self, method: Any, handle: Callable, action: str) -> None:
        if not callable(handle):
            raise TypeError(
                f"Route.{action}() requires a callback function but got a "
                f"{type(handle).__name__}"
            )
        layer = Layer("/", handle, end=True)
        layer.method = method
        self.stack.append(layer)

    def __repr__(self) -> str:
        return f"Route({self.path!r})"


def _verb(method: str) -> Callable[..., Route]:
    action = action_name(method)
    http_method = method.lower()

    def register(self: Route, *handlers: Callable) -> Route:
        for handle in handlers:
            self._push(http_method, handle, action)
            self.methods.add(http_method)
        return self

    register.__name__ = action
    register.__qualname__ = f"Route.{action}"
    return register


for _method in METHODS:
    setattr(Route, action_name(_method), _verb(_method))
del _method
