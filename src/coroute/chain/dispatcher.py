"""Ordered middleware dispatcher.

``Dispatcher`` keeps a stack of :class:`~coroute.chain.layer.Layer` objects
and walks it for each request. Registration surface:

- ``use([path], *handlers)``: middleware matching ``path`` as a prefix
  (default ``"/"``); the matched prefix is stripped from ``req.url`` while the
  handler runs.
- ``route(path)``: new :class:`~coroute.chain.route.Route` matching ``path``
  exactly.
- ``get(path, *handlers)`` and every other verb, plus ``all``: shorthand for
  ``route(path).<verb>(*handlers)``.
- ``param(name, *callbacks)``: callbacks run as
  ``callback(req, res, next, value)`` before the first layer that captures
  ``name``, once per request and value.

Continuation protocol inside ``handle``:

- ``next()`` advances to the next matching layer;
- ``next("route")`` skips the rest of the current route;
- ``next("router")`` leaves this dispatcher;
- ``next(err)`` switches to error handlers (4 positional parameters).

Options (merged with defaults through ``SmartOptions``): ``case_sensitive``,
``strict`` (trailing slash significance), ``merge_params`` (inherit
``req.params`` from a parent dispatcher).

Dispatcher instances are callables ``(req, res, next)`` and can be mounted
inside another dispatcher with ``use``.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from smartseeds import SmartOptions

from coroute.effects import fit_arguments

from .layer import Layer, PathMatch, has_value, is_error, is_sentinel, split_layer_args
from .methods import METHODS, action_name
from .route import Route

__all__ = ["Dispatcher"]

DEFAULT_OPTIONS: Dict[str, Any] = {
    "case_sensitive": False,
    "strict": False,
    "merge_params": False,
}


class Dispatcher:
    """Walks registered layers in order, honouring the continuation protocol."""

    def __init__(self, **options: Any) -> None:
        opts = SmartOptions(options, defaults=DEFAULT_OPTIONS)
        self.case_sensitive = bool(getattr(opts, "case_sensitive", False))
        self.strict = bool(getattr(opts, "strict", False))
        self.merge_params = bool(getattr(opts, "merge_params", False))
        self.stack: List[Layer] = []
        self.params: Dict[str, List[Callable]] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def use(self, *args: Any) -> "Dispatcher":
        path, handlers = split_layer_args(args)
        if not handlers:
            raise TypeError("Dispatcher.use() requires a middleware function")
        for handle in handlers:
            if not callable(handle):
                raise TypeError(
                    "Dispatcher.use() requires a middleware function but got a "
                    f"{type(handle).__name__}"
                )
            self.stack.append(self._layer(path, handle, end=False))
        return self

    def route(self, path: Any) -> Route:
        return self._new_route(path)

    def all(self, path: Any, *handlers: Callable) -> "Dispatcher":
        self._new_route(path).all(*handlers)
        return self

    def param(self, name: str, *callbacks: Callable) -> "Dispatcher":
        if not isinstance(name, str) or not name:
            raise TypeError(f"Dispatcher.param() requires a parameter name, got {name!r}")
        for callback in callbacks:
            if not callable(callback):
                raise TypeError(
                    "Dispatcher.param() requires a callback function but got a "
                    f"{type(callback).__name__}"
                )
        self.params.setdefault(name, []).extend(callbacks)
        return self

    def _new_route(self, path: Any) -> Route:
        route = Route(path)
        layer = self._layer(path, route.dispatch, end=True)
        layer.route = route
        self.stack.append(layer)
        return route

    def _layer(self, path: Any, handle: Callable, *, end: bool) -> Layer:
        return Layer(
            path,
            handle,
            end=end,
            case_sensitive=self.case_sensitive,
            strict=self.strict,
        )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def __call__(self, req: Any, res: Any, next: Callable) -> None:
        self.handle(req, res, next)

    def handle(self, req: Any, res: Any, out: Optional[Callable] = None) -> None:
        """Run ``req``/``res`` through the stack; ``out`` receives the leftover error."""
        idx = 0
        parent_url = req.base_url
        parent_params = req.params
        param_called: Dict[str, Dict[str, Any]] = {}
        restore_url: Optional[str] = None

        def done(err: Any = None) -> None:
            req.base_url = parent_url
            req.params = parent_params
            if out is not None:
                out(err)

        def next(err: Any = None) -> None:
            nonlocal idx, restore_url
            layer_error = None if is_sentinel(err, "route") else err

            if restore_url is not None:
                req.url = restore_url
                restore_url = None
            req.base_url = parent_url

            if is_sentinel(err, "router"):
                done(None)
                return

            path = req.path
            layer: Optional[Layer] = None
            match: Optional[PathMatch] = None
            while idx < len(self.stack):
                candidate = self.stack[idx]
                idx += 1
                found = candidate.match(path)
                if found is None:
                    continue
                route = candidate.route
                if route is not None:
                    if is_error(layer_error):
                        continue
                    if not route.handles_method(req.method):
                        continue
                layer, match = candidate, found
                break

            if layer is None or match is None:
                done(layer_error)
                return

            if self.merge_params:
                req.params = {**parent_params, **match.params}
            else:
                req.params = dict(match.params)

            def after_params(param_err: Any = None) -> None:
                nonlocal restore_url
                if has_value(param_err):
                    next(layer_error if is_error(layer_error) else param_err)
                    return
                if layer.route is not None:
                    layer.handle_request(req, res, next)
                    return
                prefix = match.path.rstrip("/")
                if prefix:
                    restore_url = req.url
                    req.url = req.url[len(prefix) :] or "/"
                    if not req.url.startswith("/"):
                        req.url = "/" + req.url
                    req.base_url = parent_url + prefix
                if is_error(layer_error):
                    layer.handle_error(layer_error, req, res, next)
                else:
                    layer.handle_request(req, res, next)

            self._process_params(match, param_called, req, res, after_params)

        next()

    def _process_params(
        self,
        match: PathMatch,
        called: Dict[str, Dict[str, Any]],
        req: Any,
        res: Any,
        callback: Callable,
    ) -> None:
        keys = [key for key in match.params if isinstance(key, str)]
        if not self.params or not keys:
            callback()
            return
        i = 0

        def param(err: Any = None) -> None:
            nonlocal i
            if has_value(err):
                callback(err)
                return
            if i >= len(keys):
                callback()
                return
            name = keys[i]
            i += 1
            value = req.params.get(name)
            callbacks = self.params.get(name)
            if not callbacks or value is None:
                param()
                return
            previous = called.get(name)
            if previous is not None and (
                previous["match"] == value
                or (
                    has_value(previous["error"])
                    and not is_sentinel(previous["error"], "route")
                )
            ):
                req.params[name] = previous["value"]
                param(previous["error"])
                return
            state = {"error": None, "match": value, "value": value}
            called[name] = state
            self._run_param_callbacks(name, value, callbacks, state, req, res, param)

        param()

    def _run_param_callbacks(
        self,
        name: str,
        value: str,
        callbacks: List[Callable],
        state: Dict[str, Any],
        req: Any,
        res: Any,
        param: Callable,
    ) -> None:
        j = 0

        def param_callback(err: Any = None) -> None:
            nonlocal j
            state["value"] = req.params.get(name)
            if has_value(err):
                state["error"] = err
                param(err)
                return
            if j >= len(callbacks):
                param()
                return
            fn = callbacks[j]
            j += 1
            try:
                fn(*fit_arguments(fn, (req, res, param_callback, value)))
            except Exception as exc:
                param_callback(exc)

        param_callback()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(layers={len(self.stack)})"


def _verb(method: str) -> Callable[..., Dispatcher]:
    action = action_name(method)

    def register(self: Dispatcher, path: Any, *handlers: Callable) -> Dispatcher:
        getattr(self._new_route(path), action)(*handlers)
        return self

    register.__name__ = action
    register.__qualname__ = f"Dispatcher.{action}"
    return register


for _method in METHODS:
    setattr(Dispatcher, action_name(_method), _verb(_method))
del _method
