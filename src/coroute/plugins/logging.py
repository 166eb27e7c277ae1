"""Logging plugin.

Responsibilities
----------------
- Wrap each driven handler and emit configurable messages:
  * ``before`` (default True): ``"{entry.name} start"`` when the handler is
    entered;
  * ``after`` (default True): ``"{entry.name} end (<ms> ms)"`` when its outcome
    settles, elapsed time formatted ``{elapsed:.2f}``; a rejection emits
    ``"{entry.name} rejected: <reason>"`` instead, with the reason the chain
    receives (the value carried by a ``Rejection``).
- Sinks:
  * when ``print`` is true → always ``print(message)``;
  * else when ``log`` is true → ``logger.info(message)`` if the logger reports
    handlers via ``hasHandlers()``, otherwise ``print(message)`` to avoid drops;
  * else → no output.
- ``enabled`` gates the plugin entirely (default True).
- Uses a provided ``logging.Logger`` (default ``logging.getLogger("coroute")``).

Configuration
-------------
Accepted keys (router level or per handler via ``_target``): ``enabled``,
``before``, ``after``, ``log``, ``print``, as keyword arguments or a ``flags``
string (``"enabled:off,before:on,after:on,log:on,print:off"``)::

    router.plug("logging", flags="before:off")
    router.logging.configure(_target="load_user", after=False)

Timing covers the whole drive, including time spent suspended in generator
or awaitable handlers. The wrapper never changes the outcome.

Registration
------------
At import time the plugin registers itself as ``"logging"`` via
``CoRouter.register_plugin(LoggingPlugin)``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Optional

from coroute.core.interceptor import CoRouter
from coroute.core.outcome import rejection_reason
from coroute.plugins._base_plugin import BasePlugin, HandlerEntry


class LoggingPlugin(BasePlugin):
    """Logs handler drives with timing."""

    plugin_code = "logging"
    plugin_description = "Logs handler drives with timing"

    __slots__ = ("_logger",)

    def __init__(self, router, *, logger: Optional[logging.Logger] = None, **cfg):
        self._logger = logger or logging.getLogger("coroute")
        super().__init__(router, **cfg)

    def configure(
        self,
        enabled: bool = True,
        before: bool = True,
        after: bool = True,
        log: bool = True,
        print: bool = False,  # noqa: A002 - shadowing builtin intentionally
    ):
        """Configure logging plugin options.

        The wrapper added by __init_subclass__ handles writing to store.
        """
        pass  # Storage is handled by the wrapper

    def _emit(self, message: str, *, cfg: Optional[dict] = None):
        if cfg is None:
            return
        if cfg.get("print"):
            print(message)
            return
        if cfg.get("log"):
            logger = self._logger
            has_handlers = getattr(logger, "hasHandlers", None) or getattr(
                logger, "has_handlers", None
            )
            can_log = callable(has_handlers) and has_handlers()
            if can_log:
                logger.info(message)
            else:
                print(message)

    def wrap_handler(self, router, entry: HandlerEntry, call_next: Callable):
        """Wrap the drive with start/end logging and timing."""

        def logged(*args: Any) -> "asyncio.Future[Any]":
            cfg = self._effective_config(entry.name)
            if not cfg["enabled"]:
                return call_next(*args)
            if cfg["before"]:
                self._emit(f"{entry.name} start", cfg=cfg)
            t0 = time.perf_counter()
            future = call_next(*args)

            def finished(fut: "asyncio.Future[Any]") -> None:
                if fut.cancelled() or not cfg["after"]:
                    return
                exc = fut.exception()
                if exc is not None:
                    reason = rejection_reason(exc)
                    self._emit(f"{entry.name} rejected: {reason!r}", cfg=cfg)
                    return
                elapsed = (time.perf_counter() - t0) * 1000
                self._emit(f"{entry.name} end ({elapsed:.2f} ms)", cfg=cfg)

            future.add_done_callback(finished)
            return future

        return logged

    def _effective_config(self, entry_name: str) -> dict:
        defaults = {"enabled": True, "before": True, "after": True, "log": True, "print": False}
        cfg = defaults | self.configuration(entry_name)

        def to_bool(key: str) -> bool:
            val = cfg.get(key)
            return defaults[key] if val is None else bool(val)

        return {key: to_bool(key) for key in defaults}


CoRouter.register_plugin(LoggingPlugin)
