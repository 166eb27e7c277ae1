"""Plugin contract used by :class:`~coroute.core.interceptor.CoRouter`.

Objects
~~~~~~~
``HandlerEntry``
    Dataclass describing one adapted handler, built once at registration:

    - ``name`` – handler name (function ``__name__`` or type name)
    - ``func`` – the raw handler as registered
    - ``arity`` – :class:`~coroute.core.arity.ArityClass` computed at wrap time
    - ``router`` – router the handler was registered on (``None`` when wrapped
      standalone)

``BasePlugin``
    Base class every plugin subclasses. Required class attributes:

    - ``plugin_code`` – unique identifier used for registration (``"logging"``)
    - ``plugin_description`` – human-readable description

    Constructor: ``BasePlugin(router, **config)``; ``config`` goes through
    ``configure()``.

    ``configure(**config)``
        Declares accepted options through its signature. Subclass overrides are
        wrapped by ``__init_subclass__`` to:

        - parse ``flags`` (``"enabled,before:off"``) into booleans;
        - route the write with ``_target``: ``"--base--"`` (router level),
          ``"handler_name"`` or ``"h1,h2"``;
        - validate the options with Pydantic's ``validate_call``;
        - store the options in the router's ``_plugin_info`` store.

    ``configuration(handler_name=None)``
        Router-level config merged with the optional per-handler override.

    ``wrap_handler(router, entry, call_next)``
        Middleware hook around the drive step. ``call_next(*args)`` invokes the
        raw handler through the effect driver and returns an ``asyncio.Future``;
        the hook must return a callable with the same contract. Wrappers are
        composed at every invocation, so plugins attached after a handler was
        registered still apply to it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from pydantic import validate_call

__all__ = ["BasePlugin", "HandlerEntry"]


@dataclass
class HandlerEntry:
    """Metadata for an adapted handler."""

    name: str
    func: Callable
    arity: Any
    router: Any = None


def _wrap_configure(original_configure: Callable) -> Callable:
    """Wrap a plugin's configure() to handle flags, _target, validation and storage."""
    validated = validate_call(original_configure)

    def wrapper(
        self: "BasePlugin", *, _target: str = "--base--", flags: Optional[str] = None, **kwargs: Any
    ) -> None:
        if flags:
            kwargs.update(self._parse_flags(flags))

        if "," in _target:
            for target in [t.strip() for t in _target.split(",") if t.strip()]:
                wrapper(self, _target=target, **kwargs)
            return

        validated(self, **kwargs)
        self._write_config(_target, kwargs)

    return wrapper


class BasePlugin:
    """Hook interface + configuration helpers for router plugins."""

    __slots__ = ("name", "_router")

    plugin_code: str = ""
    plugin_description: str = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "configure" in cls.__dict__:
            cls.configure = _wrap_configure(cls.__dict__["configure"])

    def __init__(self, router: Any, **config: Any):
        self.name = self.plugin_code
        self._router = router
        self._init_store()
        self.configure(**config)

    def _init_store(self) -> None:
        store = self._get_store()
        store.setdefault(self.name, {}).setdefault(
            "--base--", {"config": {"enabled": True}, "locals": {}}
        )

    def configure(self, *, _target: str = "--base--", flags: Optional[str] = None) -> None:
        """Accept only ``flags``; subclasses declare their own options."""
        if flags:
            self._write_config(_target, self._parse_flags(flags))

    def _write_config(self, target: str, config: Dict[str, Any]) -> None:
        if not config:
            return
        store = self._get_store()
        plugin_bucket = store.setdefault(self.name, {})
        bucket = plugin_bucket.setdefault(target, {"config": {}, "locals": {}})
        bucket["config"].update(config)

    def configuration(self, handler_name: Optional[str] = None) -> Dict[str, Any]:
        """Read merged configuration (base + optional per-handler override)."""
        plugin_bucket = self._get_store().get(self.name)
        if not plugin_bucket:
            return {}
        merged = dict(plugin_bucket.get("--base--", {}).get("config", {}))
        if handler_name:
            merged.update(plugin_bucket.get(handler_name, {}).get("config", {}))
        return merged

    def is_enabled(self, handler_name: Optional[str] = None) -> bool:
        return bool(self.configuration(handler_name).get("enabled", True))

    def _parse_flags(self, flags: str) -> Dict[str, bool]:
        mapping: Dict[str, bool] = {}
        for chunk in flags.split(","):
            chunk = chunk.strip()
            if not chunk:
                continue
            if ":" in chunk:
                name, value = chunk.split(":", 1)
                mapping[name.strip()] = value.strip().lower() != "off"
            else:
                mapping[chunk] = True
        return mapping

    def wrap_handler(self, router: Any, entry: HandlerEntry, call_next: Callable) -> Callable:
        """Wrap the drive step; default passthrough."""
        return call_next

    def _get_store(self) -> Dict[str, Any]:
        return getattr(self._router, "_plugin_info")
