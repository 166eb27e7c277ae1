"""Registration interception and the plugin-enabled ``CoRouter``.

``find_params(args)`` turns the raw arguments of a registration call into
``[specifier, *adapted_handlers]``: the optional leading specifier is split
off, the rest is flattened and every element is adapted with
:func:`~coroute.core.adapter.wrap_handler`. Invalid handlers raise from here,
so the registration call itself fails.

``intercept(target, actions)`` replaces each named action on ``target`` (a
dispatcher or a route object) with a version that runs ``find_params`` and
delegates to the original bound method. It returns ``target``.

CoRouter
--------
``CoRouter(**options)`` is a :class:`~coroute.chain.Dispatcher` intercepted at
construction for every verb, ``use``, ``all`` and ``param``. ``route(path)``
returns a route intercepted for every verb and ``all`` (routes have no
``param``).

Plugins
~~~~~~~
``CoRouter.register_plugin(plugin_class, name=None)`` registers a
:class:`~coroute.plugins.BasePlugin` subclass globally under its
``plugin_code`` (an explicit ``name`` may overwrite; otherwise a different
class under the same code raises ``ValueError``). ``plug(name, **config)``
attaches an instance to one router and returns the router; attached plugins
are reachable as attributes (``router.logging``) and wrap the drive step of
every handler registered on the router and its routes, including handlers
registered before the plugin was attached.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Type

from coroute.chain import ROUTE_ACTIONS, ROUTER_ACTIONS, Dispatcher, Route
from coroute.plugins._base_plugin import BasePlugin

from .adapter import wrap_handler
from .params import flatten, split_specifier

__all__ = ["CoRouter", "find_params", "intercept"]

_PLUGIN_REGISTRY: Dict[str, Type[BasePlugin]] = {}


def find_params(
    args: Sequence[Any], *, router: Any = None, plugins: Sequence[BasePlugin] = ()
) -> List[Any]:
    specifier, handlers = split_specifier(args)
    params: List[Any] = [
        wrap_handler(handler, router=router, plugins=plugins) for handler in flatten(handlers)
    ]
    if specifier is not None:
        params.insert(0, specifier)
    return params


def intercept(
    target: Any,
    actions: Iterable[str],
    *,
    router: Any = None,
    plugins: Sequence[BasePlugin] = (),
) -> Any:
    for action in actions:
        original = getattr(target, action)
        setattr(target, action, _intercepted(original, router=router, plugins=plugins))
    return target


def _intercepted(original: Callable, *, router: Any, plugins: Sequence[BasePlugin]) -> Callable:
    def register(*args: Any) -> Any:
        return original(*find_params(args, router=router, plugins=plugins))

    register.__name__ = original.__name__
    register.__doc__ = original.__doc__
    return register


class CoRouter(Dispatcher):
    """Dispatcher accepting continuation, awaitable and generator handlers."""

    def __init__(self, **options: Any) -> None:
        super().__init__(**options)
        self._plugins: List[BasePlugin] = []
        self._plugins_by_name: Dict[str, BasePlugin] = {}
        self._plugin_info: Dict[str, Dict[str, Any]] = {}
        intercept(self, ROUTER_ACTIONS, router=self, plugins=self._plugins)

    def route(self, path: Any) -> Route:
        return intercept(super().route(path), ROUTE_ACTIONS, router=self, plugins=self._plugins)

    # ------------------------------------------------------------------
    # Plugin registration
    # ------------------------------------------------------------------
    @classmethod
    def register_plugin(cls, plugin_class: Type[BasePlugin], name: Optional[str] = None) -> None:
        """Register a plugin class globally.

        Args:
            plugin_class: A BasePlugin subclass with plugin_code defined.
            name: Optional override name; overwrites an existing registration.
        """
        if not isinstance(plugin_class, type) or not issubclass(plugin_class, BasePlugin):
            raise TypeError("plugin_class must be a BasePlugin subclass")
        if not getattr(plugin_class, "plugin_code", None):
            raise ValueError(
                f"Plugin {plugin_class.__name__} not following standards: missing plugin_code"
            )
        code = name or plugin_class.plugin_code
        if name is None:
            existing = _PLUGIN_REGISTRY.get(code)
            if existing is not None and existing is not plugin_class:
                raise ValueError(f"Plugin '{code}' already registered")
        _PLUGIN_REGISTRY[code] = plugin_class

    @classmethod
    def available_plugins(cls) -> Dict[str, Type[BasePlugin]]:
        return dict(_PLUGIN_REGISTRY)

    def plug(self, plugin: str, **config: Any) -> "CoRouter":
        """Attach a plugin by name (previously registered globally)."""
        if not isinstance(plugin, str):
            raise TypeError(
                f"Plugin must be referenced by name string, got {type(plugin).__name__}"
            )
        plugin_class = _PLUGIN_REGISTRY.get(plugin)
        if plugin_class is None:
            available = ", ".join(sorted(_PLUGIN_REGISTRY)) or "none"
            raise ValueError(
                f"Unknown plugin '{plugin}'. Register it first. Available plugins: {available}"
            )
        instance = plugin_class(self, **config)
        if instance.name not in self._plugins_by_name:
            self._plugins.append(instance)
            self._plugins_by_name[instance.name] = instance
        return self

    def iter_plugins(self) -> List[BasePlugin]:
        """Return attached plugin instances in application order."""
        return list(self._plugins)

    def get_config(self, plugin_name: str, handler_name: Optional[str] = None) -> Dict[str, Any]:
        """Return plugin config (global + per-handler overrides) for an attached plugin."""
        plugin = self._plugins_by_name.get(plugin_name)
        if plugin is None:
            raise AttributeError(
                f"No plugin named '{plugin_name}' attached to {type(self).__name__}"
            )
        return plugin.configuration(handler_name)

    def __getattr__(self, name: str) -> Any:
        plugins = self.__dict__.get("_plugins_by_name", {})
        plugin = plugins.get(name)
        if plugin is None:
            raise AttributeError(f"No plugin named '{name}' attached to {type(self).__name__}")
        return plugin
