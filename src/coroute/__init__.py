"""coroute public API.

Register continuation-style, awaitable-returning, ``async def`` and
generator handlers on one dispatch chain::

    from coroute import CoRouter, call

    router = CoRouter()

    def home(req, res):
        status = yield call(fetch_status)
        res.send(status)

    router.get("/", home)

Public exports: ``CoRouter``, ``wrap_handler``, the ``handler`` /
``error_handler`` markers, effect helpers ``call`` / ``delay`` / ``task``, the
chain types ``Dispatcher`` / ``Request`` / ``Response`` and the error types.

Built-in plugins (``logging``) are imported for their side effect of calling
``CoRouter.register_plugin``; imports are done via ``import_module`` to avoid
cycles.
"""

from importlib import import_module

__version__ = "0.1.0"

from .chain import Dispatcher, Request, Response
from .core import CoRouter, error_handler, handler, wrap_handler
from .effects import call, delay, task
from .errors import CorouteError, HandlerTypeError, Rejection, RejectionWithoutReason

for _plugin in ("logging",):
    import_module(f"{__name__}.plugins.{_plugin}")
del _plugin

__all__ = [
    "CoRouter",
    "CorouteError",
    "Dispatcher",
    "HandlerTypeError",
    "Rejection",
    "RejectionWithoutReason",
    "Request",
    "Response",
    "call",
    "delay",
    "error_handler",
    "handler",
    "task",
    "wrap_handler",
]
