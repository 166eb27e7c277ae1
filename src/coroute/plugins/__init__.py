"""Plugin package initialiser.

Kept lightweight: concrete plugin modules (``logging``) are not imported here
so ``coroute.plugins`` stays side-effect free. They register themselves with
``CoRouter`` when imported (see ``coroute.__init__``).
"""

from ._base_plugin import BasePlugin, HandlerEntry

__all__ = ["BasePlugin", "HandlerEntry"]
