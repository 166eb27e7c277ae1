"""Chain dispatcher used underneath the coroute registration layer.

Exports:
  * ``dispatcher`` → ``Dispatcher`` (ordered middleware stack)
  * ``route`` → ``Route`` (per-path verb stacks)
  * ``layer`` → ``Layer``, ``positional_arity``
  * ``exchange`` → ``Request``, ``Response``
  * ``methods`` → ``METHODS`` and the registration action tables
"""

from .dispatcher import Dispatcher
from .exchange import Request, Response
from .layer import Layer, positional_arity
from .methods import METHODS, ROUTE_ACTIONS, ROUTER_ACTIONS, VERB_ACTIONS
from .route import Route

__all__ = [
    "Dispatcher",
    "Layer",
    "METHODS",
    "ROUTE_ACTIONS",
    "ROUTER_ACTIONS",
    "Request",
    "Response",
    "Route",
    "VERB_ACTIONS",
    "positional_arity",
]
