"""Registration action names known to the chain dispatcher.

``METHODS`` mirrors the HTTP verbs a dispatcher exposes as registration
methods. Verbs containing a dash are exposed with an underscore
(``M-SEARCH`` → ``m_search``).
"""

from __future__ import annotations

from typing import Tuple

__all__ = ["METHODS", "VERB_ACTIONS", "ROUTE_ACTIONS", "ROUTER_ACTIONS", "action_name"]

METHODS: Tuple[str, ...] = (
    "CHECKOUT",
    "COPY",
    "DELETE",
    "GET",
    "HEAD",
    "LOCK",
    "MERGE",
    "MKACTIVITY",
    "MKCOL",
    "MOVE",
    "M-SEARCH",
    "NOTIFY",
    "OPTIONS",
    "PATCH",
    "POST",
    "PURGE",
    "PUT",
    "REPORT",
    "SEARCH",
    "SUBSCRIBE",
    "TRACE",
    "UNLOCK",
    "UNSUBSCRIBE",
)


def action_name(method: str) -> str:
    return method.lower().replace("-", "_")


VERB_ACTIONS: Tuple[str, ...] = tuple(action_name(method) for method in METHODS)

# Route objects have no per-parameter binding.
ROUTE_ACTIONS: Tuple[str, ...] = VERB_ACTIONS + ("all",)
ROUTER_ACTIONS: Tuple[str, ...] = VERB_ACTIONS + ("use", "all", "param")
