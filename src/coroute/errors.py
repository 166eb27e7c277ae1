"""Exception hierarchy shared by the adapter, the interceptor and the chain.

``HandlerTypeError`` is the configuration error raised synchronously by a
registration call that received something other than a callable.
``Rejection`` lets a handler fail with an arbitrary rejection value (including
``None`` or another falsy value); ``RejectionWithoutReason`` is what the
adapter forwards in place of such an empty value.
"""

from __future__ import annotations

from typing import Any, Optional

__all__ = [
    "CorouteError",
    "HandlerTypeError",
    "Rejection",
    "RejectionWithoutReason",
]


class CorouteError(Exception):
    """Base for all coroute-specific errors."""


class HandlerTypeError(CorouteError, TypeError):
    """Raised at registration time when a handler cannot be driven."""

    def __init__(self, received: Any, message: Optional[str] = None) -> None:
        self.received = received
        super().__init__(
            message or f"Expected a callback function but got a {type(received).__name__}"
        )


class Rejection(CorouteError):
    """Fail a handler with an arbitrary reason value.

    ``raise Rejection("not found")`` forwards ``"not found"`` to the chain,
    ``raise Rejection()`` rejects without a reason.
    """

    def __init__(self, reason: Any = None) -> None:
        self.reason = reason
        super().__init__(reason)


class RejectionWithoutReason(CorouteError):
    """Synthesized when a handler rejected with a falsy or missing reason."""

    def __init__(
        self, message: str = "returned promise was rejected but did not have a reason"
    ) -> None:
        super().__init__(message)
