"""Map a driven handler's outcome onto continuation calls.

Resolved values:

- ``"next"`` → ``next()``
- ``"route"`` → ``next("route")``
- anything else → no call; the handler finished the exchange itself.

Rejections forward their reason with ``next(reason)``. The reason is the
raised exception, or the value carried by a
:class:`~coroute.errors.Rejection`. A falsy or missing reason is replaced by
:class:`~coroute.errors.RejectionWithoutReason` so error handlers never see
an empty error. A reason whose truth test raises is forwarded as is.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from coroute.chain.layer import has_value
from coroute.errors import Rejection, RejectionWithoutReason

__all__ = ["apply_outcome", "forward_rejection", "rejection_reason"]

logger = logging.getLogger("coroute")


def apply_outcome(value: Any, next: Callable) -> None:
    if not isinstance(value, str):
        return
    if value == "next":
        next()
    elif value == "route":
        next("route")


def rejection_reason(exc: BaseException) -> Any:
    reason: Any = exc.reason if isinstance(exc, Rejection) else exc
    if not has_value(reason):
        logger.debug("handler rejected without a reason (%r)", reason)
        return RejectionWithoutReason()
    return reason


def forward_rejection(exc: BaseException, next: Callable) -> None:
    next(rejection_reason(exc))
