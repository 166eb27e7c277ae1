"""Core adapter runtime aggregator.

Expose the registration layer from a single module. No logic beyond
imports/exports:

  * ``arity`` → ``ArityClass``, ``classify``
  * ``decorators`` → ``handler``, ``error_handler``
  * ``adapter`` → ``wrap_handler``, ``find_continuation``
  * ``params`` → ``flatten``, ``is_route_specifier``, ``split_specifier``
  * ``interceptor`` → ``CoRouter``, ``find_params``, ``intercept``
"""

from .adapter import find_continuation, wrap_handler
from .arity import ArityClass, classify
from .decorators import error_handler, handler
from .interceptor import CoRouter, find_params, intercept
from .outcome import apply_outcome, forward_rejection, rejection_reason
from .params import flatten, is_route_specifier, split_specifier

__all__ = [
    "ArityClass",
    "CoRouter",
    "apply_outcome",
    "classify",
    "error_handler",
    "find_continuation",
    "find_params",
    "flatten",
    "forward_rejection",
    "handler",
    "intercept",
    "is_route_specifier",
    "rejection_reason",
    "split_specifier",
    "wrap_handler",
]
