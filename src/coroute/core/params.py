"""Registration argument helpers.

A registration call looks like ``action([specifier], *handlers)`` where the
optional route specifier is a string, a compiled pattern, or a list/tuple
whose first element is one of those. Handlers may be nested in lists and
tuples at any depth.

- ``is_route_specifier(value)``: specifier detection (an empty sequence is
  not a specifier).
- ``split_specifier(args)``: ``(specifier or None, remaining arguments)``.
- ``flatten(items)``: depth-first, left-to-right flattening; no reordering
  and no deduplication.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Optional, Sequence, Tuple

__all__ = ["flatten", "is_route_specifier", "split_specifier"]


def _is_path(value: Any) -> bool:
    return isinstance(value, (str, re.Pattern))


def is_route_specifier(value: Any) -> bool:
    if _is_path(value):
        return True
    if isinstance(value, (list, tuple)) and value:
        return _is_path(value[0])
    return False


def split_specifier(args: Sequence[Any]) -> Tuple[Optional[Any], List[Any]]:
    if args and is_route_specifier(args[0]):
        return args[0], list(args[1:])
    return None, list(args)


def flatten(items: Iterable[Any], accu: Optional[List[Any]] = None) -> List[Any]:
    if accu is None:
        accu = []
    for item in items:
        if isinstance(item, (list, tuple)):
            flatten(item, accu)
        else:
            accu.append(item)
    return accu
