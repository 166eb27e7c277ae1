"""Path layers of the chain dispatcher.

A :class:`Layer` couples a path specifier with one handler. It answers two
questions for the dispatcher: does this layer match a request path (returning
a :class:`PathMatch` with the captured parameters), and how is the handler
invoked on the success path or on the error path.

Handlers are told apart by their declared positional arity: four parameters
mean an error handler ``(err, req, res, next)``; anything else is a normal
handler ``(req, res, next)``. Layers skip handlers that do not fit the current
path (normal handlers while an error is pending, error handlers otherwise).
"""

from __future__ import annotations

import inspect
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Pattern, Tuple

from coroute.effects import fit_arguments

__all__ = [
    "Layer",
    "PathMatch",
    "compile_path",
    "has_value",
    "is_error",
    "is_sentinel",
    "positional_arity",
    "split_layer_args",
]

_PARAM_RE = re.compile(r":(\w+)")


def positional_arity(fn: Callable) -> int:
    """Count the required positional parameters ``fn`` declares.

    Counting stops at the first parameter with a default; ``*args`` and
    keyword-only parameters are not counted.
    """
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return 0
    count = 0
    for param in sig.parameters.values():
        if param.kind not in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            continue
        if param.default is not inspect.Parameter.empty:
            break
        count += 1
    return count


def is_sentinel(err: Any, name: str) -> bool:
    return isinstance(err, str) and err == name


def has_value(err: Any) -> bool:
    """True when a continuation argument is set (an error or a sentinel).

    Values whose truth test raises count as set.
    """
    if err is None:
        return False
    try:
        return bool(err)
    except Exception:
        return True


def is_error(err: Any) -> bool:
    """True when a continuation argument carries an error (not a sentinel)."""
    if isinstance(err, str) and err in ("route", "router"):
        return False
    return has_value(err)


def compile_path(
    path: Any, *, end: bool, case_sensitive: bool = False, strict: bool = False
) -> List[Pattern]:
    """Compile a path specifier into the regular expressions it stands for.

    Strings support ``:name`` segments and ``*`` wildcards; compiled patterns
    are used as-is; lists and tuples contribute every element.
    """
    if isinstance(path, (list, tuple)):
        compiled: List[Pattern] = []
        for item in path:
            compiled.extend(
                compile_path(item, end=end, case_sensitive=case_sensitive, strict=strict)
            )
        return compiled
    if isinstance(path, re.Pattern):
        return [path]
    if not isinstance(path, str):
        raise TypeError(f"Unsupported path specifier: {path!r}")

    source = ""
    pos = 0
    for match in _PARAM_RE.finditer(path):
        source += re.escape(path[pos : match.start()]).replace(r"\*", ".*")
        source += f"(?P<{match.group(1)}>[^/]+?)"
        pos = match.end()
    source += re.escape(path[pos:]).replace(r"\*", ".*")
    if not strict:
        source = source.rstrip("/")
    if end:
        source = f"^{source}/?$" if not strict else f"^{source}$"
    else:
        source = f"^{source}(?=/|$)"
    flags = 0 if case_sensitive else re.IGNORECASE
    return [re.compile(source, flags)]


@dataclass
class PathMatch:
    """Result of matching a layer against a request path."""

    path: str
    params: Dict[Any, str] = field(default_factory=dict)


class Layer:
    """One handler bound to a path specifier."""

    def __init__(
        self,
        path: Any,
        handle: Callable,
        *,
        end: bool,
        case_sensitive: bool = False,
        strict: bool = False,
    ) -> None:
        self.path_spec = path
        self.handle = handle
        self.method: Optional[str] = None
        self.route: Any = None
        self._patterns = compile_path(
            path, end=end, case_sensitive=case_sensitive, strict=strict
        )

    @property
    def name(self) -> str:
        return getattr(self.handle, "__name__", type(self.handle).__name__)

    def match(self, path: str) -> Optional[PathMatch]:
        for pattern in self._patterns:
            found = pattern.search(path)
            if found is None:
                continue
            named = {k: v for k, v in found.groupdict().items() if v is not None}
            if named or pattern.groupindex:
                return PathMatch(found.group(0), named)
            return PathMatch(found.group(0), dict(enumerate(found.groups())))
        return None

    def handle_error(self, error: Any, req: Any, res: Any, next: Callable) -> None:
        if positional_arity(self.handle) != 4:
            next(error)
            return
        try:
            self.handle(error, req, res, next)
        except Exception as exc:
            next(exc)

    def handle_request(self, req: Any, res: Any, next: Callable) -> None:
        if positional_arity(self.handle) > 3:
            next()
            return
        try:
            self.handle(*fit_arguments(self.handle, (req, res, next)))
        except Exception as exc:
            next(exc)

    def __repr__(self) -> str:
        return f"Layer({self.path_spec!r}, {self.name})"


def split_layer_args(args: Tuple[Any, ...]) -> Tuple[Any, Tuple[Any, ...]]:
    """Split ``use``-style arguments into ``(path, handlers)`` (path defaults to ``/``)."""
    if args and not callable(args[0]):
        return args[0], args[1:]
    return "/", args
