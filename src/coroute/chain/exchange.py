"""Minimal request/response pair carried through a dispatch chain.

No parsing or serialization happens here: a :class:`Request` is a method and
a path; a :class:`Response` collects a status, headers and a text body, and
resolves its ``finished`` future when :meth:`Response.send` is called.
Both must be created while an event loop is running.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

__all__ = ["Request", "Response"]


class Request:
    """Incoming exchange as seen by handlers."""

    def __init__(
        self,
        method: str = "GET",
        url: str = "/",
        *,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.method = method.upper()
        self.url = url
        self.original_url = url
        self.base_url = ""
        self.params: Dict[Any, str] = {}
        self.headers: Dict[str, str] = dict(headers or {})
        self.route: Any = None

    @property
    def path(self) -> str:
        return self.url.split("?", 1)[0] or "/"

    def __repr__(self) -> str:
        return f"Request({self.method} {self.original_url})"


class Response:
    """Outgoing exchange; ``send()`` completes it exactly once."""

    def __init__(self) -> None:
        self.status_code = 200
        self.headers: Dict[str, str] = {}
        self.body: Optional[str] = None
        self.finished: "asyncio.Future[Response]" = asyncio.get_running_loop().create_future()

    @property
    def headers_sent(self) -> bool:
        return self.finished.done()

    @property
    def text(self) -> str:
        return self.body or ""

    def status(self, code: int) -> "Response":
        self.status_code = int(code)
        return self

    def set(self, name: str, value: str) -> "Response":
        self.headers[name] = value
        return self

    def send(self, body: Any = None) -> "Response":
        if self.headers_sent:
            raise RuntimeError("Cannot send a response twice")
        self.body = "" if body is None else str(body)
        self.finished.set_result(self)
        return self
