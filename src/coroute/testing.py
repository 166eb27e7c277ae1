"""Test client for coroute dispatchers.

Uses the same Request and Response types as the dispatch chain. A request
finishes when a handler calls ``res.send()`` or when the chain runs out:
a leftover error becomes a 500 response, a fall-through a 404.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict

from coroute.chain import Request, Response
from coroute.chain.layer import is_error

__all__ = ["Result", "TestClient"]


@dataclass(frozen=True)
class Result:
    """Snapshot of a finished response."""

    status: int
    text: str
    headers: Dict[str, str] = field(default_factory=dict)
    error: Any = None


class TestClient:
    """Drive a dispatcher in-process, one request at a time or concurrently."""

    __test__ = False

    def __init__(self, app: Any, *, timeout: float = 2.0) -> None:
        self.app = app
        self.timeout = timeout

    async def request(self, method: str, url: str, **headers: str) -> Result:
        req = Request(method, url, headers=headers)
        res = Response()
        leftover: Dict[str, Any] = {}

        def final(err: Any = None) -> None:
            if res.headers_sent:
                return
            if is_error(err):
                leftover["error"] = err
                res.status(getattr(err, "status", 500)).send(str(err))
            else:
                res.status(404).send(f"Cannot {req.method} {req.path}")

        self.app.handle(req, res, final)
        await asyncio.wait_for(asyncio.shield(res.finished), self.timeout)
        return Result(res.status_code, res.text, dict(res.headers), leftover.get("error"))

    async def get(self, url: str, **headers: str) -> Result:
        return await self.request("GET", url, **headers)

    async def post(self, url: str, **headers: str) -> Result:
        return await self.request("POST", url, **headers)

    async def put(self, url: str, **headers: str) -> Result:
        return await self.request("PUT", url, **headers)

    async def delete(self, url: str, **headers: str) -> Result:
        return await self.request("DELETE", url, **headers)
