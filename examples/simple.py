"""
Example mounting a CoRouter with generator and plain handlers on a dispatcher.

The ``/`` handler fetches ``/ping`` through the same app with ``call`` and
answers with what it got back. Run with ``python examples/simple.py``.
"""

from __future__ import annotations

import asyncio
import logging

from coroute import CoRouter, Dispatcher, call
from coroute.testing import TestClient

app = Dispatcher()
client = TestClient(app)

router = CoRouter().plug("logging")


def home(req, res):
    resp = yield call(client.get, "/ping")
    res.send(f"ping {resp.text}")


def ping(req, res):
    res.send("pong")


router.get("/", home)
router.get("/ping", ping)
app.use("/", router)


async def main() -> None:
    result = await client.get("/")
    print(result.status, result.text)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(name)s %(message)s")
    asyncio.run(main())
