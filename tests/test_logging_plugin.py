"""Tests for the logging plugin and plugin registration."""

import asyncio

import pytest
from pydantic import ValidationError

from coroute import CoRouter, Rejection, delay
from coroute.plugins import BasePlugin
from coroute.testing import TestClient


class DummyLogger:
    def __init__(self, has_handlers=True):
        self.records = []
        self._has_handlers = has_handlers

    def has_handlers(self):
        return self._has_handlers

    # Compatibility alias
    hasHandlers = has_handlers  # noqa: N815

    def info(self, message):
        self.records.append(message)


def hello(req, res):
    res.send("hi")


def quiet(req, res):
    res.send("shh")


async def drain():
    await asyncio.sleep(0.01)


@pytest.fixture
def logger():
    return DummyLogger()


def logged_router(logger, **config):
    router = CoRouter().plug("logging", **config)
    router.logging._logger = logger
    return router


@pytest.mark.asyncio
async def test_start_and_end_records(logger):
    router = logged_router(logger)
    router.get("/hello", hello)

    assert (await TestClient(router).get("/hello")).text == "hi"
    await drain()
    assert logger.records[0] == "hello start"
    assert logger.records[1].startswith("hello end (")
    assert logger.records[1].endswith(" ms)")


@pytest.mark.asyncio
async def test_generator_handler_is_timed_to_completion(logger):
    def slow(req, res):
        yield delay(20)
        res.send("late")

    router = logged_router(logger)
    router.get("/slow", slow)

    assert (await TestClient(router).get("/slow")).text == "late"
    await drain()
    elapsed = float(logger.records[-1].split("(")[1].split(" ")[0])
    assert elapsed >= 15


@pytest.mark.asyncio
async def test_flags_disable_before(logger):
    router = logged_router(logger, flags="before:off")
    router.get("/hello", hello)

    await TestClient(router).get("/hello")
    await drain()
    assert len(logger.records) == 1
    assert logger.records[0].startswith("hello end")


@pytest.mark.asyncio
async def test_per_handler_target_disables_plugin(logger):
    router = logged_router(logger)
    router.logging.configure(_target="quiet", enabled=False)
    router.get("/hello", hello)
    router.get("/quiet", quiet)

    client = TestClient(router)
    await client.get("/quiet")
    await client.get("/hello")
    await drain()
    assert logger.records
    assert all(record.startswith("hello") for record in logger.records)
    assert router.get_config("logging", "quiet")["enabled"] is False
    assert router.get_config("logging")["enabled"] is True


@pytest.mark.asyncio
async def test_plugin_attached_after_registration_still_applies(logger):
    router = CoRouter()
    router.get("/hello", hello)
    router.plug("logging")
    router.logging._logger = logger

    await TestClient(router).get("/hello")
    await drain()
    assert logger.records[0] == "hello start"


@pytest.mark.asyncio
async def test_rejection_is_logged(logger):
    def broken(req, res):
        raise RuntimeError("boom")

    router = logged_router(logger)
    router.get("/broken", broken)

    result = await TestClient(router).get("/broken")
    await drain()
    assert result.status == 500
    assert logger.records[-1] == "broken rejected: RuntimeError('boom')"


@pytest.mark.asyncio
async def test_print_sink_overrides_logger(logger, capsys):
    router = logged_router(logger, print=True)
    router.get("/hello", hello)

    await TestClient(router).get("/hello")
    await drain()
    captured = capsys.readouterr()
    assert logger.records == []
    assert "hello start" in captured.out and "hello end" in captured.out


@pytest.mark.asyncio
async def test_logger_without_handlers_falls_back_to_print(capsys):
    silent = DummyLogger(has_handlers=False)
    router = logged_router(silent)
    router.get("/hello", hello)

    await TestClient(router).get("/hello")
    await drain()
    assert silent.records == []
    assert "hello start" in capsys.readouterr().out


def test_configure_validates_option_types(logger):
    router = logged_router(logger)
    with pytest.raises(ValidationError):
        router.logging.configure(before={"not": "a bool"})


def test_unknown_plugin_rejected():
    with pytest.raises(ValueError, match="Unknown plugin"):
        CoRouter().plug("missing")
    with pytest.raises(TypeError, match="name string"):
        CoRouter().plug(object())


def test_register_plugin_validation():
    with pytest.raises(TypeError, match="BasePlugin subclass"):
        CoRouter.register_plugin(object)

    class Nameless(BasePlugin):
        pass

    with pytest.raises(ValueError, match="missing plugin_code"):
        CoRouter.register_plugin(Nameless)

    class Impostor(BasePlugin):
        plugin_code = "logging"

    with pytest.raises(ValueError, match="already registered"):
        CoRouter.register_plugin(Impostor)
    assert "logging" in CoRouter.available_plugins()


def test_plugin_attribute_access():
    router = CoRouter().plug("logging")
    assert router.logging.name == "logging"
    assert [p.name for p in router.iter_plugins()] == ["logging"]
    # plugging twice keeps a single instance
    router.plug("logging")
    assert len(router.iter_plugins()) == 1
    with pytest.raises(AttributeError, match="No plugin named 'cache'"):
        router.cache
    with pytest.raises(AttributeError):
        router.get_config("cache")


@pytest.mark.asyncio
async def test_rejection_logs_forwarded_reason(logger):
    def denied(req, res):
        raise Rejection("denied")

    def on_error(err, req, res, next):
        res.status(403).send(err)

    router = logged_router(logger)
    router.get("/denied", denied, on_error)

    assert (await TestClient(router).get("/denied")).status == 403
    await drain()
    assert "denied rejected: 'denied'" in logger.records
