"""Tests for arity classification, the handler adapter and outcome mapping."""

import asyncio

import pytest

from coroute import Rejection, RejectionWithoutReason, error_handler, handler, wrap_handler
from coroute.chain import positional_arity
from coroute.core import (
    ArityClass,
    apply_outcome,
    classify,
    find_continuation,
    rejection_reason,
)
from coroute.errors import HandlerTypeError


class Recorder:
    """Continuation stand-in recording every call."""

    def __init__(self):
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args)


async def settle():
    for _ in range(5):
        await asyncio.sleep(0)


# ----------------------------------------------------------------------
# Classification
# ----------------------------------------------------------------------


def test_classify_by_positional_count():
    def normal(req, res, next):
        pass

    def on_error(err, req, res, next):
        pass

    def short(req, res):
        pass

    def variadic(req, *args, **kwargs):
        pass

    assert classify(normal) is ArityClass.NORMAL
    assert classify(on_error) is ArityClass.ERROR
    assert classify(short) is ArityClass.NORMAL
    assert classify(variadic) is ArityClass.NORMAL


def test_classify_bound_methods_ignore_self():
    class Handlers:
        def on_error(self, err, req, res, next):
            pass

    assert classify(Handlers().on_error) is ArityClass.ERROR


def test_explicit_markers_override_shape():
    @error_handler
    async def report(err, req, res):
        pass

    @handler("normal")
    def four(req, res, next, value):
        pass

    assert classify(report) is ArityClass.ERROR
    assert classify(four) is ArityClass.NORMAL


def test_unknown_marker_kind_rejected():
    with pytest.raises(ValueError, match="Unknown handler kind"):
        handler("sometimes")


def test_uninspectable_callables_count_as_zero():
    assert positional_arity(print) == 0
    assert classify(print) is ArityClass.NORMAL


# ----------------------------------------------------------------------
# Wrapping
# ----------------------------------------------------------------------


def test_wrap_rejects_non_callables():
    with pytest.raises(HandlerTypeError, match="Expected a callback function but got a NoneType"):
        wrap_handler(None)
    with pytest.raises(TypeError, match="callback"):
        wrap_handler("not a function")


def test_wrapped_arity_matches_class():
    def short(req, res):
        pass

    def on_error(err, req, res, next):
        pass

    @error_handler
    def tagged(err, req):
        pass

    assert positional_arity(wrap_handler(short)) == 3
    assert positional_arity(wrap_handler(on_error)) == 4
    assert positional_arity(wrap_handler(tagged)) == 4


def test_wrapped_handler_keeps_identity_metadata():
    def load_user(req, res, next):
        """Load the user."""

    adapted = wrap_handler(load_user)
    assert adapted.__name__ == "load_user"
    assert adapted.__doc__ == "Load the user."
    assert adapted.raw_handler is load_user
    assert adapted.entry.arity is ArityClass.NORMAL


def test_find_continuation_skips_trailing_param_value():
    nxt = Recorder()
    assert find_continuation(("req", "res", nxt)) is nxt
    assert find_continuation(("req", "res", nxt, "42")) is nxt


# ----------------------------------------------------------------------
# Outcome mapping
# ----------------------------------------------------------------------


def test_apply_outcome_next_and_route():
    nxt = Recorder()
    apply_outcome("next", nxt)
    apply_outcome("route", nxt)
    assert nxt.calls == [(), ("route",)]


@pytest.mark.parametrize("value", [None, "something", {}, 0, ["next"], "NEXT"])
def test_apply_outcome_other_values_do_nothing(value):
    nxt = Recorder()
    apply_outcome(value, nxt)
    assert nxt.calls == []


def test_rejection_reason_passes_errors_and_values_through():
    err = ValueError("boom")
    assert rejection_reason(err) is err
    assert rejection_reason(Rejection("not found")) == "not found"


@pytest.mark.parametrize("reason", [None, 0, "", False, []])
def test_rejection_reason_synthesizes_for_falsy_reasons(reason):
    synthesized = rejection_reason(Rejection(reason))
    assert isinstance(synthesized, RejectionWithoutReason)
    assert "did not have a reason" in str(synthesized)


# ----------------------------------------------------------------------
# Invocation
# ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_adapter_returns_before_handler_settles():
    gate = asyncio.Event()

    async def slow(req, res):
        await gate.wait()
        return "next"

    nxt = Recorder()
    assert wrap_handler(slow)("req", "res", nxt) is None
    await settle()
    assert nxt.calls == []
    gate.set()
    await settle()
    assert nxt.calls == [()]


@pytest.mark.asyncio
async def test_adapter_forwards_exceptions():
    err = RuntimeError("boom")

    def broken(req, res, next):
        raise err

    nxt = Recorder()
    wrap_handler(broken)("req", "res", nxt)
    await settle()
    assert nxt.calls == [(err,)]


@pytest.mark.asyncio
async def test_adapter_synthesizes_reasonless_rejection():
    async def empty(req, res):
        raise Rejection()

    nxt = Recorder()
    wrap_handler(empty)("req", "res", nxt)
    await settle()
    (args,) = nxt.calls
    assert isinstance(args[0], RejectionWithoutReason)


@pytest.mark.asyncio
async def test_error_adapter_passes_error_through():
    seen = []

    def on_error(err, req, res, next):
        seen.append(err)
        return "next"

    nxt = Recorder()
    wrap_handler(on_error)("the error", "req", "res", nxt)
    await settle()
    assert seen == ["the error"]
    assert nxt.calls == [()]


@pytest.mark.asyncio
async def test_param_invocation_uses_continuation_before_value():
    seen = []

    def load(req, res, next, value):
        seen.append(value)
        return "next"

    nxt = Recorder()
    adapted = wrap_handler(load)
    # Four positional parameters classify as error-shaped; the trailing
    # string still locates the continuation.
    adapted("req", "res", nxt, "42")
    await settle()
    assert seen == ["42"]
    assert nxt.calls == [()]


@pytest.mark.asyncio
async def test_direct_continuation_and_resolved_next_both_fire():
    def eager(req, res, next):
        next()
        return "next"

    nxt = Recorder()
    wrap_handler(eager)("req", "res", nxt)
    await settle()
    assert nxt.calls == [(), ()]


@pytest.mark.asyncio
async def test_cancelled_drive_leaves_chain_idle():
    pending = asyncio.get_running_loop().create_future()

    def stuck(req, res):
        return pending

    nxt = Recorder()
    wrap_handler(stuck)("req", "res", nxt)
    pending.cancel()
    await settle()
    assert nxt.calls == []


# ----------------------------------------------------------------------
# Defaults, async generators and ambiguous rejection values
# ----------------------------------------------------------------------


class Ambiguous:
    """Value whose truth test raises, like an array with several elements."""

    def __bool__(self):
        raise ValueError("truth value is ambiguous")


def test_defaulted_parameters_do_not_count():
    def mw(req, res, next, extra=None):
        pass

    def on_error(err, req, res, next, extra=None):
        pass

    assert positional_arity(mw) == 3
    assert classify(mw) is ArityClass.NORMAL
    assert classify(on_error) is ArityClass.ERROR


def test_wrap_rejects_async_generator_functions():
    async def stream(req, res):
        yield None

    with pytest.raises(HandlerTypeError, match="async generator function 'stream'"):
        wrap_handler(stream)


def test_rejection_reason_with_ambiguous_truth_value():
    value = Ambiguous()
    assert rejection_reason(Rejection(value)) is value


@pytest.mark.asyncio
async def test_adapter_forwards_ambiguous_rejection_value():
    value = Ambiguous()

    async def refuse(req, res):
        raise Rejection(value)

    nxt = Recorder()
    wrap_handler(refuse)("req", "res", nxt)
    await settle()
    assert nxt.calls == [(value,)]
