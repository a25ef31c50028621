"""Tests for fork_join."""
import asyncio

import pytest

from xaiflow.workflow.fork_join import fork_join


async def _value(v, delay=0.0):
    await asyncio.sleep(delay)
    return v


async def _fail(exc, delay=0.0):
    await asyncio.sleep(delay)
    raise exc


def test_all_succeed():
    outcome = asyncio.run(fork_join(_value(1, 0.02), _value(2)))
    assert outcome.ok
    assert outcome.results == (1, 2)
    assert outcome.errors == (None, None)
    assert outcome.completion_order == (1, 0)
    assert outcome.unwrap() == (1, 2)


def test_waits_for_every_operation_even_after_failure():
    """A failure does not cut the join short: the slow operation still completes."""
    finished = []

    async def slow():
        await asyncio.sleep(0.02)
        finished.append("slow")
        return "done"

    outcome = asyncio.run(fork_join(_fail(ValueError("fast")), slow()))
    assert not outcome.ok
    assert finished == ["slow"]
    assert outcome.results == (None, "done")
    assert outcome.failed() == [0]


def test_first_error_follows_completion_order():
    late = RuntimeError("late")
    early = KeyError("early")
    outcome = asyncio.run(fork_join(_fail(late, 0.03), _fail(early, 0.0)))
    assert outcome.first_error() is early
    with pytest.raises(KeyError):
        outcome.unwrap()


def test_no_operations():
    outcome = asyncio.run(fork_join())
    assert outcome.ok
    assert outcome.results == ()
    assert outcome.first_error() is None


def test_operations_start_together():
    """Both operations are started before either is awaited to completion."""
    started = []
    release = {}

    async def op(name):
        started.append(name)
        await release["event"].wait()
        return name

    async def scenario():
        release["event"] = asyncio.Event()
        join = asyncio.ensure_future(fork_join(op("a"), op("b")))
        for _ in range(5):
            await asyncio.sleep(0)
        assert started == ["a", "b"]
        release["event"].set()
        return await join

    assert asyncio.run(scenario()).results == ("a", "b")
