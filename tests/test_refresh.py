import asyncio

import pytest

from biobin.control.refresh import UNEXPECTED_ERROR, RefreshController
from biobin.core.errors import MalformedDataError, TransportError
from biobin.core.schemas import ViewStatus


def test_later_request_wins_over_slow_earlier_one():
    applied = []
    delays = {"A": 0.2, "B": 0.05}

    async def fetch(tag):
        await asyncio.sleep(delays[tag])
        return tag

    async def scenario():
        ctl = RefreshController("race", fetch, applied.append)
        ctl.trigger("A")
        await asyncio.sleep(0.1)
        ctl.trigger("B")
        await asyncio.sleep(0.2)
        await ctl.wait()
        return ctl

    ctl = asyncio.run(scenario())
    assert applied == ["B"]
    assert ctl.status == ViewStatus.ready
    assert ctl.sequence == 2


def test_stale_result_is_discarded_when_it_arrives():
    applied = []

    async def fetch(tag, delay):
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            # a request that finishes anyway after being superseded
            pass
        return tag

    async def scenario():
        ctl = RefreshController("stubborn", fetch, applied.append)
        ctl.trigger("A", 0.2)
        await asyncio.sleep(0.05)
        ctl.trigger("B", 0.05)
        await asyncio.sleep(0.15)
        await ctl.wait()

    asyncio.run(scenario())
    assert applied == ["B"]


def test_failure_keeps_previous_data():
    state = {"records": None}
    outcomes = [["r1", "r2"], TransportError("connection refused")]

    async def fetch():
        result = outcomes.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    def apply(records):
        state["records"] = records

    async def scenario():
        ctl = RefreshController("live", fetch, apply)
        ctl.trigger()
        await ctl.wait()
        assert ctl.status == ViewStatus.ready
        ctl.trigger()
        await ctl.wait()
        return ctl

    ctl = asyncio.run(scenario())
    assert ctl.status == ViewStatus.failed
    assert "connection refused" in ctl.error
    assert isinstance(ctl.last_error, TransportError)
    assert state["records"] == ["r1", "r2"]


def test_recovery_clears_the_error():
    outcomes = [MalformedDataError("not a list"), ["ok"]]

    async def fetch():
        result = outcomes.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    async def scenario():
        ctl = RefreshController("graph", fetch, lambda r: None)
        ctl.trigger()
        await ctl.wait()
        assert ctl.error == "Failed to load sensor data."
        ctl.trigger()
        await ctl.wait()
        return ctl

    ctl = asyncio.run(scenario())
    assert ctl.status == ViewStatus.ready
    assert ctl.error is None
    assert ctl.updated_at is not None


def test_unexpected_errors_stay_inside_the_view():
    async def fetch():
        raise KeyError("boom")

    async def scenario():
        ctl = RefreshController("graph", fetch, lambda r: None)
        ctl.trigger()
        await ctl.wait()
        return ctl

    ctl = asyncio.run(scenario())
    assert ctl.status == ViewStatus.failed
    assert ctl.error == UNEXPECTED_ERROR


def test_status_goes_idle_loading_ready():
    seen = []

    async def fetch():
        await asyncio.sleep(0)
        return 1

    async def scenario():
        ctl = RefreshController("v", fetch, lambda r: None)
        seen.append(ctl.status)
        ctl.subscribe(lambda c: seen.append(c.status))
        ctl.trigger()
        await ctl.wait()

    asyncio.run(scenario())
    assert seen == [ViewStatus.idle, ViewStatus.loading, ViewStatus.ready]


def test_close_ignores_late_results_and_refuses_new_triggers():
    applied = []

    async def fetch():
        await asyncio.sleep(0.05)
        return "late"

    async def scenario():
        ctl = RefreshController("v", fetch, applied.append)
        ctl.trigger()
        await asyncio.sleep(0.01)
        ctl.close()
        ctl.close()
        await asyncio.sleep(0.1)
        with pytest.raises(RuntimeError):
            ctl.trigger()
        return ctl

    ctl = asyncio.run(scenario())
    assert applied == []
    assert ctl.closed
    assert not ctl.in_flight


def test_polling_repeats_until_closed():
    calls = []

    async def fetch(tag):
        calls.append(tag)
        return tag

    async def scenario():
        ctl = RefreshController("live", fetch, lambda r: None)
        ctl.start_polling(0.05, "latest")
        ctl.start_polling(0.05, "latest")
        await asyncio.sleep(0.17)
        ctl.close()
        seen = len(calls)
        await asyncio.sleep(0.12)
        return ctl, seen

    ctl, seen = asyncio.run(scenario())
    assert seen >= 3
    assert len(calls) == seen
    assert set(calls) == {"latest"}
    assert not ctl.polling


def test_polling_period_must_be_positive():
    async def scenario():
        ctl = RefreshController("live", lambda: None, lambda r: None)
        with pytest.raises(ValueError):
            ctl.start_polling(0)

    asyncio.run(scenario())


def test_listeners_can_unsubscribe():
    seen = []

    async def fetch():
        return 1

    def listener(ctl):
        seen.append(ctl.status)

    async def scenario():
        ctl = RefreshController("v", fetch, lambda r: None)
        ctl.subscribe(listener)
        ctl.trigger()
        await ctl.wait()
        ctl.unsubscribe(listener)
        ctl.unsubscribe(listener)
        ctl.trigger()
        await ctl.wait()

    asyncio.run(scenario())
    assert seen == [ViewStatus.loading, ViewStatus.ready]
