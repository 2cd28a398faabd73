import asyncio

import pytest

from cardo.client import PollingTask
from cardo.errors import NetworkError


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        PollingTask("bad", lambda: None, 0)


def test_periodic_ticks_keep_fixed_phase() -> None:
    async def scenario() -> list[float]:
        loop = asyncio.get_running_loop()
        started: list[float] = []

        async def fetch() -> int:
            started.append(loop.time())
            await asyncio.sleep(0.03)
            return len(started)

        task = PollingTask("phase", fetch, 0.1)
        task.start()
        await asyncio.sleep(0.45)
        await task.stop()
        return started

    started = asyncio.run(scenario())

    assert len(started) >= 4
    for index, moment in enumerate(started):
        # Slow fetches must not push later ticks back.
        assert moment - started[0] == pytest.approx(index * 0.1, abs=0.04)


def test_tick_skipped_while_fetch_in_flight() -> None:
    async def scenario() -> tuple[int, int]:
        release = asyncio.Event()
        calls = 0

        async def fetch() -> None:
            nonlocal calls
            calls += 1
            await release.wait()

        task = PollingTask("slow", fetch, 0.02)
        task.start()
        await asyncio.sleep(0.15)
        skipped = task.skipped_ticks
        release.set()
        await task.stop()
        return calls, skipped

    calls, skipped = asyncio.run(scenario())

    assert calls == 1
    assert skipped >= 3


def test_manual_refresh_runs_even_when_periodic_fetch_in_flight() -> None:
    async def scenario() -> list[int]:
        results: list[int] = []
        release = asyncio.Event()
        calls = 0

        async def fetch() -> int:
            nonlocal calls
            calls += 1
            number = calls
            if number == 1:
                await release.wait()
            return number

        task = PollingTask("items", fetch, 60, on_result=results.append)
        task.start()
        await asyncio.sleep(0.01)
        assert task.in_flight

        outcome = await task.refresh()
        assert outcome.ok and outcome.applied

        release.set()
        await asyncio.sleep(0.01)
        await task.stop()
        return results

    # The periodic fetch started first but finished last, so it is discarded.
    assert asyncio.run(scenario()) == [2]


def test_older_fetch_never_overwrites_newer_result() -> None:
    async def scenario() -> tuple[list[str], list[bool]]:
        results: list[str] = []
        gates = {"first": asyncio.Event(), "second": asyncio.Event()}
        order = iter(["first", "second"])

        async def fetch() -> str:
            name = next(order)
            await gates[name].wait()
            return name

        task = PollingTask("items", fetch, 60, on_result=results.append)
        first = asyncio.create_task(task.refresh())
        second = asyncio.create_task(task.refresh())
        await asyncio.sleep(0)
        gates["second"].set()
        second_outcome = await second
        gates["first"].set()
        first_outcome = await first
        return results, [first_outcome.applied, second_outcome.applied]

    results, applied = asyncio.run(scenario())

    assert results == ["second"]
    assert applied == [False, True]


def test_failure_marks_stale_and_success_clears_it() -> None:
    async def scenario() -> None:
        attempts = 0
        errors: list[Exception] = []

        async def fetch() -> str:
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                raise NetworkError("connection refused")
            return "ok"

        task = PollingTask("flaky", fetch, 60, on_error=errors.append)

        failed = await task.refresh()
        assert not failed.ok
        assert isinstance(failed.error, NetworkError)
        assert task.stale and errors == [failed.error]

        recovered = await task.refresh()
        assert recovered.ok
        assert not task.stale
        assert task.last_success_at is not None

    asyncio.run(scenario())


def test_stop_cancels_in_flight_fetch() -> None:
    async def scenario() -> bool:
        cancelled = False

        async def fetch() -> None:
            nonlocal cancelled
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled = True
                raise

        task = PollingTask("hang", fetch, 60)
        task.start()
        await asyncio.sleep(0.01)
        await task.stop()
        assert not task.running
        return cancelled

    assert asyncio.run(scenario()) is True


def test_superseded_failure_does_not_mark_stale() -> None:
    async def scenario() -> None:
        results: list[str] = []
        errors: list[Exception] = []
        gates = {"first": asyncio.Event(), "second": asyncio.Event()}
        order = iter(["first", "second"])

        async def fetch() -> str:
            name = next(order)
            await gates[name].wait()
            if name == "first":
                raise NetworkError("connection reset")
            return name

        task = PollingTask("items", fetch, 60, on_result=results.append, on_error=errors.append)
        first = asyncio.create_task(task.refresh())
        second = asyncio.create_task(task.refresh())
        await asyncio.sleep(0)
        gates["second"].set()
        assert (await second).applied
        gates["first"].set()
        late = await first

        assert not late.ok
        assert results == ["second"]
        assert errors == []
        assert not task.stale
        assert task.last_error is None

    asyncio.run(scenario())
