"""Tests para mis_canchas/utils/sync_poller.py"""
import pytest

from mis_canchas.utils.sync_poller import SyncPoller


class FakeClock:
    """Sleep inyectable que solo registra los intervalos pedidos."""

    def __init__(self, on_sleep=None) -> None:
        self.sleeps = []
        self._on_sleep = on_sleep

    async def __call__(self, seconds):
        self.sleeps.append(seconds)
        if self._on_sleep:
            self._on_sleep(len(self.sleeps))


def test_interval_must_be_positive():
    async def fetch():
        return None

    with pytest.raises(ValueError):
        SyncPoller(fetch, 0)


@pytest.mark.asyncio
async def test_polls_every_interval_while_condition_holds():
    register = {"status": "open"}
    calls = []

    async def fetch():
        calls.append(len(calls) + 1)
        if len(calls) == 3:
            register["status"] = "closed"

    clock = FakeClock()
    poller = SyncPoller(
        fetch,
        30,
        should_continue=lambda: register["status"] == "open",
        sleep=clock,
    )

    await poller.run()

    assert calls == [1, 2, 3]
    assert clock.sleeps == [30, 30, 30]
    assert poller.ticks == 3
    assert poller.is_running is False


@pytest.mark.asyncio
async def test_stops_within_one_tick_after_close():
    """Si la caja se cierra durante la espera no se hace otra consulta."""
    register = {"status": "open"}
    calls = []

    async def fetch():
        calls.append(1)

    def close_on_second_sleep(count):
        if count == 2:
            register["status"] = "closed"

    poller = SyncPoller(
        fetch,
        30,
        should_continue=lambda: register["status"] == "open",
        sleep=FakeClock(close_on_second_sleep),
    )

    await poller.run()

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_does_not_start_when_condition_false():
    calls = []

    async def fetch():
        calls.append(1)

    clock = FakeClock()
    poller = SyncPoller(fetch, 30, should_continue=lambda: False, sleep=clock)

    await poller.run()

    assert calls == []
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_fetch_errors_are_swallowed_and_retried():
    attempts = []

    async def fetch():
        attempts.append(1)
        if len(attempts) < 3:
            raise RuntimeError("red caida")

    poller = SyncPoller(
        fetch,
        60,
        should_continue=lambda: len(attempts) < 3,
        sleep=FakeClock(),
    )

    await poller.run()

    assert len(attempts) == 3
    assert poller.failures == 2


@pytest.mark.asyncio
async def test_stop_ends_loop_at_next_check():
    calls = []
    poller = None

    async def fetch():
        calls.append(1)
        poller.stop()

    poller = SyncPoller(fetch, 30, sleep=FakeClock())

    await poller.run()

    assert calls == [1]


@pytest.mark.asyncio
async def test_reentrant_run_is_ignored():
    calls = []
    poller = None

    async def fetch():
        calls.append(1)
        # Un segundo run mientras el primero sigue activo no arranca otro bucle
        await poller.run()
        poller.stop()

    poller = SyncPoller(fetch, 30, sleep=FakeClock())

    await poller.run()

    assert calls == [1]
