import asyncio
from datetime import datetime, timezone

from loguru import logger

from announcement_monitor.config.loader import MonitorConfig
from announcement_monitor.core.models import Announcement, SourceSemanticError
from announcement_monitor.supervisor import Supervisor, UnitEventKind


class TickingAdapter:
    """Records the loop time of every fetch; optionally slow and/or failing"""

    def __init__(self, name, fail=False, delay=0.0):
        self._name = name
        self.fail = fail
        self.delay = delay
        self.ticks = []

    def name(self):
        return self._name

    async def fetch(self):
        self.ticks.append(asyncio.get_running_loop().time())
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise SourceSemanticError(self._name, "maintenance")

        return [Announcement(
            id=str(len(self.ticks)),
            title="New Listing: Foobar (FOO)",
            content="",
            url="https://example.com",
            exchange=self._name,
            published_at=datetime.now(timezone.utc),
        ).analyze()]


def drain(queue):
    events = []
    while not queue.empty():
        events.append(queue.get_nowait())
    return events


def gaps(ticks):
    return [b - a for a, b in zip(ticks, ticks[1:])]


def test_failing_unit_does_not_delay_healthy_unit():
    interval = 0.05
    healthy = TickingAdapter("Healthy")
    broken = TickingAdapter("Broken", fail=True, delay=0.12)

    async def _run():
        supervisor = Supervisor(MonitorConfig(default_poll_interval=interval), adapters=[healthy, broken])
        await supervisor.start()
        await asyncio.sleep(0.6)
        await supervisor.cleanup()
        return drain(supervisor.events)

    events = asyncio.run(_run())

    assert len(healthy.ticks) >= 6
    assert max(gaps(healthy.ticks)) < interval + 0.1
    # Overrunning ticks fire again right away instead of waiting a full interval
    assert len(broken.ticks) >= 3
    assert max(gaps(broken.ticks)) < 0.12 + 0.1

    errors = [e for e in events if e.kind is UnitEventKind.ERROR]
    assert {e.exchange for e in errors} == {"Broken"}
    assert all(isinstance(e.error, SourceSemanticError) for e in errors)
    assert {e.exchange for e in events if e.kind is UnitEventKind.STARTED} == {"Healthy", "Broken"}
    assert not [e for e in events if e.kind is UnitEventKind.TERMINATED]


def test_first_tick_immediate_then_fixed_rate():
    delays = []

    async def stop_after_two(delay):
        delays.append(delay)
        if len(delays) == 2:
            raise RuntimeError("stop")

    adapter = TickingAdapter("Solo")

    async def _run():
        supervisor = Supervisor(MonitorConfig(default_poll_interval=10), adapters=[adapter], sleep=stop_after_two)
        await asyncio.wait_for(supervisor.run(), timeout=2)

    asyncio.run(_run())

    assert len(adapter.ticks) == 2
    # The fake sleep returns at once, so the second tick is due two intervals after the start
    assert 9 < delays[0] <= 10
    assert 19 < delays[1] <= 20


def test_overrun_fires_next_tick_immediately():
    delays = []

    async def stop_after_three(delay):
        delays.append(delay)
        if len(delays) == 3:
            raise RuntimeError("stop")

    adapter = TickingAdapter("Slow", delay=0.03)

    async def _run():
        supervisor = Supervisor(MonitorConfig(default_poll_interval=0.01), adapters=[adapter], sleep=stop_after_three)
        await asyncio.wait_for(supervisor.run(), timeout=2)

    asyncio.run(_run())

    assert delays == [0, 0, 0]


def test_crashed_unit_reports_terminated():
    async def broken_sleep(delay):
        raise RuntimeError("clock broke")

    adapter = TickingAdapter("Crashy")

    async def _run():
        supervisor = Supervisor(MonitorConfig(default_poll_interval=1), adapters=[adapter], sleep=broken_sleep)
        await supervisor.start()
        events = [await asyncio.wait_for(supervisor.events.get(), timeout=1) for _ in range(2)]
        await supervisor.cleanup()
        return events

    started, terminated = asyncio.run(_run())

    assert started.kind is UnitEventKind.STARTED
    assert started.interval == 1
    assert terminated.kind is UnitEventKind.TERMINATED
    assert terminated.exchange == "Crashy"
    assert isinstance(terminated.error, RuntimeError)


def test_run_returns_once_every_unit_terminated():
    async def broken_sleep(delay):
        raise RuntimeError("clock broke")

    adapters = [TickingAdapter("A"), TickingAdapter("B", fail=True)]

    async def _run():
        supervisor = Supervisor(MonitorConfig(default_poll_interval=1), adapters=adapters, sleep=broken_sleep)
        await asyncio.wait_for(supervisor.run(), timeout=2)

    asyncio.run(_run())

    assert [len(a.ticks) for a in adapters] == [1, 1]


def test_per_exchange_intervals_and_allow_list():
    config = MonitorConfig(
        default_poll_interval=300,
        exchange_intervals={"binance": 60},
        enabled_exchanges=["Binance", "gate.io", "nasdaq"],
    )

    async def _run():
        supervisor = Supervisor(config)
        units = {name: unit.interval for name, unit in supervisor.units.items()}
        clients = [unit.http_client for unit in supervisor.units.values()]
        await supervisor.cleanup()
        return units, clients

    units, clients = asyncio.run(_run())

    assert units == {"Binance": 60, "Gate.io": 300}
    assert all(client is not None for client in clients)
    assert clients[0] is not clients[1]


def test_no_units_returns_immediately():
    supervisor = Supervisor(MonitorConfig(), adapters=[])

    asyncio.run(asyncio.wait_for(supervisor.run(), timeout=1))


class ScriptedAdapter:
    """Returns the scripted outcomes in order, raising the exceptions"""

    def __init__(self, name, *outcomes):
        self._name = name
        self.outcomes = list(outcomes)

    def name(self):
        return self._name

    async def fetch(self):
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _announcement(title, url):
    return Announcement(
        id=url,
        title=title,
        content="",
        url=url,
        exchange="Scripted",
        published_at=datetime.now(timezone.utc),
    ).analyze()


def test_tick_report_and_error_are_logged():
    records = []
    sink_id = logger.add(lambda message: records.append(message.record), format="{message}")

    delays = []

    async def stop_after_two(delay):
        delays.append(delay)
        if len(delays) == 2:
            raise RuntimeError("stop")

    adapter = ScriptedAdapter(
        "Scripted",
        [
            _announcement("New Listing: Foobar (FOO)", "https://example.com/foo"),
            _announcement("Scheduled maintenance", "https://example.com/maintenance"),
        ],
        SourceSemanticError("Scripted", "maintenance window"),
    )

    async def _run():
        supervisor = Supervisor(MonitorConfig(default_poll_interval=1), adapters=[adapter], sleep=stop_after_two)
        await asyncio.wait_for(supervisor.run(), timeout=2)

    try:
        asyncio.run(_run())
    finally:
        logger.remove(sink_id)

    messages = [record["message"] for record in records]

    assert any(m.startswith("Retrieved 2 announcements from Scripted, 1 are new listings") for m in messages)
    assert "✅ New Listing: Foobar (FOO) | tokens: FOO | https://example.com/foo" in messages
    assert not any("Scheduled maintenance" in m for m in messages)
    assert "❌ Scripted error: Scripted API returned error: maintenance window" in messages

    report = next(r for r in records if r["message"].startswith("Retrieved"))
    assert report["extra"]["exchange"] == "Scripted"
