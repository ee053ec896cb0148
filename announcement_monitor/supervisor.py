import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

from loguru import logger

from announcement_monitor.config.loader import MonitorConfig
from announcement_monitor.core.http_client import HttpClient
from announcement_monitor.core.models import Announcement
from announcement_monitor.core.proxy_manager import ProxyRotator
from announcement_monitor.core.retry import Sleep
from announcement_monitor.exchanges.base import SourceAdapter
from announcement_monitor.exchanges.factory import ExchangeFactory


class UnitEventKind(Enum):
    STARTED = "started"
    ERROR = "error"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class UnitEvent:
    """Lifecycle message published by an exchange loop to its supervisor"""
    kind: UnitEventKind
    exchange: str
    error: Optional[BaseException] = None
    interval: Optional[float] = None


@dataclass
class SourceTask:
    adapter: SourceAdapter
    interval: float
    http_client: Optional[HttpClient] = None
    task: Optional[asyncio.Task] = None

    @property
    def name(self) -> str:
        return self.adapter.name()


class Supervisor:
    """
    Runs one independent polling loop per enabled exchange.

    Ticks are fixed-rate: the first fires immediately, the k-th at
    ``start + k * interval``. A fetch that overruns its interval makes the
    next tick fire at once; missed ticks are dropped, never replayed. A tick
    failure is reported as an ERROR event and the loop carries on. Anything
    escaping the loop itself ends that unit with a TERMINATED event; it is
    not restarted.
    """

    def __init__(
            self,
            config: MonitorConfig,
            rotator: Optional[ProxyRotator] = None,
            adapters: Optional[Sequence[SourceAdapter]] = None,
            sleep: Sleep = asyncio.sleep
    ):
        self.config = config
        self.rotator = rotator or ProxyRotator()
        self._sleep = sleep
        self._log = logger.bind(component="supervisor")
        self._events: asyncio.Queue = asyncio.Queue()
        self.units: Dict[str, SourceTask] = {}

        if adapters is None:
            self._init_scrapers()
        else:
            for adapter in adapters:
                self._add_unit(adapter)

    def _init_scrapers(self):
        """Initialize exchange scrapers with isolated HTTP clients"""
        for name in self.config.enabled_exchanges:
            if not ExchangeFactory.is_known(name):
                self._log.warning(f"Unknown exchange '{name}' ignored, available: {', '.join(ExchangeFactory.available())}")

        for name in ExchangeFactory.available():
            if not self.config.should_monitor(name):
                continue

            # Dedicated HTTP client for this exchange
            http_client = HttpClient(self.rotator, name, timeout=self.config.request_timeout)
            scraper = ExchangeFactory.create(name, http_client)
            self._add_unit(scraper, http_client)

    def _add_unit(self, adapter: SourceAdapter, http_client: Optional[HttpClient] = None):
        name = adapter.name()
        if name in self.units:
            raise ValueError(f"Duplicate exchange unit: {name}")

        self.units[name] = SourceTask(
            adapter=adapter,
            interval=self.config.get_polling_interval(name),
            http_client=http_client,
        )

    @property
    def events(self) -> asyncio.Queue:
        return self._events

    async def start(self):
        """Start one task per unit"""
        for name, unit in self.units.items():
            if unit.task is None:
                unit.task = asyncio.create_task(self._run_unit(unit), name=f"exchange_{name}")

    async def run(self):
        """Start every unit and watch lifecycle events until all of them terminate"""
        if not self.units:
            self._log.warning("No exchanges enabled, nothing to monitor")
            return

        await self.start()
        self._log.info(f"Monitoring {len(self.units)} exchanges: {', '.join(self.units)}")

        active = len(self.units)
        while active:
            event = await self._events.get()
            self._handle_event(event)
            if event.kind is UnitEventKind.TERMINATED:
                active -= 1

        self._log.warning("All exchange loops have terminated")

    def _handle_event(self, event: UnitEvent):
        if event.kind is UnitEventKind.STARTED:
            self._log.info(f"Starting {event.exchange} loop with {event.interval}s interval")
        elif event.kind is UnitEventKind.ERROR:
            self._log.error(f"❌ {event.exchange} error: {event.error}")
        elif event.error is not None:
            self._log.critical(f"{event.exchange} loop crashed and will not be restarted: {event.error!r}")
        else:
            self._log.critical(f"{event.exchange} loop exited unexpectedly")

    async def _run_unit(self, unit: SourceTask):
        try:
            await self._exchange_loop(unit)
        except Exception as e:
            await self._events.put(UnitEvent(UnitEventKind.TERMINATED, unit.name, error=e))
        else:
            await self._events.put(UnitEvent(UnitEventKind.TERMINATED, unit.name))

    async def _exchange_loop(self, unit: SourceTask):
        """Independent loop for a single exchange"""
        loop = asyncio.get_running_loop()
        name = unit.name

        await self._events.put(UnitEvent(UnitEventKind.STARTED, name, interval=unit.interval))

        next_tick = loop.time()
        while True:
            start_time = loop.time()
            try:
                announcements = await unit.adapter.fetch()
                self._report(name, announcements, loop.time() - start_time)
            except Exception as e:
                await self._events.put(UnitEvent(UnitEventKind.ERROR, name, error=e))

            next_tick += unit.interval
            now = loop.time()
            if next_tick < now:
                # Overran: fire now, drop the missed ticks
                next_tick = now

            await self._sleep(next_tick - now)

    def _report(self, name: str, announcements: List[Announcement], process_time: float):
        listings = [ann for ann in announcements if ann.is_new_listing]

        log = self._log.bind(exchange=name)
        log.info(
            f"Retrieved {len(announcements)} announcements from {name}, "
            f"{len(listings)} are new listings ({process_time:.2f}s)"
        )
        for ann in listings:
            tokens = ", ".join(ann.token_symbols) or "-"
            log.info(f"✅ {ann.title} | tokens: {tokens} | {ann.url}")

    async def cleanup(self):
        """Cleanup resources"""
        # Cancel all exchange tasks
        for name, unit in self.units.items():
            if unit.task is None:
                continue
            unit.task.cancel()
            try:
                await unit.task
            except asyncio.CancelledError:
                self._log.debug(f"Cancelled {name} task")

        # Close HTTP clients
        for unit in self.units.values():
            if unit.http_client is not None:
                await unit.http_client.close()

        self._log.info("Cleanup complete")
