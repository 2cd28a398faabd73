"""Polling Coordinator: fixed-phase periodic fetches with manual refresh."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RefreshOutcome:
    """Result of a manual refresh, used to drive success or error toasts."""

    ok: bool
    error: Optional[Exception] = None
    applied: bool = False


class PollingTask(Generic[T]):
    """Periodically fetch one data source and publish the newest result.

    Ticks stay on a fixed phase anchored at ``start()``. A tick is skipped
    while a fetch for this source is still in flight. ``refresh()`` always
    fetches. Each fetch gets a sequence number at initiation and its result
    is dropped when a later-initiated fetch already applied.
    """

    def __init__(
        self,
        name: str,
        fetch: Callable[[], Awaitable[T]],
        interval: float,
        *,
        on_result: Callable[[T], Any] | None = None,
        on_error: Callable[[Exception], Any] | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.name = name
        self.interval = interval
        self._fetch = fetch
        self._on_result = on_result
        self._on_error = on_error
        self._runner: asyncio.Task | None = None
        self._fetches: set[asyncio.Task] = set()
        self._in_flight = 0
        self._initiated = 0
        self._applied = 0
        self.stale = False
        self.last_error: Exception | None = None
        self.last_success_at: datetime | None = None
        self.skipped_ticks = 0

    @property
    def running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    @property
    def in_flight(self) -> bool:
        return self._in_flight > 0

    def start(self) -> None:
        if self.running:
            return
        self._runner = asyncio.get_running_loop().create_task(self._run(), name=f"poll:{self.name}")
        logger.debug(f"Polling '{self.name}' every {self.interval}s")

    async def stop(self) -> None:
        tasks = [task for task in (self._runner, *self._fetches) if task is not None]
        self._runner = None
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._fetches.clear()

    async def refresh(self) -> RefreshOutcome:
        """Fetch now, regardless of the periodic schedule."""
        return await self._execute(manual=True)

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        anchor = loop.time()
        tick = 0
        while True:
            delay = anchor + tick * self.interval - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
            elif tick:
                # Fell behind: resume on the next slot of the anchored phase.
                tick = int((loop.time() - anchor) // self.interval)
            tick += 1

            if self.in_flight:
                self.skipped_ticks += 1
                logger.debug(f"Skipping '{self.name}' tick, previous fetch still in flight")
                continue
            task = loop.create_task(self._execute(manual=False))
            self._fetches.add(task)
            task.add_done_callback(self._fetches.discard)

    async def _execute(self, *, manual: bool) -> RefreshOutcome:
        self._initiated += 1
        sequence = self._initiated
        self._in_flight += 1
        try:
            result = await self._fetch()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if sequence < self._applied:
                logger.debug(f"Ignoring failed '{self.name}' fetch #{sequence}, #{self._applied} already applied: {exc}")
                return RefreshOutcome(ok=False, error=exc)
            self.stale = True
            self.last_error = exc
            level = logging.INFO if manual else logging.WARNING
            logger.log(level, f"Fetching '{self.name}' failed: {exc}")
            if self._on_error is not None:
                self._on_error(exc)
            return RefreshOutcome(ok=False, error=exc)
        finally:
            self._in_flight -= 1

        if sequence < self._applied:
            logger.debug(f"Discarding '{self.name}' result #{sequence}, #{self._applied} already applied")
            return RefreshOutcome(ok=True, applied=False)

        self._applied = sequence
        self.stale = False
        self.last_error = None
        self.last_success_at = datetime.now(timezone.utc)
        if self._on_result is not None:
            self._on_result(result)
        return RefreshOutcome(ok=True, applied=True)
