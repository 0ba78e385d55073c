# mintgate/clock.py
import asyncio
import contextlib
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Awaitable, Callable, Optional

from .chain import rpc
from .config import COUNTDOWN_INTERVAL, ORACLE_INTERVAL, RPC_TIMEOUT, WAIT_POLL_INTERVAL
from .models import ProviderHandle
from .util import get_logger, on_error, utc_now
log = get_logger()


class MonitorHandle:
    """Owns the background polling task started by TimeOracle.start_monitoring."""

    def __init__(self, task: "asyncio.Task[None]"):
        self._task = task

    @property
    def running(self) -> bool:
        return not self._task.done()

    async def stop(self) -> None:
        if self._task.done():
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task


class TimeOracle:
    """
    Chain-time estimate built from the latest block timestamp.

    A block timestamp is always at or behind the chain's real time, so the
    skew kept here is the largest lead of block time over the local clock
    seen so far. Until the first successful poll the local clock is used as is.
    """

    def __init__(self, provider: ProviderHandle, timeout: float = RPC_TIMEOUT,
                 local_now: Callable[[], datetime] = utc_now):
        self.provider = provider
        self.timeout = timeout
        self._local_now = local_now
        self.skew: Optional[timedelta] = None
        self.last_block: Optional[int] = None

    def current_reference_time(self) -> datetime:
        now = self._local_now()
        return now + self.skew if self.skew is not None else now

    async def poll_once(self) -> datetime:
        block = await rpc(self.provider.w3.eth.get_block("latest"), self.timeout, "get_block latest")
        observed = self._local_now()
        block_time = datetime.fromtimestamp(int(block["timestamp"]), tz=timezone.utc)
        lead = block_time - observed
        if self.skew is None or lead > self.skew:
            self.skew = lead
        self.last_block = int(block["number"])
        log.info(
            f"Latest block: #{self.last_block}, Block time: {block_time.isoformat()}, "
            f"skew {self.skew.total_seconds():+.3f}s"
        )
        return block_time

    async def _monitor(self, interval: float) -> None:
        while True:
            try:
                await self.poll_once()
            except Exception as e:
                # transient: next tick retries
                on_error(log, "Error fetching latest block", e)
            await asyncio.sleep(interval)

    def start_monitoring(self, interval: float = ORACLE_INTERVAL) -> MonitorHandle:
        return MonitorHandle(asyncio.create_task(self._monitor(interval), name="time-oracle"))

    @contextlib.asynccontextmanager
    async def monitoring(self, interval: float = ORACLE_INTERVAL) -> AsyncIterator[MonitorHandle]:
        handle = self.start_monitoring(interval)
        try:
            yield handle
        finally:
            await handle.stop()


def _fmt_left(left: timedelta) -> str:
    secs = max(0, int(left.total_seconds()))
    hours, rem = divmod(secs, 3600)
    minutes, seconds = divmod(rem, 60)
    return f"{hours} hour(s), {minutes} minute(s), and {seconds} second(s)"


class Scheduler:
    """Blocks the dispatch flow until a target instant, logging a countdown."""

    def __init__(
        self,
        now: Callable[[], datetime] = utc_now,
        poll_interval: float = WAIT_POLL_INTERVAL,
        countdown_interval: float = COUNTDOWN_INTERVAL,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._now = now
        self.poll_interval = poll_interval
        self.countdown_interval = countdown_interval
        self._sleep = sleep

    async def wait_until(self, target: datetime) -> None:
        now = self._now()
        if now >= target:
            log.info(f"Target time {target.isoformat()} already passed, not waiting")
            return

        log.info(f"Waiting started, target {target.isoformat()}")
        last_report: Optional[datetime] = None
        while now < target:
            left = target - now
            if last_report is None or (now - last_report).total_seconds() >= self.countdown_interval:
                log.info(f"Waiting until {target.isoformat()} - Time left: {_fmt_left(left)}")
                last_report = now
            # never sleep past the target by more than one tick
            await self._sleep(min(self.poll_interval, left.total_seconds()))
            now = self._now()
        log.info("Target time reached!")
