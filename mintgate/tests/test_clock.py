"""Scheduler gate and chain-time oracle behaviour on simulated clocks."""

import asyncio
import unittest
from datetime import datetime, timedelta, timezone

import aiohttp

from mintgate.clock import Scheduler, TimeOracle
from mintgate.errors import ProviderUnavailable
from mintgate.tests.fakes import FakeClock, handle

T0 = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def _block(number: int, at: datetime) -> dict:
    return {"number": number, "timestamp": int(at.timestamp())}


class SchedulerTests(unittest.IsolatedAsyncioTestCase):
    async def test_past_target_returns_without_sleeping(self) -> None:
        clock = FakeClock(T0)
        scheduler = Scheduler(now=clock.now, sleep=clock.sleep)
        await scheduler.wait_until(T0 - timedelta(seconds=30))
        await scheduler.wait_until(T0)
        self.assertEqual(clock.sleeps, [])

    async def test_resumes_within_one_tick_of_target_never_before(self) -> None:
        clock = FakeClock(T0)
        target = T0 + timedelta(seconds=10)
        scheduler = Scheduler(now=clock.now, sleep=clock.sleep, poll_interval=0.1, countdown_interval=10)
        await scheduler.wait_until(target)
        self.assertGreaterEqual(clock.now(), target)
        self.assertLessEqual(clock.now() - target, timedelta(seconds=0.1))
        self.assertTrue(all(s <= 0.1 for s in clock.sleeps))

    async def test_uneven_tick_does_not_overshoot(self) -> None:
        clock = FakeClock(T0)
        target = T0 + timedelta(seconds=1.05)
        scheduler = Scheduler(now=clock.now, sleep=clock.sleep, poll_interval=0.25)
        await scheduler.wait_until(target)
        self.assertEqual(clock.now(), target)

    async def test_countdown_is_throttled(self) -> None:
        clock = FakeClock(T0)
        scheduler = Scheduler(now=clock.now, sleep=clock.sleep, poll_interval=0.1, countdown_interval=2)
        with self.assertLogs("mintgate", level="INFO") as logs:
            await scheduler.wait_until(T0 + timedelta(seconds=10))
        countdown = [m for m in logs.output if "Time left" in m]
        self.assertEqual(len(countdown), 5)
        self.assertIn("0 hour(s), 0 minute(s), and 10 second(s)", countdown[0])
        self.assertTrue(any("Target time reached" in m for m in logs.output))


class TimeOracleTests(unittest.IsolatedAsyncioTestCase):
    async def test_reference_time_applies_block_lead(self) -> None:
        clock = FakeClock(T0)
        oracle = TimeOracle(handle(blocks=[_block(10, T0 + timedelta(seconds=2))]), local_now=clock.now)
        self.assertEqual(oracle.current_reference_time(), T0)
        await oracle.poll_once()
        self.assertEqual(oracle.last_block, 10)
        self.assertEqual(oracle.current_reference_time(), T0 + timedelta(seconds=2))

    async def test_skew_keeps_largest_lead(self) -> None:
        clock = FakeClock(T0)
        oracle = TimeOracle(
            handle(blocks=[_block(10, T0 + timedelta(seconds=2)), _block(11, T0 + timedelta(seconds=1))]),
            local_now=clock.now,
        )
        await oracle.poll_once()
        await oracle.poll_once()
        self.assertEqual(oracle.skew, timedelta(seconds=2))
        self.assertEqual(oracle.last_block, 11)

    async def test_chain_lead_releases_the_gate_early(self) -> None:
        # local clock 5s behind the chain, target 3s ahead of local time
        clock = FakeClock(T0)
        oracle = TimeOracle(handle(blocks=[_block(7, T0 + timedelta(seconds=5))]), local_now=clock.now)
        await oracle.poll_once()
        scheduler = Scheduler(now=oracle.current_reference_time, sleep=clock.sleep, poll_interval=0.1)
        await scheduler.wait_until(T0 + timedelta(seconds=3))
        self.assertEqual(clock.sleeps, [])
        self.assertEqual(clock.now(), T0)

    async def test_without_a_poll_the_gate_follows_the_local_clock(self) -> None:
        clock = FakeClock(T0)
        oracle = TimeOracle(handle(blocks=[_block(7, T0 + timedelta(seconds=5))]), local_now=clock.now)
        scheduler = Scheduler(now=oracle.current_reference_time, sleep=clock.sleep, poll_interval=0.5)
        await scheduler.wait_until(T0 + timedelta(seconds=3))
        self.assertEqual(clock.now(), T0 + timedelta(seconds=3))

    async def test_poll_failure_is_provider_unavailable(self) -> None:
        oracle = TimeOracle(handle(blocks=[aiohttp.ClientConnectionError("down")]))
        with self.assertRaises(ProviderUnavailable):
            await oracle.poll_once()
        self.assertIsNone(oracle.skew)

    async def test_monitoring_survives_errors_and_stops(self) -> None:
        provider = handle(blocks=[
            aiohttp.ClientConnectionError("down"),
            _block(1, T0),
        ])
        oracle = TimeOracle(provider)
        async with oracle.monitoring(0.01) as monitor:
            await asyncio.sleep(0.1)
            self.assertTrue(monitor.running)
        self.assertFalse(monitor.running)
        self.assertGreaterEqual(provider.w3.eth.block_calls, 2)
        self.assertEqual(oracle.last_block, 1)
        calls = provider.w3.eth.block_calls
        await asyncio.sleep(0.05)
        self.assertEqual(provider.w3.eth.block_calls, calls)


if __name__ == "__main__":
    unittest.main()
