from __future__ import annotations

import asyncio
import unittest
from datetime import date, datetime, timezone
from types import SimpleNamespace
from unittest.mock import patch

from pickem.config import PoolConfig
from pickem.ingestion.sync import SyncResult
from pickem.live import LiveScorePoller, any_live, game_is_live

NOW = datetime(2025, 1, 15, 1, 30, tzinfo=timezone.utc)  # 20:30 on the 14th in New York


def _game(status: str, start: datetime | None) -> SimpleNamespace:
    return SimpleNamespace(status=status, start_time_utc=start)


class GameIsLiveTests(unittest.TestCase):
    def test_in_progress(self) -> None:
        self.assertTrue(game_is_live(_game("in_progress", None), NOW))

    def test_scheduled_past_start_counts_as_live(self) -> None:
        self.assertTrue(game_is_live(_game("scheduled", datetime(2025, 1, 15, 1, 0, tzinfo=timezone.utc)), NOW))

    def test_naive_start_time_is_treated_as_utc(self) -> None:
        self.assertTrue(game_is_live(_game("scheduled", datetime(2025, 1, 15, 1, 0)), NOW))
        self.assertFalse(game_is_live(_game("scheduled", datetime(2025, 1, 15, 2, 0)), NOW))

    def test_finished_and_future_games_are_not_live(self) -> None:
        games = [
            _game("finished", datetime(2025, 1, 14, 23, 0, tzinfo=timezone.utc)),
            _game("scheduled", datetime(2025, 1, 15, 3, 0, tzinfo=timezone.utc)),
            _game("scheduled", None),
        ]
        self.assertFalse(any_live(games, NOW))


class LiveScorePollerTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.config = PoolConfig(live_poll_seconds=1)
        self.poller = LiveScorePoller(self.config, clock=lambda: NOW)

    def test_today_uses_feed_timezone(self) -> None:
        self.assertEqual(date(2025, 1, 14), self.poller.today())

    async def test_tick_skipped_without_live_games(self) -> None:
        with patch("pickem.live.load_games_for_day", return_value=[_game("finished", NOW)]), patch(
            "pickem.ingestion.sync.sync_active_games"
        ) as sync_mock:
            ran = await self.poller.tick()

        self.assertFalse(ran)
        sync_mock.assert_not_called()

    async def test_tick_syncs_todays_games(self) -> None:
        with patch(
            "pickem.live.load_games_for_day", return_value=[_game("in_progress", NOW)]
        ) as load_mock, patch(
            "pickem.ingestion.sync.sync_active_games", return_value=SyncResult(updated=2)
        ) as sync_mock:
            ran = await self.poller.tick()

        self.assertTrue(ran)
        load_mock.assert_called_once_with(date(2025, 1, 14))
        sync_mock.assert_called_once_with(self.config, game_date=date(2025, 1, 14))
        self.assertEqual(2, self.poller.last_result.updated)

    async def test_overlapping_tick_is_skipped(self) -> None:
        with patch("pickem.live.load_games_for_day") as load_mock:
            async with self.poller._lock:
                ran = await self.poller.tick()

        self.assertFalse(ran)
        load_mock.assert_not_called()

    async def test_run_stops_when_event_is_set(self) -> None:
        stop = asyncio.Event()
        calls = []

        async def fake_tick() -> bool:
            calls.append(1)
            stop.set()
            return True

        self.poller.tick = fake_tick
        await asyncio.wait_for(self.poller.run(stop), timeout=5)

        self.assertEqual(1, len(calls))

    async def test_failed_tick_does_not_stop_the_loop(self) -> None:
        stop = asyncio.Event()
        calls = []

        async def flaky_tick() -> bool:
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("feed exploded")
            stop.set()
            return True

        self.poller.tick = flaky_tick
        await asyncio.wait_for(self.poller.run(stop), timeout=5)

        self.assertEqual(2, len(calls))


if __name__ == "__main__":
    unittest.main()
