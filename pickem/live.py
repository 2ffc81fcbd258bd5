"""Live score polling with non-overlapping ticks."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable
from zoneinfo import ZoneInfo

from pickem.config import PoolConfig
from pickem.db import SessionLocal
from pickem.ingestion import sync
from pickem.ingestion.schema import GameStatus
from pickem.models import Game

logger = logging.getLogger(__name__)


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    # SQLite hands back naive datetimes; they are stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def game_is_live(game: Any, now_utc: datetime) -> bool:
    """In progress, or still marked scheduled although its start time has passed."""

    if game.status == GameStatus.IN_PROGRESS.value:
        return True
    if game.status != GameStatus.SCHEDULED.value:
        return False
    start = as_utc(game.start_time_utc)
    return start is not None and start <= now_utc


def any_live(games: Iterable[Any], now_utc: datetime) -> bool:
    return any(game_is_live(game, now_utc) for game in games)


def load_games_for_day(day: date) -> list[Game]:
    with SessionLocal() as db:
        return db.query(Game).filter(Game.game_date == day).all()


class LiveScorePoller:
    """Periodically syncs today's games while at least one of them is live.

    A tick that starts while the previous one is still running is skipped.
    """

    def __init__(
        self,
        config: PoolConfig,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config
        self._lock = asyncio.Lock()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.last_result: sync.SyncResult | None = None

    def today(self) -> date:
        return self._clock().astimezone(ZoneInfo(self.config.feed_timezone)).date()

    async def tick(self) -> bool:
        """Run one sync pass. Returns False when the tick was skipped."""

        if self._lock.locked():
            logger.info("Live tick skipped: previous tick still running")
            return False

        async with self._lock:
            day = self.today()
            games = await asyncio.to_thread(load_games_for_day, day)
            if not any_live(games, self._clock()):
                logger.debug("Live tick skipped: no live games on %s", day)
                return False
            self.last_result = await asyncio.to_thread(
                sync.sync_active_games, self.config, game_date=day
            )
            return True

    async def run(self, stop_event: asyncio.Event) -> None:
        interval = self.config.live_poll_seconds
        if interval < 1:
            logger.error("Live polling disabled: interval must be >= 1 second.")
            return

        logger.info("Live polling enabled: interval=%s seconds", interval)
        while not stop_event.is_set():
            try:
                await self.tick()
            except Exception:
                logger.exception("Live tick failed.")
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue
