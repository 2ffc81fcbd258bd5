"""Fetch boundary: scoreboard (+ optional odds feed) to normalized games."""

from __future__ import annotations

import logging
from datetime import date
from zoneinfo import ZoneInfo

from pickem.config import PoolConfig
from pickem.ingestion.espn_client import fetch_scoreboard
from pickem.ingestion.espn_parser import normalize_day
from pickem.ingestion.odds_client import fetch_odds
from pickem.ingestion.schema import GameIngestDTO

logger = logging.getLogger(__name__)


def fetch_daily_games(game_date: date, config: PoolConfig) -> list[GameIngestDTO]:
    """Return normalized games for ``game_date``.

    Any fetch or parse failure is logged and yields an empty list so callers
    treat the cycle as "no games".
    """

    payload = fetch_scoreboard(
        game_date,
        base_url=config.espn_base_url,
        timeout=config.feed_timeout_seconds,
        retries=config.feed_retries,
    )
    if payload.get("ok") is False or payload.get("error"):
        logger.error(
            "Scoreboard fetch failed date=%s error=%s details=%s",
            game_date,
            payload.get("error"),
            payload.get("details"),
        )
        return []

    odds_entries = None
    if config.odds_api_key:
        odds_entries = fetch_odds(
            config.odds_api_key,
            game_date,
            base_url=config.odds_api_base_url,
            timezone_name=config.feed_timezone,
            max_attempts=config.feed_retries,
        )
        logger.info("Odds feed returned %s entries for date=%s", len(odds_entries), game_date)

    try:
        games = normalize_day(
            payload,
            odds_entries,
            game_date=game_date,
            tz=ZoneInfo(config.feed_timezone),
        )
    except Exception:
        logger.exception("Failed normalizing scoreboard for date=%s", game_date)
        return []

    logger.info("Normalized %s games for date=%s", len(games), game_date)
    return games
