"""The Odds API client: consensus spreads from multiple bookmakers."""

from __future__ import annotations

import logging
import time
from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

import requests

from pickem.config import DEFAULT_FEED_TIMEZONE, DEFAULT_ODDS_API_BASE_URL

logger = logging.getLogger(__name__)
ODDS_SPORT_KEY = "basketball_ncaab"
ODDS_CONNECT_TIMEOUT_SECONDS = 5
ODDS_READ_TIMEOUT_SECONDS = 15
ODDS_MAX_ATTEMPTS = 3


def _commence_date(entry: dict[str, Any], tz: ZoneInfo) -> date | None:
    value = entry.get("commence_time")
    if not isinstance(value, str):
        return None
    try:
        instant = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return instant.astimezone(tz).date()


def fetch_odds(
    api_key: str | None,
    game_date: date | None = None,
    *,
    base_url: str = DEFAULT_ODDS_API_BASE_URL,
    timezone_name: str = DEFAULT_FEED_TIMEZONE,
    max_attempts: int = ODDS_MAX_ATTEMPTS,
) -> list[dict[str, Any]]:
    """Fetch spread markets for upcoming games.

    Entries are filtered to ``game_date`` (civil date in the feed timezone)
    when given. Any failure is logged and yields an empty list.
    """

    if not api_key:
        return []

    url = f"{base_url.rstrip('/')}/sports/{ODDS_SPORT_KEY}/odds/"
    params = {
        "regions": "us",
        "markets": "spreads",
        "dateFormat": "iso",
        "apiKey": api_key,
    }

    response = None
    for attempt in range(1, max_attempts + 1):
        try:
            response = requests.get(
                url,
                params=params,
                timeout=(ODDS_CONNECT_TIMEOUT_SECONDS, ODDS_READ_TIMEOUT_SECONDS),
            )
            break
        except (requests.Timeout, requests.ConnectionError) as exc:
            logger.warning("Odds API attempt %s/%s failed: %s", attempt, max_attempts, exc)
            if attempt == max_attempts:
                logger.error("Odds API unavailable after %s attempts", max_attempts)
                return []
            time.sleep(attempt)
        except requests.RequestException as exc:
            logger.error("Odds API request failed: %s", exc)
            return []

    if response is None:
        return []
    if response.status_code >= 400:
        logger.error(
            "Odds API error status=%s body=%s",
            response.status_code,
            (response.text or "")[:300],
        )
        return []
    try:
        payload = response.json()
    except ValueError:
        logger.error("Odds API returned non-JSON response: %s", (response.text or "")[:300])
        return []
    if not isinstance(payload, list):
        logger.error("Odds API returned unexpected payload type %s", type(payload).__name__)
        return []

    entries = [entry for entry in payload if isinstance(entry, dict)]
    if game_date is None:
        return entries
    tz = ZoneInfo(timezone_name)
    return [entry for entry in entries if _commence_date(entry, tz) == game_date]
