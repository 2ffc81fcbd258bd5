from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping

logger = logging.getLogger(__name__)

# ACC (2), Big East (4), Big Ten (7), Big 12 (8), SEC (23)
MAJOR_CONFERENCE_IDS: frozenset[str] = frozenset({"2", "4", "7", "8", "23"})
MAX_IMPORT_SPREAD = 12.0
DEFAULT_ESPN_BASE_URL = "https://site.api.espn.com"
DEFAULT_ODDS_API_BASE_URL = "https://api.the-odds-api.com/v4"
DEFAULT_FEED_TIMEZONE = "America/New_York"


@dataclass(frozen=True)
class PoolConfig:
    major_conference_ids: frozenset[str] = field(default=MAJOR_CONFERENCE_IDS)
    max_import_spread: float = MAX_IMPORT_SPREAD
    espn_base_url: str = DEFAULT_ESPN_BASE_URL
    odds_api_base_url: str = DEFAULT_ODDS_API_BASE_URL
    odds_api_key: str | None = None
    feed_timezone: str = DEFAULT_FEED_TIMEZONE
    feed_timeout_seconds: int = 12
    feed_retries: int = 3
    live_poll_seconds: int = 60
    auto_ingest_interval_minutes: int = 0


def _int_env(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = (environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %s", name, raw, default)
        return default


def load_config(environ: Mapping[str, str] | None = None) -> PoolConfig:
    """Build a PoolConfig from environment variables.

    Only entry points (CLI mains, app startup) call this; engine functions
    receive the resulting object.
    """

    env = os.environ if environ is None else environ
    conferences_raw = (env.get("MAJOR_CONFERENCE_IDS") or "").strip()
    conferences = (
        frozenset(part.strip() for part in conferences_raw.split(",") if part.strip())
        if conferences_raw
        else MAJOR_CONFERENCE_IDS
    )
    odds_key = (env.get("ODDS_API_KEY") or "").strip() or None
    return PoolConfig(
        major_conference_ids=conferences,
        espn_base_url=(env.get("ESPN_BASE_URL") or DEFAULT_ESPN_BASE_URL).rstrip("/"),
        odds_api_base_url=(env.get("ODDS_API_BASE_URL") or DEFAULT_ODDS_API_BASE_URL).rstrip("/"),
        odds_api_key=odds_key,
        feed_timezone=(env.get("FEED_TIMEZONE") or DEFAULT_FEED_TIMEZONE).strip(),
        live_poll_seconds=_int_env(env, "LIVE_POLL_SECONDS", 60),
        auto_ingest_interval_minutes=_int_env(env, "AUTO_INGEST_INTERVAL_MINUTES", 0),
    )
