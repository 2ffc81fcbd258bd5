"""ESPN HTTP client for fetching the men's college basketball scoreboard."""

from __future__ import annotations

import json
import logging
import re
import time
from datetime import date
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from pickem.config import DEFAULT_ESPN_BASE_URL

logger = logging.getLogger(__name__)
SCOREBOARD_PATH = "/apis/site/v2/sports/basketball/mens-college-basketball/scoreboard"
# groups=50 is the all-Division-I grouping; without it only featured games come back.
SCOREBOARD_GROUPS = "50"
SCOREBOARD_LIMIT = "1000"
DEFAULT_TIMEOUT_SECONDS = 12
DEFAULT_RETRIES = 3
DEFAULT_BACKOFF_SECONDS = 0.5
DEFAULT_USER_AGENT = "pickem-pool/1.0 (+https://example.local)"


def normalize_dates(value: str | date | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, date):
        return value.strftime("%Y%m%d")
    cleaned = value.strip()
    if not cleaned:
        return None
    if cleaned.lower() == "today":
        return date.today().strftime("%Y%m%d")
    if re.fullmatch(r"\d{8}", cleaned):
        return cleaned
    if re.fullmatch(r"\d{4}-\d{2}-\d{2}", cleaned):
        return cleaned.replace("-", "")
    raise ValueError("dates must be YYYYMMDD or YYYY-MM-DD")


def build_scoreboard_url(
    game_date: str | date | None = None,
    base_url: str = DEFAULT_ESPN_BASE_URL,
) -> str:
    params: dict[str, str] = {"groups": SCOREBOARD_GROUPS, "limit": SCOREBOARD_LIMIT}
    normalized_dates = normalize_dates(game_date)
    if normalized_dates:
        params = {"dates": normalized_dates, **params}
    return f"{base_url.rstrip('/')}{SCOREBOARD_PATH}?{urlencode(params)}"


def fetch_scoreboard(
    game_date: str | date | None = None,
    *,
    base_url: str = DEFAULT_ESPN_BASE_URL,
    timeout: int = DEFAULT_TIMEOUT_SECONDS,
    retries: int = DEFAULT_RETRIES,
) -> dict:
    """Fetch ESPN scoreboard data for an optional date.

    Returns parsed JSON on success. On failure, returns a controlled error dict.
    """

    try:
        url = build_scoreboard_url(game_date, base_url)
    except ValueError as exc:
        return {"ok": False, "error": str(exc), "date": None}

    headers = {
        "User-Agent": DEFAULT_USER_AGENT,
        "Accept": "application/json",
    }

    attempts = max(1, retries)
    last_error: str | None = None
    last_status: int | None = None
    last_body_snippet: str | None = None
    for attempt in range(attempts):
        try:
            request = Request(url, headers=headers)
            with urlopen(request, timeout=timeout) as response:
                status = getattr(response, "status", None)
                payload = response.read().decode("utf-8")
                if status and status != 200:
                    body_snippet = payload[:300]
                    logger.error(
                        "ESPN scoreboard non-200 status=%s body=%s",
                        status,
                        body_snippet,
                    )
                    return {
                        "ok": False,
                        "error": "ESPN returned non-200 response",
                        "status": status,
                        "body": body_snippet,
                        "date": normalize_dates(game_date),
                        "url": url,
                    }
                parsed = json.loads(payload)
                if not isinstance(parsed, dict):
                    raise ValueError("scoreboard payload is not a JSON object")
                return parsed
        except HTTPError as exc:
            last_status = exc.code
            body = exc.read().decode("utf-8") if exc.fp else ""
            last_body_snippet = body[:300]
            logger.error(
                "ESPN scoreboard HTTPError status=%s body=%s",
                last_status,
                last_body_snippet,
            )
            last_error = str(exc)
            if attempt < attempts - 1:
                time.sleep(DEFAULT_BACKOFF_SECONDS * (2**attempt))
        except (URLError, TimeoutError, ValueError) as exc:
            last_error = str(exc)
            logger.warning("ESPN scoreboard attempt %s failed: %s", attempt + 1, exc)
            if attempt < attempts - 1:
                time.sleep(DEFAULT_BACKOFF_SECONDS * (2**attempt))

    return {
        "ok": False,
        "error": "Failed to fetch ESPN scoreboard",
        "details": last_error,
        "status": last_status,
        "body": last_body_snippet,
        "date": normalize_dates(game_date),
        "url": url,
    }
