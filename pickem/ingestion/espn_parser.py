"""Normalize ESPN scoreboard payloads into canonical game records."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Iterable, Optional
from zoneinfo import ZoneInfo

from pickem.config import DEFAULT_FEED_TIMEZONE
from pickem.ingestion.schema import GameIngestDTO, GameStatus
from pickem.ingestion.spreads import (
    Quotation,
    SpreadContext,
    TeamRef,
    find_odds_entry,
    resolve_spread,
    trailing_number,
)

logger = logging.getLogger(__name__)
MAX_AP_RANK = 25


class MalformedEventError(ValueError):
    """Raised for a scoreboard event that cannot be turned into a game."""


def _safe_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_start_time(event: dict[str, Any]) -> datetime | None:
    date_value = event.get("date")
    if isinstance(date_value, str):
        try:
            return datetime.fromisoformat(date_value.replace("Z", "+00:00"))
        except ValueError:
            pass
    return None


def _extract_state(event: dict[str, Any], competition: dict[str, Any]) -> str | None:
    for holder in (event, competition):
        status = holder.get("status")
        if isinstance(status, dict):
            status_type = status.get("type")
            if isinstance(status_type, dict):
                state = status_type.get("state")
                if isinstance(state, str) and state:
                    return state
    return None


def _record_summary(competitor: dict[str, Any]) -> str:
    for record in competitor.get("records") or []:
        if isinstance(record, dict) and record.get("type") == "total":
            return str(record.get("summary") or "")
    return ""


def _ap_rank(competitor: dict[str, Any]) -> int | None:
    curated = competitor.get("curatedRank")
    if not isinstance(curated, dict):
        return None
    rank = _safe_int(curated.get("current"))
    if rank is None or rank < 1 or rank > MAX_AP_RANK:
        return None
    return rank


def _conference_id(team: dict[str, Any]) -> str | None:
    value = team.get("conferenceId")
    if value is None or value == "":
        return None
    return str(value)


def _quotations(competition: dict[str, Any]) -> list[Quotation]:
    quotations: list[Quotation] = []
    for odds in competition.get("odds") or []:
        if not isinstance(odds, dict):
            continue
        details = odds.get("details")
        details = details if isinstance(details, str) else ""
        value = _safe_float(odds.get("spread"))
        if value is None:
            value = trailing_number(details)
        quotations.append(Quotation(details=details, value=value))
    return quotations


def _split_competitors(competition: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    home = None
    away = None
    for competitor in competition.get("competitors") or []:
        if not isinstance(competitor, dict):
            continue
        if competitor.get("homeAway") == "home":
            home = competitor
        elif competitor.get("homeAway") == "away":
            away = competitor
    if away is None or home is None:
        raise MalformedEventError("event lacks a home and an away competitor")
    if not isinstance(away.get("team"), dict) or not isinstance(home.get("team"), dict):
        raise MalformedEventError("competitor without team")
    return away, home


def _team_name(team: dict[str, Any]) -> str:
    name = team.get("displayName") or team.get("name")
    if not isinstance(name, str) or not name.strip():
        raise MalformedEventError("team without a display name")
    return name.strip()


def normalize_event(
    event: dict[str, Any],
    odds_entries: Optional[Iterable[dict[str, Any]]] = None,
    *,
    game_date: date | None = None,
    tz: ZoneInfo | None = None,
) -> GameIngestDTO:
    """Build one canonical game from a scoreboard event.

    Raises MalformedEventError when the event lacks competitors, status or
    start time.
    """

    external_id = event.get("id")
    if not isinstance(external_id, (str, int)) or external_id == "":
        raise MalformedEventError("event without id")

    competitions = event.get("competitions")
    if not isinstance(competitions, list) or not competitions or not isinstance(competitions[0], dict):
        raise MalformedEventError("event without competition")
    competition = competitions[0]

    away, home = _split_competitors(competition)
    away_team = away["team"]
    home_team = home["team"]

    state = _extract_state(event, competition)
    if state is None:
        raise MalformedEventError("event without status")
    status = GameStatus.from_feed_state(state)

    start_time_utc = _parse_start_time(event)
    if start_time_utc is None:
        raise MalformedEventError("event without a valid start time")

    away_ref = TeamRef(name=_team_name(away_team), abbrev=away_team.get("abbreviation") or None)
    home_ref = TeamRef(name=_team_name(home_team), abbrev=home_team.get("abbreviation") or None)

    context = SpreadContext(
        away=away_ref,
        home=home_ref,
        quotations=_quotations(competition),
        odds_entry=find_odds_entry(odds_entries, away_ref.name, home_ref.name),
    )
    spread = resolve_spread(context)

    if status is GameStatus.SCHEDULED:
        result_a = result_b = None
    else:
        result_a = _safe_int(away.get("score"))
        result_b = _safe_int(home.get("score"))

    if game_date is None:
        game_date = start_time_utc.astimezone(tz or ZoneInfo(DEFAULT_FEED_TIMEZONE)).date()

    return GameIngestDTO(
        external_id=str(external_id),
        start_time_utc=start_time_utc,
        game_date=game_date,
        status=status,
        team_a=away_ref.name,
        team_b=home_ref.name,
        team_a_abbrev=away_ref.abbrev,
        team_b_abbrev=home_ref.abbrev,
        team_a_conf_id=_conference_id(away_team),
        team_b_conf_id=_conference_id(home_team),
        team_a_rank=_ap_rank(away),
        team_b_rank=_ap_rank(home),
        team_a_record=_record_summary(away),
        team_b_record=_record_summary(home),
        result_a=result_a,
        result_b=result_b,
        spread=str(spread) if spread is not None else None,
        spread_value=spread.value if spread is not None else None,
        raw={
            "event_id": event.get("id"),
            "competition_id": competition.get("id"),
            "odds": competition.get("odds"),
        },
    )


def normalize_day(
    scoreboard_json: dict,
    odds_entries: Optional[list[dict[str, Any]]] = None,
    *,
    game_date: date | None = None,
    tz: ZoneInfo | None = None,
) -> list[GameIngestDTO]:
    """Normalize every event in a scoreboard payload; malformed events are skipped."""

    events = scoreboard_json.get("events") if isinstance(scoreboard_json, dict) else None
    if not isinstance(events, list):
        return []

    seen_ids: set[str] = set()
    games: list[GameIngestDTO] = []
    for event in events:
        if not isinstance(event, dict):
            continue
        try:
            game = normalize_event(event, odds_entries, game_date=game_date, tz=tz)
        except (ValueError, TypeError, KeyError) as exc:
            logger.warning("Skipping scoreboard event id=%s: %s", event.get("id"), exc)
            continue
        if game.external_id in seen_ids:
            continue
        seen_ids.add(game.external_id)
        games.append(game)
    return games
