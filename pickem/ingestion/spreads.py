"""Spread parsing, consensus and favorite attribution.

A stored spread is always ``"<favorite_abbrev> <value>"`` with ``value <= 0``
and an abbreviation equal to one of the game's two stored abbreviations. The
string is rebuilt here from the resolved side, never copied from feed text.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Literal, Optional

from pickem.ingestion.teams import teams_match

logger = logging.getLogger(__name__)

Side = Literal["away", "home"]

_PICKEM_TOKENS = {"even", "pk", "pick", "pickem"}
MIN_NAME_WORD_LENGTH = 3


@dataclass(frozen=True)
class Spread:
    abbrev: str
    value: float

    def __str__(self) -> str:
        return format_spread(self.abbrev, self.value)


@dataclass(frozen=True)
class TeamRef:
    name: str
    abbrev: Optional[str]


@dataclass(frozen=True)
class Quotation:
    """One odds line quoted by the scoreboard feed."""

    details: str
    value: Optional[float]


@dataclass
class SpreadContext:
    away: TeamRef
    home: TeamRef
    quotations: list[Quotation] = field(default_factory=list)
    odds_entry: Optional[dict[str, Any]] = None

    def team(self, side: Side) -> TeamRef:
        return self.away if side == "away" else self.home

    def other(self, side: Side) -> Side:
        return "home" if side == "away" else "away"


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def format_spread(abbrev: str, value: float) -> str:
    if value == 0:
        value = 0.0  # avoid "-0"
    return f"{abbrev} {value:g}"


def parse_spread_text(text: Optional[str]) -> Optional[tuple[str, float]]:
    """Split ``"<identifier> <signed number>"`` into its parts.

    The identifier may span several words; the number is the last token.
    "EVEN" / "PK" parse as 0.
    """

    if not text or not isinstance(text, str):
        return None
    parts = text.split()
    if len(parts) < 2:
        return None
    identifier = " ".join(parts[:-1])
    last = parts[-1]
    if last.lower() in _PICKEM_TOKENS:
        return identifier, 0.0
    value = _to_float(last)
    if value is None:
        return None
    return identifier, value


def trailing_number(text: Optional[str]) -> Optional[float]:
    if not text or not isinstance(text, str):
        return None
    parts = text.split()
    if not parts:
        return None
    return _to_float(parts[-1])


def attribute_identifier(identifier: str, away: TeamRef, home: TeamRef) -> Optional[Side]:
    """Work out which side a quotation's team reference points at.

    Tries the whole identifier against both abbreviations, then its first
    token, then the first word of each display name. Returns None when no
    method gives a single side.
    """

    identifier = identifier.strip()
    if not identifier:
        return None

    candidates: list[tuple[Side, TeamRef]] = [("away", away), ("home", home)]

    exact = [side for side, team in candidates if team.abbrev and identifier == team.abbrev]
    if len(exact) == 1:
        return exact[0]

    first_token = identifier.split()[0]
    by_token = [side for side, team in candidates if team.abbrev and first_token == team.abbrev]
    if len(by_token) == 1:
        return by_token[0]

    lowered = first_token.lower()
    by_word: list[Side] = []
    for side, team in candidates:
        words = team.name.split()
        if not words:
            continue
        first_word = words[0].lower()
        if len(first_word) >= MIN_NAME_WORD_LENGTH and first_word == lowered:
            by_word.append(side)
    if len(by_word) == 1:
        return by_word[0]
    return None


def _spread_for_side(context: SpreadContext, side: Side, value: float) -> Optional[Spread]:
    abbrev = context.team(side).abbrev
    if not abbrev:
        return None
    return Spread(abbrev=abbrev, value=-abs(value))


def consensus_spread(entry: dict[str, Any]) -> Optional[tuple[str, float]]:
    """Return ``(favorite_team_name, negative_point)`` agreed on by most quotes.

    Every (team, point) outcome in every bookmaker's ``spreads`` market is
    bucketed by absolute point value; the largest bucket wins (first seen on a
    tie) and its negatively quoted team is the favorite.
    """

    buckets: dict[float, dict[str, Any]] = {}
    for bookmaker in entry.get("bookmakers") or []:
        if not isinstance(bookmaker, dict):
            continue
        for market in bookmaker.get("markets") or []:
            if not isinstance(market, dict) or market.get("key") != "spreads":
                continue
            for outcome in market.get("outcomes") or []:
                if not isinstance(outcome, dict):
                    continue
                point = _to_float(outcome.get("point"))
                name = outcome.get("name")
                if point is None or not isinstance(name, str):
                    continue
                bucket = buckets.setdefault(
                    abs(point), {"count": 0, "favorites": [], "favorite_point": None}
                )
                bucket["count"] += 1
                if point < 0:
                    bucket["favorites"].append(name)
                    bucket["favorite_point"] = point

    best: Optional[dict[str, Any]] = None
    for bucket in buckets.values():
        if best is None or bucket["count"] > best["count"]:
            best = bucket
    if best is None or best["favorite_point"] is None:
        return None

    participants = [entry.get("home_team"), entry.get("away_team")]
    favorite = next(
        (team for team in best["favorites"] if team in participants),
        best["favorites"][0],
    )
    return favorite, best["favorite_point"]


def odds_entry_matches(entry: dict[str, Any], away_name: str, home_name: str) -> bool:
    entry_away = entry.get("away_team")
    entry_home = entry.get("home_team")
    if not isinstance(entry_away, str) or not isinstance(entry_home, str):
        return False
    same_orientation = teams_match(entry_away, away_name) and teams_match(entry_home, home_name)
    swapped = teams_match(entry_away, home_name) and teams_match(entry_home, away_name)
    return same_orientation or swapped


def find_odds_entry(
    entries: Iterable[dict[str, Any]] | None, away_name: str, home_name: str
) -> Optional[dict[str, Any]]:
    for entry in entries or ():
        if isinstance(entry, dict) and odds_entry_matches(entry, away_name, home_name):
            return entry
    return None


# --- resolution strategies -------------------------------------------------

def from_odds_feed(context: SpreadContext) -> Optional[Spread]:
    entry = context.odds_entry
    if not entry:
        return None
    consensus = consensus_spread(entry)
    if consensus is None:
        return None
    favorite_name, point = consensus

    matches = [
        side for side in ("away", "home")
        if teams_match(favorite_name, context.team(side).name)
    ]
    if len(matches) == 1:
        return _spread_for_side(context, matches[0], point)

    # Fall back on the odds feed's own away/home labelling of the participants.
    entry_away = entry.get("away_team")
    entry_home = entry.get("home_team")
    same_orientation = teams_match(entry_away, context.away.name) and teams_match(
        entry_home, context.home.name
    )
    swapped = teams_match(entry_away, context.home.name) and teams_match(
        entry_home, context.away.name
    )
    if same_orientation != swapped and favorite_name in (entry_away, entry_home):
        favorite_is_entry_away = favorite_name == entry_away
        side: Side = "away" if favorite_is_entry_away == same_orientation else "home"
        return _spread_for_side(context, side, point)

    logger.info(
        "Could not attribute odds-feed favorite %r to %s / %s",
        favorite_name,
        context.away.name,
        context.home.name,
    )
    return None


def from_favorite_quotation(context: SpreadContext) -> Optional[Spread]:
    for quote in context.quotations:
        if quote.value is None or quote.value >= 0:
            continue
        parsed = parse_spread_text(quote.details)
        if parsed is None:
            continue
        side = attribute_identifier(parsed[0], context.away, context.home)
        if side is None:
            logger.info("Unattributable favorite quotation %r", quote.details)
            continue
        return _spread_for_side(context, side, quote.value)
    return None


def from_underdog_quotation(context: SpreadContext) -> Optional[Spread]:
    if any(q.value is not None and q.value < 0 for q in context.quotations):
        return None
    quote = next(
        (q for q in context.quotations if q.value is not None and q.value > 0),
        None,
    )
    if quote is None:
        return None
    parsed = parse_spread_text(quote.details)
    if parsed is None:
        return None
    identifier, text_value = parsed
    side = attribute_identifier(identifier, context.away, context.home)
    if side is None:
        logger.info("Unattributable underdog quotation %r", quote.details)
        return None
    if text_value < 0:
        # The text names the favorite even though the numeric field disagrees.
        return _spread_for_side(context, side, text_value)
    return _spread_for_side(context, context.other(side), quote.value)


def from_pickem_quotation(context: SpreadContext) -> Optional[Spread]:
    if any(q.value is not None and q.value != 0 for q in context.quotations):
        return None
    quote = next((q for q in context.quotations if q.value == 0), None)
    if quote is None:
        return None
    parsed = parse_spread_text(quote.details)
    if parsed is None:
        return None
    side = attribute_identifier(parsed[0], context.away, context.home)
    if side is None:
        return None
    return _spread_for_side(context, side, 0.0)


SPREAD_STRATEGIES: tuple[Callable[[SpreadContext], Optional[Spread]], ...] = (
    from_odds_feed,
    from_favorite_quotation,
    from_underdog_quotation,
    from_pickem_quotation,
)


def resolve_spread(context: SpreadContext) -> Optional[Spread]:
    for strategy in SPREAD_STRATEGIES:
        spread = strategy(context)
        if spread is not None:
            return spread
    return None
