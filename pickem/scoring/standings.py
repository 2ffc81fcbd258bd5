"""Daily / weekly / season standings and the weekly champion rule.

Season standings come straight from the stored profile counters. Daily and
weekly standings are recomputed from finished games and their picks; picks
whose outcome is undetermined count as neither a win nor a loss.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from pickem.ingestion.schema import GameStatus
from pickem.scoring.cover import CoverResult, evaluate_cover


class WindowKind(str, Enum):
    DAY = "day"
    WEEK = "week"
    SEASON = "season"


def week_bounds(day: date) -> tuple[date, date]:
    """Monday and Sunday of the week containing ``day``."""
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)


def as_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class Window:
    kind: WindowKind
    start: Optional[date] = None
    end: Optional[date] = None

    @classmethod
    def day(cls, day: date) -> "Window":
        return cls(WindowKind.DAY, day, day)

    @classmethod
    def week(cls, day: date) -> "Window":
        start, end = week_bounds(day)
        return cls(WindowKind.WEEK, start, end)

    @classmethod
    def season(cls) -> "Window":
        return cls(WindowKind.SEASON)

    @classmethod
    def for_kind(cls, kind: WindowKind | str, day: date) -> "Window":
        kind = WindowKind(kind)
        if kind is WindowKind.DAY:
            return cls.day(day)
        if kind is WindowKind.WEEK:
            return cls.week(day)
        return cls.season()

    def contains(self, day: Any) -> bool:
        if self.kind is WindowKind.SEASON:
            return True
        value = as_date(day)
        if value is None or self.start is None or self.end is None:
            return False
        return self.start <= value <= self.end


@dataclass
class Record:
    wins: int = 0
    losses: int = 0


@dataclass
class RankedEntry:
    user_id: str
    username: str
    wins: int
    losses: int
    weekly_wins: int
    games_count: int = 0


@dataclass(frozen=True)
class Champion:
    user_id: str
    wins: int
    losses: int


def _display_name(profile: Any) -> str:
    name = getattr(profile, "username", None) or getattr(profile, "email", None)
    return (name or "Unknown").strip()


def _is_finished(game: Any) -> bool:
    status = game.status
    value = status.value if isinstance(status, GameStatus) else str(status or "")
    return value == GameStatus.FINISHED.value


def finished_games_in_window(games: Iterable[Any], window: Window) -> list[Any]:
    return [game for game in games if _is_finished(game) and window.contains(game.game_date)]


def tally_records(games: Iterable[Any], picks: Iterable[Any]) -> dict[str, Record]:
    """Win/loss per user over ``picks`` on ``games``, in first-pick order."""

    games_by_id = {game.id: game for game in games}
    records: dict[str, Record] = {}
    for pick in picks:
        game = games_by_id.get(pick.game_id)
        if game is None:
            continue
        outcome = evaluate_cover(game, pick.selected_team)
        if outcome is CoverResult.UNDETERMINED:
            continue
        record = records.setdefault(pick.user_id, Record())
        if outcome is CoverResult.COVERED:
            record.wins += 1
        else:
            record.losses += 1
    return records


def rank_entries(entries: list[RankedEntry]) -> list[RankedEntry]:
    # sorted() is stable: full ties keep input order.
    return sorted(entries, key=lambda entry: (-entry.wins, entry.losses))


def compute_standings(
    profiles: Iterable[Any],
    games: Iterable[Any],
    picks: Iterable[Any],
    window: Window,
) -> list[RankedEntry]:
    profiles = list(profiles)

    if window.kind is WindowKind.SEASON:
        entries = [
            RankedEntry(
                user_id=profile.id,
                username=_display_name(profile),
                wins=profile.total_wins or 0,
                losses=profile.total_losses or 0,
                weekly_wins=profile.weekly_wins or 0,
            )
            for profile in profiles
        ]
        return rank_entries(entries)

    window_games = finished_games_in_window(games, window)
    records = tally_records(window_games, picks)
    entries = []
    for profile in profiles:
        record = records.get(profile.id, Record())
        entries.append(
            RankedEntry(
                user_id=profile.id,
                username=_display_name(profile),
                wins=record.wins,
                losses=record.losses,
                weekly_wins=profile.weekly_wins or 0,
                games_count=len(window_games),
            )
        )
    return rank_entries(entries)


def select_weekly_champion(records: Mapping[str, Record]) -> Optional[Champion]:
    """Most wins, then fewest losses; a full tie keeps the first candidate seen.

    Returns None when nobody has a win.
    """

    best_id: Optional[str] = None
    best_wins = 0
    best_losses: float = math.inf
    for user_id, record in records.items():
        if record.wins > best_wins or (
            record.wins == best_wins and record.losses < best_losses
        ):
            best_id = user_id
            best_wins = record.wins
            best_losses = record.losses

    if best_id is None or best_wins == 0:
        return None
    return Champion(user_id=best_id, wins=best_wins, losses=int(best_losses))
