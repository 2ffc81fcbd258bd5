"""Which normalized games are stored, and how stored games follow the feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from pickem.config import MAX_IMPORT_SPREAD
from pickem.ingestion.schema import GameIngestDTO, GameStatus
from pickem.ingestion.spreads import parse_spread_text

OBSERVED_FIELDS = ("status", "result_a", "result_b", "spread")


@dataclass
class GameUpdate:
    changes: dict[str, Any] = field(default_factory=dict)
    swapped: bool = False
    finished_now: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.changes)


def _status_value(status: Any) -> str:
    if isinstance(status, GameStatus):
        return status.value
    return str(status or "")


def import_rejection_reason(
    game: GameIngestDTO,
    allowed_conference_ids: Iterable[str],
    *,
    spread_ceiling: float = MAX_IMPORT_SPREAD,
    require_spread: bool = False,
) -> Optional[str]:
    allowed = {str(conf) for conf in allowed_conference_ids}
    if game.team_a_conf_id not in allowed and game.team_b_conf_id not in allowed:
        return f"conferences {game.team_a_conf_id}/{game.team_b_conf_id} not major"
    if game.spread is None or game.spread_value is None:
        if require_spread:
            return "no valid spread"
        return None
    if abs(game.spread_value) > spread_ceiling:
        return f"spread {game.spread_value:g} exceeds {spread_ceiling:g}"
    return None


def should_import(
    game: GameIngestDTO,
    allowed_conference_ids: Iterable[str],
    *,
    spread_ceiling: float = MAX_IMPORT_SPREAD,
    require_spread: bool = False,
) -> bool:
    """Conference and spread-magnitude gate for new games.

    A missing spread passes unless ``require_spread`` (refresh mode) is set.
    """

    return (
        import_rejection_reason(
            game,
            allowed_conference_ids,
            spread_ceiling=spread_ceiling,
            require_spread=require_spread,
        )
        is None
    )


def spread_magnitude(spread: Optional[str]) -> Optional[float]:
    parsed = parse_spread_text(spread)
    if parsed is None:
        return None
    return abs(parsed[1])


def has_valid_spread(spread: Optional[str], spread_ceiling: float = MAX_IMPORT_SPREAD) -> bool:
    magnitude = spread_magnitude(spread)
    return magnitude is not None and magnitude <= spread_ceiling


def needs_cleanup(
    spread: Optional[str],
    *,
    has_picks: bool,
    spread_ceiling: float = MAX_IMPORT_SPREAD,
) -> bool:
    """A stored game is removable only without a valid spread and without picks."""
    return not has_picks and not has_valid_spread(spread, spread_ceiling)


def is_swapped(stored: Any, fresh: GameIngestDTO) -> bool:
    return (
        stored.team_a != stored.team_b
        and stored.team_a == fresh.team_b
        and stored.team_b == fresh.team_a
    )


def _oriented(stored: Any, fresh: GameIngestDTO) -> tuple[dict[str, Any], bool]:
    """Fresh values expressed in the stored team_a / team_b orientation."""
    swapped = is_swapped(stored, fresh)
    a, b = ("b", "a") if swapped else ("a", "b")
    values = {
        "status": fresh.status.value,
        "result_a": getattr(fresh, f"result_{a}"),
        "result_b": getattr(fresh, f"result_{b}"),
        "team_a_abbrev": getattr(fresh, f"team_{a}_abbrev"),
        "team_b_abbrev": getattr(fresh, f"team_{b}_abbrev"),
        "team_a_rank": getattr(fresh, f"team_{a}_rank"),
        "team_b_rank": getattr(fresh, f"team_{b}_rank"),
        "team_a_record": getattr(fresh, f"team_{a}_record"),
        "team_b_record": getattr(fresh, f"team_{b}_record"),
        "spread": fresh.spread,
    }
    return values, swapped


def apply_live_update(stored: Any, fresh: GameIngestDTO) -> GameUpdate:
    """Diff a stored game against a freshly normalized one.

    team_a / team_b of the stored game never change; when the feed reports the
    teams the other way round, scores, abbreviations, ranks and records are
    remapped first. A null fresh spread never overwrites a stored one. The
    update is empty unless status, a score or the spread changed.
    """

    values, swapped = _oriented(stored, fresh)
    if values["spread"] is None:
        values["spread"] = stored.spread

    stored_status = _status_value(stored.status)
    observed_changed = any(
        (stored_status if name == "status" else getattr(stored, name)) != values[name]
        for name in OBSERVED_FIELDS
    )
    if not observed_changed:
        return GameUpdate(swapped=swapped)

    changes = {
        name: value
        for name, value in values.items()
        if (stored_status if name == "status" else getattr(stored, name)) != value
    }
    finished_now = (
        values["status"] == GameStatus.FINISHED.value
        and stored_status != GameStatus.FINISHED.value
    )
    return GameUpdate(changes=changes, swapped=swapped, finished_now=finished_now)


def apply_changes(stored: Any, update: GameUpdate) -> None:
    for name, value in update.changes.items():
        setattr(stored, name, value)
