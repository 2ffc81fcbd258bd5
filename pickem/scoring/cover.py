"""Against-the-spread outcome of a single pick."""

from __future__ import annotations

import math
from enum import Enum
from typing import Any

from pickem.ingestion.schema import GameStatus


class CoverResult(Enum):
    COVERED = "covered"
    NOT_COVERED = "not_covered"
    UNDETERMINED = "undetermined"

    def as_bool(self) -> bool | None:
        if self is CoverResult.UNDETERMINED:
            return None
        return self is CoverResult.COVERED


def _status_value(status: Any) -> str:
    if isinstance(status, GameStatus):
        return status.value
    return str(status or "")


def evaluate_cover(game: Any, team_name: str) -> CoverResult:
    """Decide whether ``team_name`` covered the spread stored on ``game``.

    ``game`` is anything exposing status, spread, result_a/result_b,
    team_a/team_b and team_a_abbrev/team_b_abbrev. A margin exactly equal to
    the spread (a push) is NOT_COVERED; there is no push outcome.
    """

    if _status_value(game.status) != GameStatus.FINISHED.value:
        return CoverResult.UNDETERMINED

    spread = game.spread
    if not isinstance(spread, str):
        return CoverResult.UNDETERMINED
    parts = spread.split()
    if len(parts) < 2:
        return CoverResult.UNDETERMINED
    try:
        spread_value = float(parts[-1])
    except ValueError:
        return CoverResult.UNDETERMINED
    if math.isnan(spread_value) or math.isinf(spread_value):
        return CoverResult.UNDETERMINED

    result_a = game.result_a
    result_b = game.result_b
    if result_a is None or result_b is None:
        return CoverResult.UNDETERMINED

    spread_abbrev = parts[0]
    abbrev_sides = [
        side
        for side, abbrev in (("a", game.team_a_abbrev), ("b", game.team_b_abbrev))
        if abbrev and abbrev == spread_abbrev
    ]
    team_sides = [
        side
        for side, name in (("a", game.team_a), ("b", game.team_b))
        if name == team_name
    ]
    if len(abbrev_sides) != 1 or len(team_sides) != 1:
        return CoverResult.UNDETERMINED

    team_side = team_sides[0]
    margin = result_a - result_b if team_side == "a" else result_b - result_a
    effective_spread = spread_value if abbrev_sides[0] == team_side else -spread_value

    if margin + effective_spread > 0:
        return CoverResult.COVERED
    return CoverResult.NOT_COVERED


def did_team_cover(game: Any, team_name: str) -> bool | None:
    return evaluate_cover(game, team_name).as_bool()
