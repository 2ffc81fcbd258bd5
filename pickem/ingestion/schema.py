"""Internal data contract for game ingestion."""

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class GameStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"

    @classmethod
    def from_feed_state(cls, state: str) -> "GameStatus":
        """Map the scoreboard's 'pre' / 'in' / 'post' state to a lifecycle status."""
        value = state.strip().lower()
        if value in {"post", "final", "finished"}:
            return cls.FINISHED
        if value in {"in", "in_progress", "in progress"}:
            return cls.IN_PROGRESS
        if value in {"pre", "scheduled"}:
            return cls.SCHEDULED
        raise ValueError(f"Unknown feed state: {state!r}")


class GameIngestDTO(BaseModel):
    """
    Canonical per-game record produced by the normalizer and consumed by the
    import/sync policy and the cover evaluator.
    """

    # Required fields
    external_id: str
    start_time_utc: datetime
    game_date: date
    status: GameStatus
    team_a: str   # away
    team_b: str   # home

    # Optional fields
    team_a_abbrev: Optional[str] = None
    team_b_abbrev: Optional[str] = None
    team_a_conf_id: Optional[str] = None
    team_b_conf_id: Optional[str] = None
    team_a_rank: Optional[int] = None
    team_b_rank: Optional[int] = None
    team_a_record: str = ""
    team_b_record: str = ""
    result_a: Optional[int] = None
    result_b: Optional[int] = None
    spread: Optional[str] = None
    spread_value: Optional[float] = None
    raw: Optional[dict[str, Any]] = None
