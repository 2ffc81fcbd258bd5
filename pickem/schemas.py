from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel


class PickOut(BaseModel):
    id: int
    user_id: str
    game_id: int
    selected_team: str
    username: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GameOut(BaseModel):
    id: int
    external_id: str
    team_a: str
    team_b: str
    team_a_abbrev: Optional[str]
    team_b_abbrev: Optional[str]
    team_a_rank: Optional[int]
    team_b_rank: Optional[int]
    team_a_record: str
    team_b_record: str
    start_time_utc: Optional[datetime]
    game_date: Optional[date]
    status: str
    result_a: Optional[int]
    result_b: Optional[int]
    spread: Optional[str]
    picks: list[PickOut] = []

    class Config:
        from_attributes = True


class GamesResponse(BaseModel):
    games: list[GameOut]
    date: str
    count: int
    message: Optional[str] = None


class PickIn(BaseModel):
    user_id: str
    game_id: int
    selected_team: str


class StandingOut(BaseModel):
    rank: int
    user_id: str
    username: str
    wins: int
    losses: int
    weekly_wins: int
    games_count: int = 0


class StandingsResponse(BaseModel):
    window: str
    start: Optional[date] = None
    end: Optional[date] = None
    standings: list[StandingOut]


class WeeklyWinnerOut(BaseModel):
    week_start: date
    week_end: date
    user_id: str
    username: Optional[str] = None
    wins: int
    losses: int


class SyncResultOut(BaseModel):
    total_fetched: int = 0
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    removed: int = 0
    finished: int = 0
    errors: int = 0
