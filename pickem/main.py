from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
import asyncio
import logging
from zoneinfo import ZoneInfo

from fastapi import Depends, FastAPI, HTTPException
from sqlalchemy.orm import Session

from pickem.config import PoolConfig, load_config
from pickem.db import get_db, init_db
from pickem.ingestion.schema import GameStatus
from pickem.ingestion.sync import import_games_for_date, sync_active_games
from pickem.live import LiveScorePoller, as_utc
from pickem.log_buffer import get_buffer_handler, install_buffer_handler
from pickem.models import Game, Pick, Profile, WeeklyWinner
from pickem.schemas import (
    GameOut,
    GamesResponse,
    PickIn,
    PickOut,
    StandingOut,
    StandingsResponse,
    SyncResultOut,
    WeeklyWinnerOut,
)
from pickem.scoring.ledger import finalize_week, recalculate_season_totals, recount_weekly_wins
from pickem.scoring.standings import Window, WindowKind, compute_standings

app = FastAPI(title="College Basketball Pick'em")
logger = logging.getLogger(__name__)

WINDOW_ALIASES = {
    "day": WindowKind.DAY,
    "daily": WindowKind.DAY,
    "week": WindowKind.WEEK,
    "weekly": WindowKind.WEEK,
    "season": WindowKind.SEASON,
}

_config: PoolConfig | None = None
_live_task: asyncio.Task | None = None
_auto_ingest_task: asyncio.Task | None = None
_stop: asyncio.Event | None = None


def get_config() -> PoolConfig:
    global _config
    if _config is None:
        _config = load_config()
    return _config


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def _auto_ingest_loop(config: PoolConfig, stop: asyncio.Event) -> None:
    interval_minutes = config.auto_ingest_interval_minutes
    logger.info("Auto-ingest enabled: interval=%s minutes", interval_minutes)
    while not stop.is_set():
        try:
            today = datetime.now(ZoneInfo(config.feed_timezone)).date()
            result = await asyncio.to_thread(import_games_for_date, today, config)
            logger.info(
                "Auto-ingest done: fetched=%s inserted=%s skipped=%s errors=%s",
                result.total_fetched,
                result.inserted,
                result.skipped,
                result.errors,
            )
        except Exception:
            logger.exception("Auto-ingest failed.")
        try:
            await asyncio.wait_for(stop.wait(), timeout=interval_minutes * 60)
        except asyncio.TimeoutError:
            continue


@app.on_event("startup")
async def start_background_tasks() -> None:
    global _live_task, _auto_ingest_task, _stop
    install_buffer_handler()
    init_db()
    config = get_config()
    logger.info("App starting up, live polling every %s seconds", config.live_poll_seconds)
    _stop = asyncio.Event()
    _live_task = asyncio.create_task(LiveScorePoller(config).run(_stop))
    if config.auto_ingest_interval_minutes >= 1:
        _auto_ingest_task = asyncio.create_task(_auto_ingest_loop(config, _stop))


@app.on_event("shutdown")
async def stop_background_tasks() -> None:
    global _live_task, _auto_ingest_task, _stop
    if _stop:
        _stop.set()
    for task in (_live_task, _auto_ingest_task):
        if task:
            await task
    _live_task = None
    _auto_ingest_task = None
    _stop = None


def parse_query_date(value: str | None, config: PoolConfig) -> date:
    if not value:
        return datetime.now(ZoneInfo(config.feed_timezone)).date()
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="date must be YYYY-MM-DD") from exc


def _pick_out(pick: Pick) -> PickOut:
    out = PickOut.model_validate(pick)
    out.username = pick.profile.display_name if pick.profile else None
    return out


@app.get("/api/games", response_model=GamesResponse)
def api_games(
    date: str | None = None,
    db: Session = Depends(get_db),
    config: PoolConfig = Depends(get_config),
):
    query_date = parse_query_date(date, config)
    games = (
        db.query(Game)
        .filter(Game.game_date == query_date)
        .order_by(Game.start_time_utc.asc())
        .all()
    )
    out = []
    for game in games:
        game_out = GameOut.model_validate(game)
        game_out.picks = [_pick_out(pick) for pick in game.picks]
        out.append(game_out)

    return GamesResponse(
        games=out,
        date=query_date.isoformat(),
        count=len(out),
        message="No games found for requested date." if not out else None,
    )


@app.post("/api/picks", response_model=PickOut)
def api_submit_pick(payload: PickIn, db: Session = Depends(get_db)):
    game = db.query(Game).filter(Game.id == payload.game_id).one_or_none()
    if not game:
        raise HTTPException(status_code=404, detail="Game not found")
    profile = db.query(Profile).filter(Profile.id == payload.user_id).one_or_none()
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")

    if payload.selected_team not in (game.team_a, game.team_b):
        raise HTTPException(status_code=400, detail="selected_team must be one of the game's teams")

    start = as_utc(game.start_time_utc)
    if game.status != GameStatus.SCHEDULED.value or (start is not None and utcnow() >= start):
        raise HTTPException(status_code=409, detail="Game has already started")

    pick = (
        db.query(Pick)
        .filter(Pick.user_id == payload.user_id, Pick.game_id == payload.game_id)
        .one_or_none()
    )
    if pick is None:
        pick = Pick(user_id=payload.user_id, game_id=payload.game_id)
        db.add(pick)
    pick.selected_team = payload.selected_team
    db.commit()
    db.refresh(pick)
    logger.info(
        "Pick saved user=%s game=%s team=%s", profile.display_name, game.id, pick.selected_team
    )
    return _pick_out(pick)


@app.get("/api/standings", response_model=StandingsResponse)
def api_standings(
    window: str = "season",
    date: str | None = None,
    db: Session = Depends(get_db),
    config: PoolConfig = Depends(get_config),
):
    kind = WINDOW_ALIASES.get(window.strip().lower())
    if kind is None:
        raise HTTPException(status_code=400, detail="window must be day, week or season")
    selected = Window.for_kind(kind, parse_query_date(date, config))

    profiles = db.query(Profile).order_by(Profile.created_at.asc(), Profile.id.asc()).all()
    games: list[Game] = []
    picks: list[Pick] = []
    if kind is not WindowKind.SEASON:
        games = (
            db.query(Game)
            .filter(
                Game.game_date >= selected.start,
                Game.game_date <= selected.end,
                Game.status == GameStatus.FINISHED.value,
            )
            .all()
        )
        if games:
            picks = (
                db.query(Pick)
                .filter(Pick.game_id.in_([game.id for game in games]))
                .order_by(Pick.id.asc())
                .all()
            )

    entries = compute_standings(profiles, games, picks, selected)
    return StandingsResponse(
        window=kind.value,
        start=selected.start,
        end=selected.end,
        standings=[
            StandingOut(
                rank=index,
                user_id=entry.user_id,
                username=entry.username,
                wins=entry.wins,
                losses=entry.losses,
                weekly_wins=entry.weekly_wins,
                games_count=entry.games_count,
            )
            for index, entry in enumerate(entries, start=1)
        ],
    )


@app.get("/api/weekly-winners", response_model=list[WeeklyWinnerOut])
def api_weekly_winners(db: Session = Depends(get_db)):
    rows = db.query(WeeklyWinner).order_by(WeeklyWinner.week_start.desc()).all()
    return [
        WeeklyWinnerOut(
            week_start=row.week_start,
            week_end=row.week_end,
            user_id=row.user_id,
            username=row.profile.display_name if row.profile else None,
            wins=row.wins,
            losses=row.losses,
        )
        for row in rows
    ]


@app.post("/api/admin/import", response_model=SyncResultOut)
def api_admin_import(
    date: str | None = None,
    refresh: bool = False,
    config: PoolConfig = Depends(get_config),
):
    result = import_games_for_date(parse_query_date(date, config), config, refresh=refresh)
    return SyncResultOut(**result.as_dict())


@app.post("/api/admin/sync", response_model=SyncResultOut)
def api_admin_sync(config: PoolConfig = Depends(get_config)):
    return SyncResultOut(**sync_active_games(config).as_dict())


@app.post("/api/admin/recalculate")
def api_admin_recalculate(db: Session = Depends(get_db)):
    return {"ok": True, "games": recalculate_season_totals(db)}


@app.post("/api/admin/finalize-week")
def api_admin_finalize_week(
    date: str | None = None,
    db: Session = Depends(get_db),
    config: PoolConfig = Depends(get_config),
):
    today = utcnow().astimezone(ZoneInfo(config.feed_timezone)).date()
    day = parse_query_date(date, config) if date else today - timedelta(days=7)
    champion = finalize_week(db, day, today=today)
    if champion is None:
        return {"ok": True, "champion": None}
    return {
        "ok": True,
        "champion": {
            "user_id": champion.user_id,
            "wins": champion.wins,
            "losses": champion.losses,
        },
    }


@app.post("/api/admin/fix-weekly-wins")
def api_admin_fix_weekly_wins(db: Session = Depends(get_db)):
    return {"ok": True, "corrected": recount_weekly_wins(db)}


@app.get("/api/logs")
def api_logs(limit: int = 100, level: str | None = None):
    handler = get_buffer_handler()
    return {"entries": handler.entries(limit=limit, level=level)}
