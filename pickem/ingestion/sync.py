"""Sync games from the feed into the local database."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import Iterable

from sqlalchemy import update
from sqlalchemy.orm import Session

from pickem.config import PoolConfig
from pickem.db import SessionLocal
from pickem.ingestion.feed import fetch_daily_games
from pickem.ingestion.policy import (
    apply_changes,
    apply_live_update,
    import_rejection_reason,
    needs_cleanup,
)
from pickem.ingestion.schema import GameIngestDTO, GameStatus
from pickem.models import Game, Pick
from pickem.scoring.ledger import accrue_points_for_game, finalize_week

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    total_fetched: int = 0
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    removed: int = 0
    finished: int = 0
    errors: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


def _insert_game(db: Session, dto: GameIngestDTO) -> Game:
    game = Game(
        external_id=dto.external_id,
        team_a=dto.team_a,
        team_b=dto.team_b,
        team_a_abbrev=dto.team_a_abbrev,
        team_b_abbrev=dto.team_b_abbrev,
        team_a_conf_id=dto.team_a_conf_id,
        team_b_conf_id=dto.team_b_conf_id,
        team_a_rank=dto.team_a_rank,
        team_b_rank=dto.team_b_rank,
        team_a_record=dto.team_a_record,
        team_b_record=dto.team_b_record,
        start_time_utc=dto.start_time_utc,
        game_date=dto.game_date,
        status=dto.status.value,
        result_a=dto.result_a,
        result_b=dto.result_b,
        spread=dto.spread,
    )
    db.add(game)
    return game


def _has_picks(db: Session, game_id: int) -> bool:
    return db.query(Pick.id).filter(Pick.game_id == game_id).first() is not None


def _claim_finish(db: Session, game_id: int) -> bool:
    """Flip a game to finished unless another pass already did.

    Only the pass whose UPDATE matched the row may accrue points for it.
    """

    claimed = db.execute(
        update(Game)
        .where(Game.id == game_id, Game.status != GameStatus.FINISHED.value)
        .values(status=GameStatus.FINISHED.value)
        .execution_options(synchronize_session=False)
    )
    return claimed.rowcount == 1


def _apply_fresh(db: Session, stored: Game, dto: GameIngestDTO, result: SyncResult) -> None:
    """Apply the live-update policy to one stored game and accrue on finish."""

    game_update = apply_live_update(stored, dto)
    if not game_update.changed:
        result.skipped += 1
        return

    if game_update.finished_now and not _claim_finish(db, stored.id):
        db.rollback()
        result.skipped += 1
        logger.info("Game external_id=%s already finished by another pass", stored.external_id)
        return

    apply_changes(stored, game_update)
    db.commit()
    result.updated += 1
    logger.info(
        "Updated game external_id=%s fields=%s swapped=%s",
        stored.external_id,
        ",".join(sorted(game_update.changes)),
        game_update.swapped,
    )
    if game_update.finished_now:
        result.finished += 1
        accrue_points_for_game(db, stored)


def import_games(
    db: Session,
    games: Iterable[GameIngestDTO],
    config: PoolConfig,
    result: SyncResult,
    *,
    refresh: bool = False,
) -> None:
    """Insert games that pass the import filter.

    In refresh mode a missing spread rejects the game and already stored games
    are brought up to date through the live-update policy. Finished games are
    settled and never touched again.
    """

    for dto in games:
        try:
            reason = import_rejection_reason(
                dto,
                config.major_conference_ids,
                spread_ceiling=config.max_import_spread,
                require_spread=refresh,
            )
            if reason:
                result.skipped += 1
                logger.info("Skipping %s vs %s: %s", dto.team_a, dto.team_b, reason)
                continue

            existing = db.query(Game).filter(Game.external_id == dto.external_id).one_or_none()
            if existing is None:
                _insert_game(db, dto)
                db.commit()
                result.inserted += 1
                logger.info(
                    "Inserted game external_id=%s %s vs %s spread=%s",
                    dto.external_id,
                    dto.team_a,
                    dto.team_b,
                    dto.spread,
                )
            elif refresh and existing.status != GameStatus.FINISHED.value:
                _apply_fresh(db, existing, dto, result)
            else:
                result.skipped += 1
        except Exception:
            db.rollback()
            result.errors += 1
            logger.exception("Failed importing game external_id=%s", dto.external_id)


def import_games_for_date(
    game_date: date,
    config: PoolConfig,
    *,
    refresh: bool = False,
) -> SyncResult:
    """Fetch, filter and store the games scheduled on ``game_date``."""

    result = SyncResult()
    games = fetch_daily_games(game_date, config)
    result.total_fetched = len(games)
    if not games:
        logger.info("No games found for %s", game_date)
        return result

    with SessionLocal() as db:
        import_games(db, games, config, result, refresh=refresh)

    logger.info(
        "Import done date=%s refresh=%s: fetched=%s inserted=%s updated=%s skipped=%s errors=%s",
        game_date,
        refresh,
        result.total_fetched,
        result.inserted,
        result.updated,
        result.skipped,
        result.errors,
    )
    return result


def sync_stored_games(
    db: Session,
    stored_games: list[Game],
    fresh_games: Iterable[GameIngestDTO],
    config: PoolConfig,
    result: SyncResult,
) -> None:
    by_external_id = {game.external_id: game for game in stored_games}
    for dto in fresh_games:
        stored = by_external_id.get(dto.external_id)
        if stored is None:
            continue
        try:
            if (
                stored.spread is None
                and dto.spread_value is not None
                and abs(dto.spread_value) > config.max_import_spread
                and not _has_picks(db, stored.id)
            ):
                logger.info(
                    "Removing %s vs %s: spread %s exceeds %s",
                    stored.team_a,
                    stored.team_b,
                    dto.spread,
                    config.max_import_spread,
                )
                db.delete(stored)
                db.commit()
                result.removed += 1
                continue
            _apply_fresh(db, stored, dto, result)
        except Exception:
            db.rollback()
            result.errors += 1
            logger.exception("Failed syncing game external_id=%s", dto.external_id)


def sync_active_games(config: PoolConfig, *, game_date: date | None = None) -> SyncResult:
    """Bring every unfinished stored game up to date with the feed.

    Games are grouped by game_date so the feed is fetched once per date.
    ``game_date`` restricts the pass to a single date.
    """

    result = SyncResult()
    with SessionLocal() as db:
        query = db.query(Game).filter(
            Game.status != GameStatus.FINISHED.value,
            Game.game_date.isnot(None),
        )
        if game_date is not None:
            query = query.filter(Game.game_date == game_date)
        active_games = query.all()
        if not active_games:
            logger.info("No active games to sync.")
            return result

        by_date: dict[date, list[Game]] = defaultdict(list)
        for game in active_games:
            by_date[game.game_date].append(game)

        for day in sorted(by_date):
            fresh = fetch_daily_games(day, config)
            result.total_fetched += len(fresh)
            sync_stored_games(db, by_date[day], fresh, config, result)

    logger.info(
        "Sync done: fetched=%s updated=%s skipped=%s removed=%s finished=%s errors=%s",
        result.total_fetched,
        result.updated,
        result.skipped,
        result.removed,
        result.finished,
        result.errors,
    )
    return result


def remove_games_without_spread(game_date: date, config: PoolConfig) -> SyncResult:
    """Delete games on ``game_date`` lacking a valid spread, unless they have picks."""

    result = SyncResult()
    with SessionLocal() as db:
        games = db.query(Game).filter(Game.game_date == game_date).all()
        for game in games:
            try:
                if not needs_cleanup(
                    game.spread,
                    has_picks=_has_picks(db, game.id),
                    spread_ceiling=config.max_import_spread,
                ):
                    result.skipped += 1
                    continue
                logger.info("Removing %s vs %s (no valid spread)", game.team_a, game.team_b)
                db.delete(game)
                db.commit()
                result.removed += 1
            except Exception:
                db.rollback()
                result.errors += 1
                logger.exception("Failed removing game id=%s", game.id)

    logger.info(
        "Cleanup done date=%s: removed=%s kept=%s errors=%s",
        game_date,
        result.removed,
        result.skipped,
        result.errors,
    )
    return result


def run_daily_update(config: PoolConfig, today: date) -> dict[str, SyncResult]:
    """Nightly batch: catch up stored games, import today's slate, close last week."""

    results = {
        "sync": sync_active_games(config),
        "import": import_games_for_date(today, config),
    }
    with SessionLocal() as db:
        finalize_week(db, today - timedelta(days=7), today=today)
    return results


def run_refresh(config: PoolConfig, today: date) -> dict[str, SyncResult]:
    """Strict re-import of today's games followed by spread cleanup."""

    return {
        "import": import_games_for_date(today, config, refresh=True),
        "cleanup": remove_games_without_spread(today, config),
    }
