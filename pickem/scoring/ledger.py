"""Store-facing scoring jobs: point accrual, season recompute, weekly champions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from pickem.ingestion.schema import GameStatus
from pickem.models import Game, Pick, Profile, WeeklyWinner
from pickem.scoring.cover import CoverResult, evaluate_cover
from pickem.scoring.standings import (
    Champion,
    select_weekly_champion,
    tally_records,
    week_bounds,
)

logger = logging.getLogger(__name__)


@dataclass
class AccrualResult:
    wins: int = 0
    losses: int = 0
    undetermined: int = 0
    errors: int = 0


def accrue_points_for_game(db: Session, game: Any) -> AccrualResult:
    """Add one win or loss to each picker's season counters for a finished game.

    Counters are incremented in SQL so overlapping writers cannot lose an
    update. Callers must invoke this once per transition into finished.
    """

    result = AccrualResult()
    picks = db.query(Pick).filter(Pick.game_id == game.id).all()
    for pick in picks:
        outcome = evaluate_cover(game, pick.selected_team)
        if outcome is CoverResult.UNDETERMINED:
            result.undetermined += 1
            continue
        if outcome is CoverResult.COVERED:
            values = {
                "total_wins": Profile.total_wins + 1,
                "total_points": Profile.total_points + 1,
            }
        else:
            values = {"total_losses": Profile.total_losses + 1}
        try:
            db.execute(update(Profile).where(Profile.id == pick.user_id).values(**values))
            db.commit()
        except Exception:
            db.rollback()
            result.errors += 1
            logger.exception(
                "Failed updating profile user_id=%s for game id=%s", pick.user_id, game.id
            )
            continue
        if outcome is CoverResult.COVERED:
            result.wins += 1
        else:
            result.losses += 1

    logger.info(
        "Accrued game id=%s wins=%s losses=%s undetermined=%s errors=%s",
        game.id,
        result.wins,
        result.losses,
        result.undetermined,
        result.errors,
    )
    return result


def recalculate_season_totals(db: Session) -> int:
    """Reset every profile's season counters and re-accrue all finished games."""

    db.execute(update(Profile).values(total_wins=0, total_losses=0, total_points=0))
    db.commit()

    games = db.query(Game).filter(Game.status == GameStatus.FINISHED.value).all()
    for game in games:
        accrue_points_for_game(db, game)
    logger.info("Recalculated season totals over %s finished games", len(games))
    return len(games)


def finalize_week(db: Session, day: date, *, today: date) -> Champion | None:
    """Record the champion of the Monday-Sunday week containing ``day``.

    Does nothing when the week has not ended before ``today``, already has a
    winner row, has no finished games, or nobody won a pick.
    """

    week_start, week_end = week_bounds(day)
    logger.info("Checking weekly winner for %s to %s", week_start, week_end)

    if week_end >= today:
        logger.info("Week %s to %s has not ended yet", week_start, week_end)
        return None

    existing = db.query(WeeklyWinner).filter(WeeklyWinner.week_start == week_start).one_or_none()
    if existing:
        logger.info("Weekly winner already recorded for week_start=%s", week_start)
        return None

    games = (
        db.query(Game)
        .filter(
            Game.game_date >= week_start,
            Game.game_date <= week_end,
            Game.status == GameStatus.FINISHED.value,
        )
        .all()
    )
    if not games:
        logger.info("No finished games for week_start=%s", week_start)
        return None

    picks = (
        db.query(Pick)
        .filter(Pick.game_id.in_([game.id for game in games]))
        .order_by(Pick.id.asc())
        .all()
    )
    champion = select_weekly_champion(tally_records(games, picks))
    if champion is None:
        logger.info("No weekly winner for week_start=%s (no wins)", week_start)
        return None

    db.add(
        WeeklyWinner(
            week_start=week_start,
            week_end=week_end,
            user_id=champion.user_id,
            wins=champion.wins,
            losses=champion.losses,
        )
    )
    db.execute(
        update(Profile)
        .where(Profile.id == champion.user_id)
        .values(weekly_wins=Profile.weekly_wins + 1)
    )
    db.commit()
    logger.info(
        "Weekly winner week_start=%s user_id=%s record=%s-%s",
        week_start,
        champion.user_id,
        champion.wins,
        champion.losses,
    )
    return champion


def recount_weekly_wins(db: Session) -> int:
    """Set each profile's weekly_wins to its number of recorded weekly titles.

    Returns how many profiles were corrected.
    """

    counts = dict(
        db.query(WeeklyWinner.user_id, func.count(WeeklyWinner.id))
        .group_by(WeeklyWinner.user_id)
        .all()
    )
    corrected = 0
    for profile in db.query(Profile).all():
        expected = counts.get(profile.id, 0)
        if (profile.weekly_wins or 0) != expected:
            logger.info(
                "weekly_wins %s: %s -> %s", profile.display_name, profile.weekly_wins, expected
            )
            profile.weekly_wins = expected
            corrected += 1
    db.commit()
    return corrected
