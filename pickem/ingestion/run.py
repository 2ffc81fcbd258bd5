"""CLI entrypoint for the scheduled pool jobs."""

from __future__ import annotations

import argparse
import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo

from pickem.config import PoolConfig, load_config
from pickem.db import SessionLocal, init_db
from pickem.ingestion.sync import SyncResult, run_daily_update, run_refresh
from pickem.scoring.ledger import recalculate_season_totals, recount_weekly_wins

JOBS = ("daily", "refresh", "recalculate", "fix-weekly-wins")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run a pick'em pool batch job.",
    )
    parser.add_argument("job", choices=JOBS, help="Job to run.")
    parser.add_argument(
        "--date",
        type=str,
        help="Date to run for in YYYY-MM-DD format (default: today in the feed timezone).",
    )
    return parser.parse_args(argv)


def _resolve_date(args: argparse.Namespace, config: PoolConfig) -> date:
    if args.date:
        try:
            return datetime.strptime(args.date, "%Y-%m-%d").date()
        except ValueError as exc:
            raise SystemExit(f"Invalid date: {args.date}. Use YYYY-MM-DD.") from exc
    return datetime.now(ZoneInfo(config.feed_timezone)).date()


def _log_results(results: dict[str, SyncResult]) -> None:
    for step, result in results.items():
        logging.info(
            "%s: fetched=%s inserted=%s updated=%s skipped=%s removed=%s errors=%s",
            step,
            result.total_fetched,
            result.inserted,
            result.updated,
            result.skipped,
            result.removed,
            result.errors,
        )


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    args = _parse_args(argv)
    config = load_config()
    init_db()
    target_date = _resolve_date(args, config)

    logging.info("Starting job=%s date=%s", args.job, target_date)
    if args.job == "daily":
        _log_results(run_daily_update(config, target_date))
    elif args.job == "refresh":
        _log_results(run_refresh(config, target_date))
    elif args.job == "recalculate":
        with SessionLocal() as db:
            logging.info("Recalculated %s finished games", recalculate_season_totals(db))
    else:
        with SessionLocal() as db:
            logging.info("Corrected weekly_wins on %s profiles", recount_weekly_wins(db))


if __name__ == "__main__":
    main()
