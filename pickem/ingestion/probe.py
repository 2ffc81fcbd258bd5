"""Quick probe: print the normalized games and attributed spreads for a date."""

from __future__ import annotations

import argparse
import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo

from pickem.config import load_config
from pickem.ingestion.feed import fetch_daily_games
from pickem.ingestion.policy import import_rejection_reason


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Fetch the scoreboard for a date and print each game with its spread.",
    )
    parser.add_argument(
        "--date",
        type=str,
        default="today",
        help="Date in YYYY-MM-DD format (default: today).",
    )
    parser.add_argument(
        "--major-only",
        action="store_true",
        help="Only print games that would be imported.",
    )
    return parser.parse_args(argv)


def _resolve_date(raw: str, timezone_name: str) -> date:
    if raw.strip().lower() == "today":
        return datetime.now(ZoneInfo(timezone_name)).date()
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError as exc:
        raise SystemExit(f"Invalid date: {raw}. Use YYYY-MM-DD.") from exc


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    args = _parse_args(argv)
    config = load_config()
    target_date = _resolve_date(args.date, config.feed_timezone)

    games = fetch_daily_games(target_date, config)
    if not games:
        logging.error("No games for %s", target_date)
        raise SystemExit(1)

    shown = 0
    for game in games:
        reason = import_rejection_reason(
            game,
            config.major_conference_ids,
            spread_ceiling=config.max_import_spread,
        )
        if args.major_only and reason:
            continue
        shown += 1
        logging.info(
            "%s @ %s  [%s]  spread=%s  %s",
            game.team_a,
            game.team_b,
            game.status.value,
            game.spread or "-",
            f"skip: {reason}" if reason else "import",
        )
    logging.info("Printed %s of %s games for %s", shown, len(games), target_date)


if __name__ == "__main__":
    main()
