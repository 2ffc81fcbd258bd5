from __future__ import annotations

import unittest
from datetime import date, datetime, timezone
from types import SimpleNamespace

from pickem.config import MAJOR_CONFERENCE_IDS
from pickem.ingestion.policy import (
    apply_changes,
    apply_live_update,
    has_valid_spread,
    needs_cleanup,
    should_import,
)
from pickem.ingestion.schema import GameIngestDTO, GameStatus


def _dto(**overrides) -> GameIngestDTO:
    values = {
        "external_id": "401",
        "start_time_utc": datetime(2025, 1, 15, 0, 0, tzinfo=timezone.utc),
        "game_date": date(2025, 1, 14),
        "status": GameStatus.IN_PROGRESS,
        "team_a": "Iowa State Cyclones",
        "team_b": "Kansas Jayhawks",
        "team_a_abbrev": "ISU",
        "team_b_abbrev": "KAN",
        "team_a_conf_id": "8",
        "team_b_conf_id": "8",
        "team_a_rank": 12,
        "team_b_rank": 5,
        "result_a": 30,
        "result_b": 35,
        "spread": "KAN -5.5",
        "spread_value": -5.5,
    }
    values.update(overrides)
    return GameIngestDTO(**values)


def _stored(**overrides) -> SimpleNamespace:
    values = {
        "team_a": "Iowa State Cyclones",
        "team_b": "Kansas Jayhawks",
        "team_a_abbrev": "ISU",
        "team_b_abbrev": "KAN",
        "team_a_rank": 12,
        "team_b_rank": 5,
        "team_a_record": "",
        "team_b_record": "",
        "status": "in_progress",
        "result_a": 30,
        "result_b": 35,
        "spread": "KAN -5.5",
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def _swapped(dto: GameIngestDTO, **overrides) -> GameIngestDTO:
    values = dto.model_dump()
    for field in ("team", "team_{}_abbrev", "team_{}_rank", "team_{}_record", "team_{}_conf_id", "result"):
        if field in ("team", "result"):
            a, b = f"{field}_a", f"{field}_b"
        else:
            a, b = field.format("a"), field.format("b")
        values[a], values[b] = values[b], values[a]
    values.update(overrides)
    return GameIngestDTO(**values)


class ShouldImportTests(unittest.TestCase):
    def test_requires_a_major_conference_team(self) -> None:
        self.assertTrue(should_import(_dto(team_b_conf_id="44"), MAJOR_CONFERENCE_IDS))
        self.assertFalse(
            should_import(_dto(team_a_conf_id="44", team_b_conf_id="12"), MAJOR_CONFERENCE_IDS)
        )

    def test_spread_magnitude_ceiling(self) -> None:
        self.assertTrue(should_import(_dto(spread="KAN -12", spread_value=-12.0), MAJOR_CONFERENCE_IDS))
        self.assertFalse(
            should_import(_dto(spread="KAN -12.5", spread_value=-12.5), MAJOR_CONFERENCE_IDS)
        )

    def test_missing_spread_only_rejected_in_refresh_mode(self) -> None:
        game = _dto(spread=None, spread_value=None)
        self.assertTrue(should_import(game, MAJOR_CONFERENCE_IDS))
        self.assertFalse(should_import(game, MAJOR_CONFERENCE_IDS, require_spread=True))


class CleanupPolicyTests(unittest.TestCase):
    def test_has_valid_spread(self) -> None:
        self.assertTrue(has_valid_spread("KAN -3"))
        self.assertFalse(has_valid_spread("KAN -13"))
        self.assertFalse(has_valid_spread(None))

    def test_games_with_picks_are_never_removed(self) -> None:
        self.assertFalse(needs_cleanup(None, has_picks=True))
        self.assertTrue(needs_cleanup(None, has_picks=False))
        self.assertTrue(needs_cleanup("KAN -13", has_picks=False))
        self.assertFalse(needs_cleanup("KAN -3", has_picks=False))


class ApplyLiveUpdateTests(unittest.TestCase):
    def test_no_change_is_a_no_op(self) -> None:
        update = apply_live_update(_stored(), _dto())
        self.assertFalse(update.changed)
        self.assertFalse(update.finished_now)

    def test_score_change(self) -> None:
        update = apply_live_update(_stored(), _dto(result_b=38))
        self.assertEqual({"result_b": 38}, update.changes)

    def test_rank_change_alone_is_ignored(self) -> None:
        self.assertFalse(apply_live_update(_stored(), _dto(team_a_rank=3)).changed)

    def test_swapped_orientation_is_remapped(self) -> None:
        stored = _stored()
        fresh = _swapped(_dto(), result_a=40)  # fresh team_a is Kansas

        update = apply_live_update(stored, fresh)

        self.assertTrue(update.swapped)
        self.assertEqual({"result_b": 40}, update.changes)
        apply_changes(stored, update)
        self.assertEqual(("Iowa State Cyclones", "Kansas Jayhawks"), (stored.team_a, stored.team_b))
        self.assertEqual((30, 40), (stored.result_a, stored.result_b))
        self.assertEqual(("ISU", "KAN"), (stored.team_a_abbrev, stored.team_b_abbrev))

    def test_swapped_but_unchanged_is_a_no_op(self) -> None:
        self.assertFalse(apply_live_update(_stored(), _swapped(_dto())).changed)

    def test_null_fresh_spread_keeps_stored_spread(self) -> None:
        update = apply_live_update(_stored(), _dto(spread=None, spread_value=None, result_a=33))
        self.assertNotIn("spread", update.changes)
        self.assertEqual({"result_a": 33}, update.changes)

    def test_spread_published_later(self) -> None:
        update = apply_live_update(_stored(spread=None, status="scheduled"), _dto(status=GameStatus.SCHEDULED))
        self.assertEqual("KAN -5.5", update.changes["spread"])

    def test_finished_transition_fires_once(self) -> None:
        stored = _stored()
        fresh = _dto(status=GameStatus.FINISHED, result_a=66, result_b=70)

        first = apply_live_update(stored, fresh)
        self.assertTrue(first.finished_now)
        apply_changes(stored, first)

        second = apply_live_update(stored, fresh)
        self.assertFalse(second.changed)
        self.assertFalse(second.finished_now)


if __name__ == "__main__":
    unittest.main()
