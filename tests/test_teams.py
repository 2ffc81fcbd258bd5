from __future__ import annotations

import unittest

from pickem.ingestion.teams import normalize_team_name, strip_mascot, teams_match


class NormalizeTeamNameTests(unittest.TestCase):
    def test_lowercases_strips_punctuation_and_collapses_whitespace(self) -> None:
        self.assertEqual("st johns red storm", normalize_team_name("  St. John's   Red Storm "))

    def test_empty_and_none(self) -> None:
        self.assertEqual("", normalize_team_name(None))
        self.assertEqual("", normalize_team_name(""))

    def test_strip_mascot_prefers_longest_mascot(self) -> None:
        self.assertEqual("california", strip_mascot("california golden bears"))
        self.assertEqual("baylor", strip_mascot("baylor bears"))


class TeamsMatchTests(unittest.TestCase):
    def test_exact_after_normalization(self) -> None:
        self.assertTrue(teams_match("Texas A&M Aggies", "texas am aggies"))

    def test_mascot_stripped_school_names(self) -> None:
        self.assertTrue(teams_match("Duke Blue Devils", "Duke"))
        self.assertTrue(teams_match("Texas Tech", "Texas Tech Red Raiders"))

    def test_alias_groups(self) -> None:
        self.assertTrue(teams_match("UConn", "Connecticut Huskies"))
        self.assertTrue(teams_match("UConn Huskies", "Connecticut Huskies"))
        self.assertTrue(teams_match("Ole Miss Rebels", "Mississippi"))

    def test_two_word_prefix(self) -> None:
        self.assertTrue(teams_match("Iowa State Cyclones", "Iowa State"))
        self.assertTrue(teams_match("Saint Louis Billikens", "Saint Louis U"))

    def test_short_shared_prefix_is_not_a_match(self) -> None:
        self.assertFalse(teams_match("Duke", "Duquesne"))
        self.assertFalse(teams_match("Duke Blue Devils", "Duquesne Dukes"))

    def test_unrelated_schools(self) -> None:
        self.assertFalse(teams_match("Kansas Jayhawks", "Kentucky Wildcats"))
        self.assertFalse(teams_match("", "Kansas"))
        self.assertFalse(teams_match(None, None))

    def test_order_independent(self) -> None:
        pairs = [
            ("UConn", "Connecticut Huskies"),
            ("Duke", "Duquesne"),
            ("Iowa State", "Iowa State Cyclones"),
            ("Miami Hurricanes", "Miami (FL)"),
        ]
        for a, b in pairs:
            with self.subTest(a=a, b=b):
                self.assertEqual(teams_match(a, b), teams_match(b, a))


if __name__ == "__main__":
    unittest.main()
