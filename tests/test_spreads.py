from __future__ import annotations

import unittest

from pickem.ingestion.spreads import (
    Quotation,
    Spread,
    SpreadContext,
    TeamRef,
    attribute_identifier,
    consensus_spread,
    find_odds_entry,
    format_spread,
    from_favorite_quotation,
    from_odds_feed,
    from_pickem_quotation,
    from_underdog_quotation,
    parse_spread_text,
    resolve_spread,
)

KANSAS = TeamRef(name="Kansas Jayhawks", abbrev="KU")
DUKE = TeamRef(name="Duke Blue Devils", abbrev="DUKE")


def _context(quotations=None, odds_entry=None) -> SpreadContext:
    return SpreadContext(
        away=KANSAS,
        home=DUKE,
        quotations=list(quotations or []),
        odds_entry=odds_entry,
    )


def _odds_entry(quotes, away="Kansas Jayhawks", home="Duke Blue Devils") -> dict:
    return {
        "away_team": away,
        "home_team": home,
        "bookmakers": [
            {
                "key": f"book{index}",
                "markets": [
                    {
                        "key": "spreads",
                        "outcomes": [{"name": name, "point": point} for name, point in pair],
                    }
                ],
            }
            for index, pair in enumerate(quotes)
        ],
    }


class SpreadTextTests(unittest.TestCase):
    def test_parse_spread_text(self) -> None:
        self.assertEqual(("KAN", -5.5), parse_spread_text("KAN -5.5"))
        self.assertEqual(("Iowa St", 3.0), parse_spread_text("Iowa St +3"))
        self.assertEqual(("DUKE", 0.0), parse_spread_text("DUKE EVEN"))

    def test_parse_spread_text_rejects_malformed(self) -> None:
        self.assertIsNone(parse_spread_text("KAN"))
        self.assertIsNone(parse_spread_text("KAN abc"))
        self.assertIsNone(parse_spread_text(None))

    def test_format_spread(self) -> None:
        self.assertEqual("KAN -5.5", format_spread("KAN", -5.5))
        self.assertEqual("KAN -5", format_spread("KAN", -5.0))
        self.assertEqual("KAN 0", format_spread("KAN", -0.0))
        self.assertEqual("DUKE -4.5", str(Spread("DUKE", -4.5)))


class AttributeIdentifierTests(unittest.TestCase):
    def test_exact_abbreviation(self) -> None:
        self.assertEqual("home", attribute_identifier("DUKE", KANSAS, DUKE))
        self.assertEqual("away", attribute_identifier("KU", KANSAS, DUKE))

    def test_first_token_against_abbreviation(self) -> None:
        self.assertEqual("away", attribute_identifier("KU Jayhawks", KANSAS, DUKE))

    def test_first_word_of_display_name(self) -> None:
        self.assertEqual("away", attribute_identifier("Kansas", KANSAS, DUKE))

    def test_short_name_word_is_ignored(self) -> None:
        away = TeamRef(name="UC Davis Aggies", abbrev="UCD")
        self.assertIsNone(attribute_identifier("UC", away, DUKE))

    def test_name_word_shared_by_both_sides(self) -> None:
        away = TeamRef(name="Kansas State Wildcats", abbrev="KSU")
        self.assertIsNone(attribute_identifier("Kansas", away, KANSAS))

    def test_unknown_identifier(self) -> None:
        self.assertIsNone(attribute_identifier("XYZ", KANSAS, DUKE))
        self.assertIsNone(attribute_identifier("", KANSAS, DUKE))


class ScoreboardQuotationTests(unittest.TestCase):
    def test_favorite_quotation(self) -> None:
        context = _context([Quotation("DUKE -4.5", -4.5)])
        self.assertEqual(Spread("DUKE", -4.5), from_favorite_quotation(context))

    def test_later_favorite_quotation_used_when_first_is_unattributable(self) -> None:
        context = _context([Quotation("ZZZ -3", -3.0), Quotation("DUKE -4.5", -4.5)])
        self.assertEqual(Spread("DUKE", -4.5), from_favorite_quotation(context))

    def test_negative_quotation_preferred_over_positive(self) -> None:
        context = _context([Quotation("KU 4.5", 4.5), Quotation("DUKE -4.5", -4.5)])
        self.assertEqual(Spread("DUKE", -4.5), resolve_spread(context))

    def test_underdog_quotation_is_inverted(self) -> None:
        context = _context([Quotation("KU 4.5", 4.5)])
        self.assertEqual(Spread("DUKE", -4.5), from_underdog_quotation(context))

    def test_underdog_numeric_field_disagreeing_with_text(self) -> None:
        context = _context([Quotation("DUKE -3", 3.0)])
        self.assertEqual(Spread("DUKE", -3.0), from_underdog_quotation(context))

    def test_underdog_strategy_skipped_when_a_favorite_is_quoted(self) -> None:
        context = _context([Quotation("DUKE -4.5", -4.5), Quotation("KU 4.5", 4.5)])
        self.assertIsNone(from_underdog_quotation(context))

    def test_pickem_quotation(self) -> None:
        spread = from_pickem_quotation(_context([Quotation("KU EVEN", 0.0)]))
        self.assertEqual("KU 0", str(spread))

    def test_unattributable_quotation_yields_no_spread(self) -> None:
        self.assertIsNone(resolve_spread(_context([Quotation("ZZZ -3", -3.0)])))

    def test_no_quotations(self) -> None:
        self.assertIsNone(resolve_spread(_context()))

    def test_output_uses_stored_abbreviation_not_feed_text(self) -> None:
        spread = resolve_spread(_context([Quotation("Kansas -2", -2.0)]))
        self.assertEqual("KU -2", str(spread))


class ConsensusTests(unittest.TestCase):
    def test_largest_bucket_wins(self) -> None:
        entry = _odds_entry(
            [
                [("Duke Blue Devils", -4.5), ("Kansas Jayhawks", 4.5)],
                [("Duke Blue Devils", -4.5), ("Kansas Jayhawks", 4.5)],
                [("Duke Blue Devils", -5.0), ("Kansas Jayhawks", 5.0)],
            ]
        )
        self.assertEqual(("Duke Blue Devils", -4.5), consensus_spread(entry))

    def test_tied_buckets_keep_first_seen(self) -> None:
        entry = _odds_entry(
            [
                [("Duke Blue Devils", -3.0), ("Kansas Jayhawks", 3.0)],
                [("Duke Blue Devils", -3.5), ("Kansas Jayhawks", 3.5)],
            ]
        )
        self.assertEqual(("Duke Blue Devils", -3.0), consensus_spread(entry))

    def test_ignores_other_markets_and_bad_points(self) -> None:
        entry = {
            "away_team": "Kansas Jayhawks",
            "home_team": "Duke Blue Devils",
            "bookmakers": [
                {
                    "markets": [
                        {"key": "h2h", "outcomes": [{"name": "Duke Blue Devils", "price": -200}]},
                        {"key": "spreads", "outcomes": [{"name": "Duke Blue Devils", "point": "x"}]},
                    ]
                }
            ],
        }
        self.assertIsNone(consensus_spread(entry))

    def test_odds_feed_preferred_over_scoreboard(self) -> None:
        entry = _odds_entry([[("Duke Blue Devils", -4.5), ("Kansas Jayhawks", 4.5)]])
        context = _context([Quotation("KU -2", -2.0)], odds_entry=entry)
        self.assertEqual(Spread("DUKE", -4.5), resolve_spread(context))

    def test_odds_feed_names_matched_through_aliases(self) -> None:
        away = TeamRef(name="Connecticut Huskies", abbrev="CONN")
        home = TeamRef(name="Marquette Golden Eagles", abbrev="MARQ")
        entry = _odds_entry(
            [[("UConn Huskies", -6.5), ("Marquette Golden Eagles", 6.5)]],
            away="UConn Huskies",
            home="Marquette Golden Eagles",
        )
        context = SpreadContext(away=away, home=home, odds_entry=entry)
        self.assertEqual(Spread("CONN", -6.5), from_odds_feed(context))

    def test_find_odds_entry_accepts_swapped_orientation(self) -> None:
        entry = _odds_entry([], away="Duke", home="Kansas")
        self.assertIs(entry, find_odds_entry([entry], "Kansas Jayhawks", "Duke Blue Devils"))
        self.assertIsNone(find_odds_entry([entry], "Kentucky Wildcats", "Duke Blue Devils"))


if __name__ == "__main__":
    unittest.main()
