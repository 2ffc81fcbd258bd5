"""Decide whether two differently spelled team references denote the same school.

The scoreboard feed uses full display names ("Connecticut Huskies") while the
odds feed uses its own vocabulary ("UConn Huskies"). Matching is tried in a
fixed order and the first rule that fires wins:

1. normalized names are equal
2. school names (mascot suffix removed) are equal
3. one side appears in the other's alias group
4. both names share their first two words
5. the shorter name is a whole-word prefix of the longer one
"""

from __future__ import annotations

import re
from functools import lru_cache

MIN_SCHOOL_NAME_LENGTH = 4

MASCOTS = (
    "Aggies", "Anteaters", "Aztecs", "Badgers", "Bearcats", "Bears", "Beavers",
    "Billikens", "Bison", "Blue Demons", "Blue Devils", "Blue Jays", "Bluejays",
    "Boilermakers", "Broncos", "Bruins", "Buckeyes", "Buffaloes", "Bulldogs",
    "Bulls", "Cardinal", "Cardinals", "Catamounts", "Cavaliers", "Chanticleers",
    "Commodores", "Cornhuskers", "Cougars", "Cowboys", "Crimson Tide",
    "Cyclones", "Demon Deacons", "Ducks", "Dukes", "Eagles", "Explorers",
    "Falcons", "Fighting Illini", "Fighting Irish", "Flyers", "Friars",
    "Gaels", "Gamecocks", "Gators", "Golden Bears", "Golden Eagles",
    "Golden Gophers", "Golden Hurricane", "Gophers", "Hawkeyes", "Hokies",
    "Hoosiers", "Horned Frogs", "Hoyas", "Hurricanes", "Huskies", "Jayhawks",
    "Knights", "Lobos", "Longhorns", "Mountaineers", "Musketeers",
    "Mustangs", "Nittany Lions", "Orange", "Owls", "Panthers", "Pirates",
    "Rams", "Razorbacks", "Rebels", "Red Raiders", "Red Storm", "RedHawks",
    "Runnin' Rebels", "Scarlet Knights", "Seminoles", "Shockers", "Sooners",
    "Spartans", "Spiders", "Sun Devils", "Tar Heels", "Terrapins",
    "Thundering Herd", "Tigers", "Trojans", "Utes", "Volunteers", "Wildcats",
    "Wolf Pack", "Wolfpack", "Wolverines", "Yellow Jackets",
)

# Each group lists normalized spellings of one school.
ALIAS_GROUPS = (
    ("uconn", "uconn huskies", "connecticut", "connecticut huskies"),
    ("unc", "north carolina", "north carolina tar heels"),
    ("nc state", "north carolina state", "nc state wolfpack"),
    ("ole miss", "mississippi", "ole miss rebels", "mississippi rebels"),
    ("lsu", "louisiana state", "lsu tigers"),
    ("smu", "southern methodist", "smu mustangs"),
    ("tcu", "texas christian", "tcu horned frogs"),
    ("byu", "brigham young", "byu cougars"),
    ("ucf", "central florida", "ucf knights"),
    ("usc", "southern california", "usc trojans"),
    ("ucla", "ucla bruins"),
    ("vcu", "virginia commonwealth", "vcu rams"),
    ("unlv", "nevada las vegas", "unlv rebels"),
    ("pitt", "pittsburgh", "pitt panthers", "pittsburgh panthers"),
    ("miami", "miami fl", "miami hurricanes", "miami fl hurricanes"),
    ("miami oh", "miami ohio", "miami oh redhawks"),
    ("st johns", "st johns red storm", "saint johns"),
    ("saint marys", "st marys", "saint marys gaels", "st marys gaels"),
    ("st josephs", "saint josephs", "saint josephs hawks"),
    ("umass", "massachusetts", "massachusetts minutemen"),
    ("gw", "george washington", "george washington revolutionaries"),
    ("etsu", "east tennessee state", "east tennessee st"),
    ("app state", "appalachian state", "appalachian st"),
    ("san diego st", "san diego state", "san diego state aztecs"),
    ("fau", "florida atlantic", "florida atlantic owls"),
    ("fiu", "florida international", "florida international panthers"),
    ("utep", "texas el paso", "utep miners"),
    ("utsa", "texas san antonio", "utsa roadrunners"),
)

_NON_ALNUM_RE = re.compile(r"[^a-z0-9 ]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_team_name(name: str | None) -> str:
    """Lowercase, drop everything outside [a-z0-9 ], collapse whitespace."""
    if not name:
        return ""
    cleaned = _NON_ALNUM_RE.sub("", str(name).lower())
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def _build_mascot_re() -> re.Pattern[str]:
    normalized = {normalize_team_name(mascot) for mascot in MASCOTS}
    # Longest first so "golden bears" wins over "bears".
    ordered = sorted((m for m in normalized if m), key=len, reverse=True)
    return re.compile(r"(?:^|\s)(?:%s)$" % "|".join(re.escape(m) for m in ordered))


_MASCOT_RE = _build_mascot_re()


def _build_aliases() -> dict[str, frozenset[str]]:
    aliases: dict[str, set[str]] = {}
    for group in ALIAS_GROUPS:
        members = {normalize_team_name(name) for name in group}
        for member in members:
            aliases.setdefault(member, set()).update(members - {member})
    return {key: frozenset(value) for key, value in aliases.items()}


_ALIASES = _build_aliases()


def strip_mascot(normalized_name: str) -> str:
    """Return the school part of an already-normalized name."""
    return _MASCOT_RE.sub("", normalized_name).strip()


def _forms(normalized_name: str) -> set[str]:
    forms = {normalized_name}
    school = strip_mascot(normalized_name)
    if school:
        forms.add(school)
    return forms


def _aliases_for(forms: set[str]) -> set[str]:
    found: set[str] = set()
    for form in forms:
        found.update(_ALIASES.get(form, ()))
    return found


@lru_cache(maxsize=4096)
def _match_normalized(a: str, b: str) -> bool:
    if not a or not b:
        return False
    if a == b:
        return True

    school_a = strip_mascot(a)
    school_b = strip_mascot(b)
    if (
        school_a
        and school_b
        and len(school_a) >= MIN_SCHOOL_NAME_LENGTH
        and school_a == school_b
    ):
        return True

    forms_a = _forms(a)
    forms_b = _forms(b)
    if _aliases_for(forms_a) & forms_b or _aliases_for(forms_b) & forms_a:
        return True

    tokens_a = a.split(" ")
    tokens_b = b.split(" ")
    if len(tokens_a) >= 2 and len(tokens_b) >= 2 and tokens_a[:2] == tokens_b[:2]:
        return True

    shorter, longer = sorted((a, b), key=len)
    if len(shorter) >= MIN_SCHOOL_NAME_LENGTH and longer.startswith(shorter + " "):
        return True

    return False


def teams_match(name_a: str | None, name_b: str | None) -> bool:
    """Return True when both strings refer to the same team."""
    a = normalize_team_name(name_a)
    b = normalize_team_name(name_b)
    # Sorted key keeps the cache order-independent.
    return _match_normalized(*sorted((a, b)))
