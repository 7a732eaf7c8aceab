# api/services/references/book_index.py
"""
Static index from book names and abbreviations to canonical book numbers.

Book numbers follow the Protestant canon order used by bolls.life:
Genesis is 1, Malachi 39, Matthew 40, Revelation 66.

Lookups expect a pre-normalized alias (see normalize_alias); the index
itself never normalizes.
"""

import re
from typing import Dict, Optional

# Canonical names, index + 1 == book number
BOOKS = (
    "Genesis", "Exodus", "Leviticus", "Numbers", "Deuteronomy",
    "Joshua", "Judges", "Ruth", "1 Samuel", "2 Samuel",
    "1 Kings", "2 Kings", "1 Chronicles", "2 Chronicles", "Ezra",
    "Nehemiah", "Esther", "Job", "Psalms", "Proverbs",
    "Ecclesiastes", "Song of Solomon", "Isaiah", "Jeremiah", "Lamentations",
    "Ezekiel", "Daniel", "Hosea", "Joel", "Amos",
    "Obadiah", "Jonah", "Micah", "Nahum", "Habakkuk",
    "Zephaniah", "Haggai", "Zechariah", "Malachi",
    "Matthew", "Mark", "Luke", "John", "Acts",
    "Romans", "1 Corinthians", "2 Corinthians", "Galatians", "Ephesians",
    "Philippians", "Colossians", "1 Thessalonians", "2 Thessalonians", "1 Timothy",
    "2 Timothy", "Titus", "Philemon", "Hebrews", "James",
    "1 Peter", "2 Peter", "1 John", "2 John", "3 John",
    "Jude", "Revelation",
)

LAST_OLD_TESTAMENT_BOOK = 39

# Extra aliases per canonical name. Numbered books list the stem only;
# numeral and roman prefixes are added when the index is built.
_ABBREVIATIONS = {
    # Torah/Pentateuch
    "Genesis": ("gen", "gn", "ge"),
    "Exodus": ("exod", "ex", "exo"),
    "Leviticus": ("lev", "lv", "le"),
    "Numbers": ("num", "nm", "nu", "nb"),
    "Deuteronomy": ("deut", "dt", "deu", "de"),

    # Historical Books
    "Joshua": ("josh", "jos", "jsh"),
    "Judges": ("judg", "jdg", "jg", "jdgs"),
    "Ruth": ("ru", "rth"),
    "Samuel": ("sam", "sa", "sm"),
    "Kings": ("kgs", "ki", "kin"),
    "Chronicles": ("chr", "ch", "chron"),
    "Ezra": ("ezr",),
    "Nehemiah": ("neh", "ne"),
    "Esther": ("esth", "est", "es"),

    # Wisdom/Poetry
    "Job": ("jb",),
    "Psalms": ("ps", "psalm", "psa", "pss", "psm"),
    "Proverbs": ("prov", "pr", "prv", "pro"),
    "Ecclesiastes": ("eccl", "ecc", "ec", "qoh", "qoheleth", "eccles"),
    "Song of Solomon": (
        "song", "song of songs", "sos", "ss", "canticles", "cant", "sg", "sng",
    ),

    # Major Prophets
    "Isaiah": ("isa", "is"),
    "Jeremiah": ("jer", "je", "jr"),
    "Lamentations": ("lam", "la"),
    "Ezekiel": ("ezek", "eze", "ez", "ezk"),
    "Daniel": ("dan", "dn", "da"),

    # Minor Prophets
    "Hosea": ("hos", "ho"),
    "Joel": ("jl", "joe"),
    "Amos": ("am",),
    "Obadiah": ("obad", "ob", "oba"),
    "Jonah": ("jon", "jnh"),
    "Micah": ("mic", "mi"),
    "Nahum": ("nah", "na"),
    "Habakkuk": ("hab", "hb"),
    "Zephaniah": ("zeph", "zep", "zp"),
    "Haggai": ("hag", "hg"),
    "Zechariah": ("zech", "zec", "zc"),
    "Malachi": ("mal", "ml"),

    # Gospels and Acts
    "Matthew": ("matt", "mt", "mat"),
    "Mark": ("mk", "mr", "mrk"),
    "Luke": ("lk", "lu", "luk"),
    "John": ("jn", "joh", "jhn", "jo"),
    "Acts": ("ac", "act"),

    # Pauline Epistles
    "Romans": ("rom", "ro", "rm"),
    "Corinthians": ("cor", "co"),
    "Galatians": ("gal", "ga"),
    "Ephesians": ("eph", "ep"),
    "Philippians": ("phil", "php", "pp"),
    "Colossians": ("col",),
    "Thessalonians": ("thess", "th", "thes"),
    "Timothy": ("tim", "ti", "tm"),
    "Titus": ("tit",),
    "Philemon": ("philem", "phlm", "phm", "pm"),

    # General Epistles
    "Hebrews": ("heb", "he"),
    "James": ("jas", "jm", "ja"),
    "Peter": ("pet", "pe", "pt"),
    "Jude": ("jd", "jud"),

    # Revelation
    "Revelation": ("rev", "re", "apoc", "apocalypse", "rv", "revelations"),
}

_ROMAN_PREFIXES = {"1": "i", "2": "ii", "3": "iii"}
_NON_ALNUM = re.compile(r"[^a-z0-9 ]+")
_SPACES = re.compile(r"\s+")


def normalize_alias(text: str) -> str:
    """
    Normalize a raw book name for lookup.

    Lowercases, strips everything outside [a-z0-9 ], collapses internal
    whitespace to single spaces and trims.
    """
    key = _NON_ALNUM.sub("", (text or "").lower())
    return _SPACES.sub(" ", key).strip()


def _build_index() -> Dict[str, int]:
    index: Dict[str, int] = {}

    def add(alias: str, number: int) -> None:
        index.setdefault(normalize_alias(alias), number)

    for number, name in enumerate(BOOKS, start=1):
        parts = name.split(" ", 1)
        if parts[0].isdigit():
            numeral, stem = parts
            stems = (stem,) + _ABBREVIATIONS.get(stem, ())
            roman = _ROMAN_PREFIXES[numeral]
            for s in stems:
                s = normalize_alias(s)
                add(f"{numeral} {s}", number)
                add(f"{numeral}{s}", number)
                add(f"{roman} {s}", number)
        else:
            add(name, number)
            add(name.replace(" ", ""), number)
            for abbr in _ABBREVIATIONS.get(name, ()):
                add(abbr, number)

    return index


BOOK_INDEX: Dict[str, int] = _build_index()


def lookup(alias: str) -> Optional[int]:
    """Return the canonical book number for a normalized alias, or None."""
    return BOOK_INDEX.get(alias)


def book_name(number: int) -> str:
    """Canonical English name for a book number (1..66)."""
    if not 1 <= number <= len(BOOKS):
        raise ValueError(f"Book number out of range: {number}")
    return BOOKS[number - 1]


def is_old_testament(number: int) -> bool:
    return 1 <= number <= LAST_OLD_TESTAMENT_BOOK


def is_new_testament(number: int) -> bool:
    return LAST_OLD_TESTAMENT_BOOK < number <= len(BOOKS)
