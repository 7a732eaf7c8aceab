# api/services/references/reference_parser.py
"""
Scripture reference parser.

Turns free human text into a structured locator:

- Full names: "Genesis 1:1"
- Abbreviations: "Gen 1:1", "Gen. 1:1"
- Numbered books: "1 Corinthians 4:3-6", "1cor 4:3", "I Cor 4:3"
- Multi-word names: "Song of Solomon 2:1"
- No separator: "gen1:1"
- Verse ranges: "Genesis 1:1-3", "Genesis 1:1–3"
"""

import re
from dataclasses import dataclass
from typing import Any, Dict

from utils.errors import InvalidFormat, UnknownBook

from . import book_index


@dataclass(frozen=True)
class ParsedReference:
    """
    A parsed scripture reference.

    Attributes:
        book_number: Canonical book number (1..66)
        book_name: Canonical book name (e.g., "Genesis", "1 John")
        chapter: Chapter number
        start_verse: First verse of the span
        end_verse: Last verse of the span (== start_verse for one verse)
        is_old_testament: Genesis..Malachi
        is_new_testament: Matthew..Revelation
    """
    book_number: int
    book_name: str
    chapter: int
    start_verse: int
    end_verse: int
    is_old_testament: bool
    is_new_testament: bool

    @property
    def normalized(self) -> str:
        """Return normalized reference string."""
        if self.end_verse != self.start_verse:
            return f"{self.book_name} {self.chapter}:{self.start_verse}-{self.end_verse}"
        return f"{self.book_name} {self.chapter}:{self.start_verse}"

    @property
    def verse_count(self) -> int:
        return self.end_verse - self.start_verse + 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reference": self.normalized,
            "bookNumber": self.book_number,
            "bookName": self.book_name,
            "chapter": self.chapter,
            "startVerse": self.start_verse,
            "endVerse": self.end_verse,
            "isOldTestament": self.is_old_testament,
            "isNewTestament": self.is_new_testament,
        }


# The book segment is everything before the trailing
# "<chapter>:<verse>[-<end>]" suffix. It must end in a letter so the
# chapter keeps its full digit run ("gen 11:1" is chapter 11, not "gen 1" 1).
_REFERENCE_PATTERN = re.compile(
    r"^(?P<book>.*[a-z])[.\s]*"
    r"(?P<chapter>\d+)\s*:\s*(?P<start>\d+)"
    r"(?:\s*[-–—]\s*(?P<end>\d+))?$"
)


def parse_reference(raw: str) -> ParsedReference:
    """
    Parse a scripture reference string.

    Args:
        raw: Reference like "1 corinthians 4:3-6"

    Returns:
        ParsedReference

    Raises:
        InvalidFormat: The string is not <book> <chapter>:<verse>[-<end>]
        UnknownBook: The book segment is not a known name or abbreviation
    """
    text = raw.lower().strip() if isinstance(raw, str) else ""

    match = _REFERENCE_PATTERN.match(text)
    if not match:
        raise InvalidFormat(
            f"Could not parse reference '{raw}'. "
            "Expected a format like 'John 3:16' or 'Romans 8:28-30'."
        )

    chapter = int(match.group("chapter"))
    start = int(match.group("start"))
    end = int(match.group("end")) if match.group("end") else start

    if chapter < 1 or start < 1:
        raise InvalidFormat(f"Chapter and verse must be positive in '{raw}'")
    if end < start:
        raise InvalidFormat(f"Verse range ends before it starts in '{raw}'")

    book_segment = match.group("book")
    number = book_index.lookup(book_index.normalize_alias(book_segment))
    if number is None:
        raise UnknownBook(f"Unknown book '{book_segment.strip()}' in '{raw}'")

    return ParsedReference(
        book_number=number,
        book_name=book_index.book_name(number),
        chapter=chapter,
        start_verse=start,
        end_verse=end,
        is_old_testament=book_index.is_old_testament(number),
        is_new_testament=book_index.is_new_testament(number),
    )


def is_valid_reference(raw: str) -> bool:
    """
    Check if a string is a valid scripture reference.

    Returns:
        True if valid reference, False otherwise
    """
    try:
        parse_reference(raw)
    except (InvalidFormat, UnknownBook):
        return False
    return True
