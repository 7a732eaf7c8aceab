# api/services/references/__init__.py
"""
Scripture reference resolution and text retrieval.

This package provides:
- Book index: book names/abbreviations -> canonical book numbers
- ParsedReference: Structured scripture reference
- parse_reference: Parse human-readable references
- BollsClient: Chapter/passage text from bolls.life with chapter caching
- Verse: One verse of normalized text
"""

from .book_index import (
    BOOKS,
    book_name,
    is_new_testament,
    is_old_testament,
    lookup,
    normalize_alias,
)
from .reference_parser import (
    ParsedReference,
    parse_reference,
    is_valid_reference,
)
from .bolls_client import (
    BollsClient,
    Verse,
    clean_verse_text,
    extract_strongs,
    passage_text,
)

__all__ = [
    # Book index
    "BOOKS",
    "book_name",
    "is_new_testament",
    "is_old_testament",
    "lookup",
    "normalize_alias",
    # Reference parsing
    "ParsedReference",
    "parse_reference",
    "is_valid_reference",
    # Text retrieval
    "BollsClient",
    "Verse",
    "clean_verse_text",
    "extract_strongs",
    "passage_text",
]
