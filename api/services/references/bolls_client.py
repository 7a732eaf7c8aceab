# api/services/references/bolls_client.py
"""
bolls.life API client with an in-memory chapter cache.

Every lookup goes through whole chapters: a passage is a slice of its
chapter, so "John 3:16" and "John 3:17-18" share one upstream request.

Endpoints used:
    - Full chapter: {base}/get-text/{translation}/{book_id}/{chapter}/
    - Lexicon entry: {base}/dictionary-definition/{dictionary}/{strongs}/
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

from core.config import DICTIONARY_CODE, GREEK_TRANSLATION, HEBREW_TRANSLATION
from services.cache import ChapterCache
from utils.errors import UpstreamUnavailable, VerseNotFound
from utils.http_retry import request_with_retry

from .reference_parser import ParsedReference

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://bolls.life"

_STRONGS_TAG = re.compile(r"<S>\s*(\d+)\s*</S>", re.IGNORECASE)
_SUP_TAG = re.compile(r"<sup>.*?</sup>", re.IGNORECASE | re.DOTALL)
_ANY_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class Verse:
    """One verse of normalized text plus the Strong's numbers it carried."""
    number: int
    text: str
    strongs: Tuple[str, ...] = field(default=())

    def to_dict(self) -> Dict[str, Any]:
        return {"verse": self.number, "text": self.text}


def clean_verse_text(raw: str) -> str:
    """
    Remove markup from bolls.life verse text.

    bolls.life returns text with Strong's numbers embedded in tags like:
    "In the beginning<S>7225</S> God<S>430</S> created<S>1254</S>..."

    Strong's tags (and their numbers), footnote superscripts and any
    remaining tags are dropped, then whitespace is collapsed and trimmed.
    """
    text = _STRONGS_TAG.sub("", raw or "")
    text = _SUP_TAG.sub("", text)
    text = _ANY_TAG.sub("", text)
    text = _WHITESPACE.sub(" ", text)
    return text.strip()


def extract_strongs(raw: str) -> Tuple[str, ...]:
    """Strong's numbers in a raw verse, in order of appearance."""
    return tuple(_STRONGS_TAG.findall(raw or ""))


class BollsClient:
    """
    Client for the bolls.life Bible API.

    Chapters are cached by (translation, book, chapter). On cache hit, no
    network request is made. A timeout or non-success status is a hard
    failure for that call.

    Usage:
        client = BollsClient(ChapterCache(250))

        verses = client.fetch_chapter("KJV", 43, 3)
        print(verses[15].text)

        passage = client.fetch_passage("KJV", parse_reference("John 3:16-17"))
    """

    def __init__(
        self,
        cache: ChapterCache,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10,
        max_retries: int = 0,
    ):
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self._request_timeout = timeout
        self._max_retries = max_retries

    def _get_json(self, url: str) -> Any:
        response = request_with_retry(
            "GET",
            url,
            timeout=self._request_timeout,
            max_retries=self._max_retries,
            retry_timeouts=True,
        )
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamUnavailable(f"Invalid JSON from {url}: {e}")

    def fetch_chapter(
        self, translation: str, book_number: int, chapter: int
    ) -> Tuple[Verse, ...]:
        """
        Get every verse of a chapter.

        Args:
            translation: bolls.life translation code (e.g., "KJV", "WLC")
            book_number: Canonical book number (1..66)
            chapter: Chapter number

        Returns:
            Verses in order, with normalized text

        Raises:
            UpstreamTimeout: The provider did not answer within the timeout
            UpstreamUnavailable: Non-success status or unreadable body
        """
        key = ChapterCache.make_key(translation, book_number, chapter)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for {key}")
            return cached

        url = f"{self.base_url}/get-text/{key[0]}/{key[1]}/{key[2]}/"
        logger.info(f"Fetching chapter {url}")
        data = self._get_json(url)

        if not isinstance(data, list):
            raise UpstreamUnavailable(f"Unexpected chapter payload from {url}")

        verses = []
        for item in data:
            if not isinstance(item, dict) or "verse" not in item:
                continue
            raw = item.get("text") or ""
            verses.append(Verse(
                number=int(item["verse"]),
                text=clean_verse_text(raw),
                strongs=extract_strongs(raw),
            ))
        verses.sort(key=lambda v: v.number)
        result = tuple(verses)

        # Chapters past the end of a book come back empty and are not kept
        if result:
            self.cache.put(key, result)
        else:
            logger.debug(f"Empty chapter {key}, not cached")
        return result

    def fetch_passage(
        self, translation: str, ref: ParsedReference
    ) -> Tuple[Verse, ...]:
        """
        Get the verses of a parsed reference.

        Raises:
            VerseNotFound: The chapter has none of the requested verses
        """
        chapter = self.fetch_chapter(translation, ref.book_number, ref.chapter)
        verses = tuple(
            v for v in chapter if ref.start_verse <= v.number <= ref.end_verse
        )
        if not verses:
            raise VerseNotFound(f"{ref.normalized} not found in {translation.upper()}")
        return verses

    def fetch_original(self, ref: ParsedReference) -> Tuple[str, Tuple[Verse, ...]]:
        """
        Get the original-language verses for a reference.

        Hebrew (WLC) for the Old Testament, Greek (TR) for the New.

        Returns:
            (translation code, verses)
        """
        code = HEBREW_TRANSLATION if ref.is_old_testament else GREEK_TRANSLATION
        return code, self.fetch_passage(code, ref)

    def fetch_definition(
        self, strongs: str, dictionary: str = DICTIONARY_CODE
    ) -> Optional[Dict[str, Any]]:
        """
        Look up a lexicon entry by Strong's number ("H7225", "G26").

        Returns:
            {
                "strongs": "H7225",
                "lexeme": "רֵאשִׁית",
                "transliteration": "rê'shîyth",
                "pronunciation": "...",
                "shortDefinition": "beginning",
                "definition": "...",
            }
            or None if the lexicon has no entry
        """
        url = f"{self.base_url}/dictionary-definition/{dictionary}/{strongs}/"
        data = self._get_json(url)
        if isinstance(data, list):
            data = data[0] if data else None
        if not isinstance(data, dict):
            return None

        return {
            "strongs": data.get("topic", strongs),
            "lexeme": data.get("lexeme", ""),
            "transliteration": data.get("transliteration", ""),
            "pronunciation": data.get("pronunciation", ""),
            "shortDefinition": data.get("short_definition", ""),
            "definition": clean_verse_text(data.get("definition", "")),
        }


def passage_text(verses: Iterable[Verse]) -> str:
    """Join verse texts into one passage string."""
    return " ".join(v.text for v in verses if v.text)

