# api/services/interpretation_service.py
"""
Interpretation service: the request pipeline behind every endpoint.

Each operation runs strictly in order:
    parse reference -> validate translation -> fetch text
    -> (optional) original language -> LLM -> extract + validate payload

Reference and translation errors are raised before any network call.
"""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from core import prompt as prompts
from core.config import ALLOWED_TRANSLATIONS, Settings
from services.cache import DailyResultCache
from services.llm_service import LLMProvider
from services.payloads import (
    CrossReferencesPayload,
    DevotionalPayload,
    KeyWordsPayload,
    PassagesPayload,
    WordStudyPayload,
    parse_llm_payload,
)
from services.references import (
    BOOKS,
    BollsClient,
    ParsedReference,
    parse_reference,
    passage_text,
)
from services.usage_tracker import UsageTracker
from utils.errors import (
    InterpreterError,
    InvalidFormat,
    UnknownBook,
    UnsupportedTranslation,
    VerseNotFound,
)

logger = logging.getLogger(__name__)

# Definitions looked up per analysis
MAX_DEFINITIONS = 8


def resolve_translation(
    code: Optional[str],
    default: str,
    allowed: Iterable[str] = ALLOWED_TRANSLATIONS,
) -> str:
    """
    Normalize a translation code against the allow-list.

    Blank -> default. Non-strings and anything not on the list raise
    UnsupportedTranslation.
    """
    if code is not None and not isinstance(code, str):
        raise UnsupportedTranslation(f"Translation must be a code like 'KJV', got {code!r}")
    code = (code or "").strip().upper() or default.upper()
    if code not in allowed:
        raise UnsupportedTranslation(
            f"Translation '{code}' is not supported. "
            f"Choose one of: {', '.join(allowed)}"
        )
    return code


class InterpretationService:
    """
    Single entry point for passage lookup and AI interpretation.

    Usage:
        service = InterpretationService(bolls, claude, tracker, DailyResultCache(), settings)

        result = service.analyze("Romans 8:28", translation="ESV")
        print(result["interpretation"])
        for word in result["keyWords"]:
            print(word["original"], word["meaning"])
    """

    def __init__(
        self,
        bolls: BollsClient,
        llm: LLMProvider,
        usage: UsageTracker,
        daily_cache: DailyResultCache,
        settings: Settings,
    ):
        self.bolls = bolls
        self.llm = llm
        self.usage = usage
        self.daily_cache = daily_cache
        self.settings = settings

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _translation(self, code: Optional[str]) -> str:
        return resolve_translation(code, self.settings.default_translation)

    def _ask(self, endpoint: str, prompt: str, payload_cls):
        response = self.llm.complete(prompt, max_tokens=self.settings.llm_max_tokens)
        usage = self.usage.record(endpoint, response)
        payload, prose = parse_llm_payload(response.text, payload_cls)
        return payload, prose, usage

    def _definitions(self, ref: ParsedReference, words) -> List[Dict[str, Any]]:
        """
        Best-effort lexicon lookups for the key words.

        Any failure is logged and skipped; the analysis never fails here.
        """
        prefix = "H" if ref.is_old_testament else "G"
        seen = set()
        definitions = []

        for word in words:
            if not word.strongs:
                continue
            number = word.strongs.upper().replace(" ", "")
            if number.isdigit():
                number = f"{prefix}{number}"
            if number in seen:
                continue
            if len(seen) >= MAX_DEFINITIONS:
                break
            seen.add(number)

            try:
                entry = self.bolls.fetch_definition(number)
            except InterpreterError as e:
                logger.warning(f"Definition lookup failed for {number}: {e}")
                continue
            if entry:
                entry["word"] = word.original
                definitions.append(entry)

        return definitions

    # -------------------------------------------------------------------------
    # Text lookups (no LLM)
    # -------------------------------------------------------------------------

    def get_passage(self, reference: str, translation: Optional[str] = None) -> Dict[str, Any]:
        """
        Look up a passage.

        Returns:
            {
                "reference": "John 3:16",
                "translation": "KJV",
                "text": "For God so loved...",
                "verses": [{"verse": 16, "text": "..."}],
                ...ParsedReference fields
            }
        """
        ref = parse_reference(reference)
        code = self._translation(translation)
        verses = self.bolls.fetch_passage(code, ref)

        result = ref.to_dict()
        result.update({
            "translation": code,
            "text": passage_text(verses),
            "verses": [v.to_dict() for v in verses],
        })
        return result

    def get_chapter(
        self, book: int, chapter: int, translation: Optional[str] = None
    ) -> Dict[str, Any]:
        """Return a whole chapter by book number and chapter number."""
        if not 1 <= book <= len(BOOKS) or chapter < 1:
            raise InvalidFormat(f"No such chapter: book {book}, chapter {chapter}")
        code = self._translation(translation)
        verses = self.bolls.fetch_chapter(code, book, chapter)
        return {
            "bookNumber": book,
            "bookName": BOOKS[book - 1],
            "chapter": chapter,
            "translation": code,
            "verses": [v.to_dict() for v in verses],
        }

    def compare(self, reference: str, translations: List[str]) -> Dict[str, Any]:
        """
        Compare a passage across translations.

        Every translation is validated before the first fetch.
        """
        ref = parse_reference(reference)
        if not translations:
            raise UnsupportedTranslation("At least one translation is required")
        codes = []
        for t in translations:
            code = self._translation(t)
            if code not in codes:
                codes.append(code)

        results = []
        for code in codes:
            verses = self.bolls.fetch_passage(code, ref)
            results.append({
                "translation": code,
                "text": passage_text(verses),
                "verses": [v.to_dict() for v in verses],
            })

        return {"reference": ref.normalized, "translations": results}

    # -------------------------------------------------------------------------
    # LLM-backed operations
    # -------------------------------------------------------------------------

    def analyze(
        self,
        reference: str,
        translation: Optional[str] = None,
        include_original: bool = True,
    ) -> Dict[str, Any]:
        """
        Full interpretation of a passage.

        Returns:
            {
                "reference": "1 Corinthians 4:3-6",
                "translation": "KJV",
                "englishText": "...",
                "verses": [...],
                "originalLanguage": {"translation": "TR", "text": "...", "verses": [...]} | None,
                "interpretation": "prose from the model",
                "keyWords": [...],
                "definitions": [...],
                "usage": {"inputTokens": ..., "outputTokens": ..., "cost": ...},
                ...ParsedReference fields
            }
        """
        ref = parse_reference(reference)
        code = self._translation(translation)

        verses = self.bolls.fetch_passage(code, ref)

        original = None
        original_code = None
        original_verses = None
        if include_original:
            try:
                original_code, original_verses = self.bolls.fetch_original(ref)
                original = {
                    "translation": original_code,
                    "text": passage_text(original_verses),
                    "verses": [v.to_dict() for v in original_verses],
                }
            except VerseNotFound as e:
                # Versification differs between the Hebrew and English canons
                logger.info(f"No original-language text for {ref.normalized}: {e}")

        prompt = prompts.build_analysis_prompt(
            ref.normalized, code, verses, original_code, original_verses
        )
        payload, prose, usage = self._ask("analyze", prompt, KeyWordsPayload)

        result = ref.to_dict()
        result.update({
            "translation": code,
            "englishText": passage_text(verses),
            "verses": [v.to_dict() for v in verses],
            "originalLanguage": original,
            "interpretation": prose,
            "keyWords": payload.to_dict()["keyWords"],
            "definitions": self._definitions(ref, payload.key_words),
            "usage": usage,
        })
        return result

    def search(self, query: str) -> Dict[str, Any]:
        """Suggest passages for a free-text topic."""
        query = query.strip() if isinstance(query, str) else ""
        if not query:
            raise InvalidFormat("Search query is empty")

        payload, prose, usage = self._ask(
            "search", prompts.build_search_prompt(query), PassagesPayload
        )

        passages = []
        for hit in payload.passages:
            item = {"reference": hit.reference, "summary": hit.summary}
            try:
                item.update(parse_reference(hit.reference).to_dict())
                item["resolved"] = True
            except (InvalidFormat, UnknownBook):
                # Whole chapters and multi-chapter spans keep the model's wording
                item["resolved"] = False
            passages.append(item)

        return {"query": query, "passages": passages, "notes": prose, "usage": usage}

    def cross_references(
        self, reference: str, translation: Optional[str] = None
    ) -> Dict[str, Any]:
        ref = parse_reference(reference)
        code = self._translation(translation)
        verses = self.bolls.fetch_passage(code, ref)

        payload, prose, usage = self._ask(
            "cross_references",
            prompts.build_cross_reference_prompt(ref.normalized, passage_text(verses)),
            CrossReferencesPayload,
        )
        return {
            "reference": ref.normalized,
            "translation": code,
            "crossReferences": payload.to_dict()["crossReferences"],
            "notes": prose,
            "usage": usage,
        }

    def word_study(self, word: str, reference: Optional[str] = None) -> Dict[str, Any]:
        word = word.strip() if isinstance(word, str) else ""
        if not word:
            raise InvalidFormat("Word is empty")
        normalized = parse_reference(reference).normalized if reference else None

        payload, prose, usage = self._ask(
            "word_study",
            prompts.build_word_study_prompt(word, normalized),
            WordStudyPayload,
        )
        result = payload.to_dict()
        result.update({"reference": normalized, "notes": prose, "usage": usage})
        return result

    def daily_devotional(self, day: Optional[date] = None) -> Dict[str, Any]:
        """Devotional for a day, generated once and then served from cache."""
        cached = self.daily_cache.get(day)
        if cached is not None:
            return dict(cached, cached=True)

        key = DailyResultCache.key_for(day)
        payload, prose, usage = self._ask(
            "daily_verse", prompts.build_devotional_prompt(key), DevotionalPayload
        )
        result = payload.to_dict()
        result.update({"date": key, "notes": prose, "usage": usage})
        self.daily_cache.put(result, day)
        return dict(result, cached=False)

    def usage_summary(self) -> Dict[str, Any]:
        return self.usage.summary()
