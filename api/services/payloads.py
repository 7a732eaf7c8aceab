# api/services/payloads.py
"""
Typed shapes for the JSON payloads the model is asked to return.

Each payload class names the top-level key it expects and validates its
required fields right after the JSON parses, so a partially valid object
never travels further than this module.

Usage:
    payload, prose = parse_llm_payload(response_text, KeyWordsPayload)
    for word in payload.key_words:
        print(word.original, word.meaning)
"""

from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Type, TypeVar

from services.response_parsing import extract_payload
from utils.errors import ExtractionFailed, MalformedPayload

P = TypeVar("P", bound="LLMPayload")


def _require_str(item: Dict[str, Any], name: str, where: str) -> str:
    value = item.get(name)
    if not isinstance(value, str) or not value.strip():
        raise MalformedPayload(f"{where}: '{name}' must be a non-empty string")
    return value.strip()


def _optional_str(item: Dict[str, Any], name: str) -> Optional[str]:
    value = item.get(name)
    if value is None:
        return None
    return str(value).strip() or None


def _require_list(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    value = data.get(key)
    if not isinstance(value, list):
        raise MalformedPayload(f"'{key}' must be an array")
    for index, item in enumerate(value):
        if not isinstance(item, dict):
            raise MalformedPayload(f"{key}[{index}] must be an object")
    return value


def _require_object(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    if not isinstance(value, dict):
        raise MalformedPayload(f"'{key}' must be an object")
    return value


class LLMPayload:
    """Base for payload variants. Subclasses set `key` and `from_data`."""

    key: ClassVar[str] = ""

    @classmethod
    def from_data(cls: Type[P], data: Any) -> P:
        raise NotImplementedError

    @classmethod
    def validate(cls: Type[P], data: Any) -> P:
        if not isinstance(data, dict):
            raise MalformedPayload(
                f"Expected a JSON object with '{cls.key}', got {type(data).__name__}"
            )
        if cls.key not in data:
            raise MalformedPayload(f"Missing top-level key '{cls.key}'")
        return cls.from_data(data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# -----------------------------------------------------------------------------
# Key words
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class KeyWord:
    original: str
    meaning: str
    english: Optional[str] = None
    transliteration: Optional[str] = None
    strongs: Optional[str] = None


@dataclass(frozen=True)
class KeyWordsPayload(LLMPayload):
    key: ClassVar[str] = "keyWords"
    key_words: List[KeyWord] = field(default_factory=list)

    @classmethod
    def from_data(cls, data):
        words = []
        for index, item in enumerate(_require_list(data, cls.key)):
            where = f"keyWords[{index}]"
            words.append(KeyWord(
                original=_require_str(item, "original", where),
                meaning=_require_str(item, "meaning", where),
                english=_optional_str(item, "english"),
                transliteration=_optional_str(item, "transliteration"),
                strongs=_optional_str(item, "strongs"),
            ))
        return cls(key_words=words)

    def to_dict(self):
        return {"keyWords": [asdict(w) for w in self.key_words]}


# -----------------------------------------------------------------------------
# Passages (free-text search)
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class PassageHit:
    reference: str
    summary: Optional[str] = None


@dataclass(frozen=True)
class PassagesPayload(LLMPayload):
    key: ClassVar[str] = "passages"
    passages: List[PassageHit] = field(default_factory=list)

    @classmethod
    def from_data(cls, data):
        hits = [
            PassageHit(
                reference=_require_str(item, "reference", f"passages[{index}]"),
                summary=_optional_str(item, "summary"),
            )
            for index, item in enumerate(_require_list(data, cls.key))
        ]
        return cls(passages=hits)


# -----------------------------------------------------------------------------
# Cross references
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class CrossReference:
    reference: str
    connection: str


@dataclass(frozen=True)
class CrossReferencesPayload(LLMPayload):
    key: ClassVar[str] = "crossReferences"
    cross_references: List[CrossReference] = field(default_factory=list)

    @classmethod
    def from_data(cls, data):
        refs = []
        for index, item in enumerate(_require_list(data, cls.key)):
            where = f"crossReferences[{index}]"
            refs.append(CrossReference(
                reference=_require_str(item, "reference", where),
                connection=_require_str(item, "connection", where),
            ))
        return cls(cross_references=refs)

    def to_dict(self):
        return {"crossReferences": [asdict(r) for r in self.cross_references]}


# -----------------------------------------------------------------------------
# Daily devotional
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class DevotionalPayload(LLMPayload):
    key: ClassVar[str] = "verse"
    reference: str = ""
    text: str = ""
    reflection: str = ""
    prayer: Optional[str] = None

    @classmethod
    def from_data(cls, data):
        verse = _require_object(data, cls.key)
        return cls(
            reference=_require_str(verse, "reference", "verse"),
            text=_require_str(verse, "text", "verse"),
            reflection=_require_str(data, "reflection", "devotional"),
            prayer=_optional_str(data, "prayer"),
        )

    def to_dict(self):
        return {
            "verse": {"reference": self.reference, "text": self.text},
            "reflection": self.reflection,
            "prayer": self.prayer,
        }


# -----------------------------------------------------------------------------
# Word study
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class WordStudyPayload(LLMPayload):
    key: ClassVar[str] = "wordStudy"
    word: str = ""
    original: str = ""
    definition: str = ""
    transliteration: Optional[str] = None
    strongs: Optional[str] = None
    usage: Optional[str] = None

    @classmethod
    def from_data(cls, data):
        study = _require_object(data, cls.key)
        return cls(
            word=_require_str(study, "word", "wordStudy"),
            original=_require_str(study, "original", "wordStudy"),
            definition=_require_str(study, "definition", "wordStudy"),
            transliteration=_optional_str(study, "transliteration"),
            strongs=_optional_str(study, "strongs"),
            usage=_optional_str(study, "usage"),
        )

    def to_dict(self):
        return {"wordStudy": asdict(self)}


def parse_llm_payload(text: str, payload_cls: Type[P]):
    """
    Extract and validate a payload from model output.

    Returns:
        (payload, residual prose)

    Raises:
        ExtractionFailed: No JSON could be located in the output
        MalformedPayload: JSON parsed but does not match payload_cls
    """
    extracted = extract_payload(text, payload_cls.key)
    if not extracted.found:
        raise ExtractionFailed("Failed to parse AI response")
    return payload_cls.validate(extracted.data), extracted.residual_text
