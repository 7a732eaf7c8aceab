# api/tests/test_interpretation_service.py
"""
Tests for the interpretation pipeline with bolls.life mocked at the HTTP
layer and a scripted LLM.
"""

from datetime import date
from unittest.mock import patch

import pytest

from utils.errors import (
    ExtractionFailed,
    InvalidFormat,
    MalformedPayload,
    UnknownBook,
    UnsupportedTranslation,
)

from conftest import make_response

ROMANS_8_KJV = [
    {"verse": 28, "text": "And we know that all things work together for good"},
    {"verse": 29, "text": "For whom he did foreknow"},
]
ROMANS_8_TR = [
    {"verse": 28, "text": "οἴδαμεν<S>1492</S> δὲ ὅτι τοῖς ἀγαπῶσιν<S>25</S>"},
    {"verse": 29, "text": "ὅτι οὓς προέγνω"},
]
DEFINITION_G25 = [{
    "topic": "G25",
    "lexeme": "ἀγαπάω",
    "transliteration": "agapáō",
    "short_definition": "to love",
    "definition": "to love",
}]

ANALYSIS = (
    "Paul assures believers that God works through every circumstance.\n\n"
    "```json\n"
    '{"keyWords": ['
    '{"original": "ἀγαπάω", "transliteration": "agapaō", "english": "love", '
    '"strongs": "25", "meaning": "to love with devotion"}, '
    '{"original": "οἶδα", "english": "know", "strongs": "G1492", "meaning": "to know"}'
    "]}\n"
    "```"
)


def bolls_router(chapters, definitions=None):
    """side_effect for requests.request that serves canned bolls.life data."""
    definitions = definitions or {}

    def fake_request(method, url, **kwargs):
        if "/dictionary-definition/" in url:
            strongs = url.rstrip("/").rsplit("/", 1)[-1]
            if strongs not in definitions:
                return make_response(500, {"detail": "server error"})
            return make_response(200, definitions[strongs])
        for path, verses in chapters.items():
            if url.endswith(f"/get-text/{path}/"):
                return make_response(200, verses)
        return make_response(200, [])

    return fake_request


@patch("utils.http_retry.requests.request")
def test_analyze(mock_request, make_service):
    mock_request.side_effect = bolls_router(
        {"KJV/45/8": ROMANS_8_KJV, "TR/45/8": ROMANS_8_TR},
        {"G25": DEFINITION_G25, "G1492": []},
    )
    service, llm = make_service(ANALYSIS)

    result = service.analyze("rom 8:28")

    assert result["reference"] == "Romans 8:28"
    assert result["bookNumber"] == 45
    assert result["translation"] == "KJV"
    assert result["englishText"] == "And we know that all things work together for good"
    assert result["originalLanguage"]["translation"] == "TR"
    assert result["originalLanguage"]["text"] == "οἴδαμεν δὲ ὅτι τοῖς ἀγαπῶσιν"
    assert result["interpretation"].startswith("Paul assures believers")
    assert [w["original"] for w in result["keyWords"]] == ["ἀγαπάω", "οἶδα"]

    # Bare numbers get the testament prefix; empty lexicon entries are skipped
    assert len(result["definitions"]) == 1
    assert result["definitions"][0]["strongs"] == "G25"
    assert result["definitions"][0]["word"] == "ἀγαπάω"

    assert result["usage"]["inputTokens"] == 1000
    assert result["usage"]["cost"] == pytest.approx(0.0105)

    prompt = llm.prompts[0]
    assert "Romans 8:28 (KJV)" in prompt
    assert "28. And we know" in prompt
    assert "Original-language text (TR)" in prompt


@patch("utils.http_retry.requests.request")
def test_unsupported_translation_makes_no_calls(mock_request, make_service):
    service, llm = make_service(ANALYSIS)

    with pytest.raises(UnsupportedTranslation) as exc:
        service.analyze("John 3:16", translation="XYZ")

    assert exc.value.status == 400
    assert mock_request.call_count == 0
    assert llm.prompts == []


@patch("utils.http_retry.requests.request")
def test_bad_reference_makes_no_calls(mock_request, make_service):
    service, llm = make_service(ANALYSIS)

    with pytest.raises(InvalidFormat):
        service.analyze("nonsense")
    with pytest.raises(UnknownBook):
        service.get_passage("zzz 1:1")

    assert mock_request.call_count == 0
    assert llm.prompts == []


@patch("utils.http_retry.requests.request")
def test_definition_failures_leave_definitions_empty(mock_request, make_service):
    mock_request.side_effect = bolls_router(
        {"KJV/45/8": ROMANS_8_KJV, "TR/45/8": ROMANS_8_TR},
    )
    service, _ = make_service(ANALYSIS)

    result = service.analyze("Romans 8:28")

    assert result["definitions"] == []
    assert result["keyWords"]


@patch("utils.http_retry.requests.request")
def test_missing_original_verses(mock_request, make_service):
    mock_request.side_effect = bolls_router({"KJV/45/8": ROMANS_8_KJV})
    service, llm = make_service(ANALYSIS)

    result = service.analyze("Romans 8:28")

    assert result["originalLanguage"] is None
    assert "Original-language text" not in llm.prompts[0]


@patch("utils.http_retry.requests.request")
def test_analyze_without_original(mock_request, make_service):
    mock_request.side_effect = bolls_router({"KJV/45/8": ROMANS_8_KJV})
    service, _ = make_service('{"keyWords": []}')

    result = service.analyze("Romans 8:28", include_original=False)

    assert result["originalLanguage"] is None
    assert result["keyWords"] == []
    assert mock_request.call_count == 1


@patch("utils.http_retry.requests.request")
def test_unparseable_model_output(mock_request, make_service):
    mock_request.side_effect = bolls_router({"KJV/45/8": ROMANS_8_KJV})
    service, _ = make_service("Sorry, I can only answer in prose.")

    with pytest.raises(ExtractionFailed):
        service.analyze("Romans 8:28", include_original=False)

    # The call was still paid for
    assert service.usage_summary()["requests"] == 1


@patch("utils.http_retry.requests.request")
def test_malformed_model_output(mock_request, make_service):
    mock_request.side_effect = bolls_router({"KJV/45/8": ROMANS_8_KJV})
    service, _ = make_service('```json\n{"keyWords": [{"english": "love"}]}\n```')

    with pytest.raises(MalformedPayload):
        service.analyze("Romans 8:28", include_original=False)


@patch("utils.http_retry.requests.request")
def test_get_passage_and_chapter(mock_request, make_service):
    mock_request.side_effect = bolls_router({"ESV/45/8": ROMANS_8_KJV})
    service, _ = make_service()

    passage = service.get_passage("Romans 8:28-29", translation="esv")
    assert passage["translation"] == "ESV"
    assert [v["verse"] for v in passage["verses"]] == [28, 29]

    chapter = service.get_chapter(45, 8, "ESV")
    assert chapter["bookName"] == "Romans"
    assert len(chapter["verses"]) == 2

    # Served from cache
    assert mock_request.call_count == 1

    with pytest.raises(InvalidFormat):
        service.get_chapter(67, 1)


@patch("utils.http_retry.requests.request")
def test_compare(mock_request, make_service):
    mock_request.side_effect = bolls_router({
        "KJV/45/8": ROMANS_8_KJV,
        "WEB/45/8": [{"verse": 28, "text": "We know that all things work together"}],
    })
    service, _ = make_service()

    result = service.compare("Romans 8:28", ["kjv", "WEB", "KJV"])

    assert result["reference"] == "Romans 8:28"
    assert [t["translation"] for t in result["translations"]] == ["KJV", "WEB"]
    assert result["translations"][1]["text"] == "We know that all things work together"


@patch("utils.http_retry.requests.request")
def test_compare_validates_every_translation_first(mock_request, make_service):
    service, _ = make_service()

    with pytest.raises(UnsupportedTranslation):
        service.compare("Romans 8:28", ["KJV", "XYZ"])
    assert mock_request.call_count == 0


def test_search(make_service):
    service, llm = make_service(
        "Here are some passages.\n```json\n"
        '{"passages": [{"reference": "Philippians 4:6-7", "summary": "Prayer over worry"}, '
        '{"reference": "Psalm 23", "summary": "The shepherd psalm"}]}\n```'
    )

    result = service.search("  anxiety ")

    assert result["query"] == "anxiety"
    first, second = result["passages"]
    assert first["resolved"] and first["bookNumber"] == 50
    assert not second["resolved"] and second["reference"] == "Psalm 23"
    assert result["notes"] == "Here are some passages."
    assert '"anxiety"' in llm.prompts[0]

    with pytest.raises(InvalidFormat):
        service.search("   ")


@patch("utils.http_retry.requests.request")
def test_cross_references(mock_request, make_service):
    mock_request.side_effect = bolls_router({"KJV/45/8": ROMANS_8_KJV})
    service, llm = make_service(
        '{"crossReferences": [{"reference": "Genesis 50:20", "connection": "Evil meant for good"}]}'
    )

    result = service.cross_references("Romans 8:28")

    assert result["crossReferences"][0]["reference"] == "Genesis 50:20"
    assert "all things work together for good" in llm.prompts[0]


def test_word_study(make_service):
    service, llm = make_service(
        '```json\n{"wordStudy": {"word": "grace", "original": "χάρις", '
        '"definition": "unmerited favour", "strongs": "G5485"}}\n```'
    )

    result = service.word_study("grace", reference="Ephesians 2:8")

    assert result["wordStudy"]["original"] == "χάρις"
    assert result["reference"] == "Ephesians 2:8"
    assert "Ephesians 2:8" in llm.prompts[0]


def test_daily_devotional_is_cached(make_service):
    service, llm = make_service(
        '```json\n{"verse": {"reference": "Psalm 118:24", "text": "This is the day"}, '
        '"reflection": "Rejoice.", "prayer": "Amen."}\n```'
    )
    day = date(2024, 5, 1)

    first = service.daily_devotional(day)
    second = service.daily_devotional(day)

    assert first["cached"] is False
    assert second["cached"] is True
    assert second["verse"]["reference"] == "Psalm 118:24"
    assert second["date"] == "2024-05-01"
    assert len(llm.prompts) == 1


def test_non_string_text_inputs(make_service):
    service, llm = make_service()

    with pytest.raises(InvalidFormat):
        service.search(["hope"])
    with pytest.raises(InvalidFormat):
        service.word_study(7)
    with pytest.raises(UnsupportedTranslation):
        service.get_passage("John 3:16", translation=5)
    assert llm.prompts == []
