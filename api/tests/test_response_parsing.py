# api/tests/test_response_parsing.py
"""
Tests for extracting JSON payloads from model output.
"""

import json

from services.response_parsing import extract_payload


def test_json_fence_round_trip():
    payload = {"keyWords": [{"original": "ἀγάπη", "meaning": "love"}]}
    text = f"Intro prose.\n\n```json\n{json.dumps(payload, ensure_ascii=False)}\n```\n\nClosing."

    result = extract_payload(text, "keyWords")

    assert result.found
    assert result.data == payload
    assert result.source == "json_fence"
    assert result.residual_text == "Intro prose.\n\nClosing."


def test_fence_tag_case_insensitive():
    text = 'Prose\n```JSON\n{"keyWords": []}\n```'
    result = extract_payload(text, "keyWords")
    assert result.data == {"keyWords": []}
    assert result.residual_text == "Prose"


def test_untagged_fence_with_key():
    text = 'Some notes.\n```\n{"passages": [{"reference": "Psalm 23:1"}]}\n```'
    result = extract_payload(text, "passages")
    assert result.source == "keyed_fence"
    assert result.data["passages"][0]["reference"] == "Psalm 23:1"
    assert result.residual_text == "Some notes."


def test_broken_json_fence_falls_through():
    text = (
        "```json\n{not json}\n```\n"
        "```javascript\n{\"crossReferences\": []}\n```"
    )
    result = extract_payload(text, "crossReferences")
    assert result.source == "keyed_fence"
    assert result.data == {"crossReferences": []}


def test_inline_object():
    text = 'The passage teaches patience. {"keyWords": [{"original": "x", "meaning": "y"}]} Amen.'
    result = extract_payload(text, "keyWords")
    assert result.source == "inline_object"
    assert result.data["keyWords"][0]["original"] == "x"
    assert result.residual_text == "The passage teaches patience.\n\nAmen."


def test_inline_object_with_nested_braces_before_key():
    text = 'Note {see below}. {"verse": {"reference": "John 1:1", "text": "t"}, "reflection": "r"}'
    result = extract_payload(text, "verse")
    assert result.data["verse"]["reference"] == "John 1:1"
    assert result.residual_text == "Note {see below}."


def test_bare_json_response():
    result = extract_payload('  {"passages": []}  ', "passages")
    assert result.data == {"passages": []}
    assert result.residual_text == ""


def test_whole_text_without_key():
    # Parses, but the shape check is left to the payload classes
    result = extract_payload('[1, 2, 3]', "passages")
    assert result.source == "whole_text"
    assert result.data == [1, 2, 3]


def test_nothing_found_returns_input():
    text = "Just prose, no JSON at all."
    result = extract_payload(text, "keyWords")
    assert not result.found
    assert result.data is None
    assert result.residual_text == text


def test_json_null_is_not_a_payload():
    result = extract_payload("```json\nnull\n```", "keyWords")
    assert not result.found


def test_empty_input():
    result = extract_payload("", "keyWords")
    assert not result.found
    assert result.residual_text == ""
