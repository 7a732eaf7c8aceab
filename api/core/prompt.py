# core/prompt.py
from typing import Iterable, Optional

_JSON_RULES = """
Formatting rules:
- Write your explanation as plain prose first.
- Then give exactly one fenced code block tagged json holding the object described above.
- Do not put anything after the code block.
""".strip()


def _verse_lines(verses: Iterable) -> str:
    return "\n".join(f"{v.number}. {v.text}" for v in verses)


def build_analysis_prompt(
    reference: str,
    translation: str,
    verses: Iterable,
    original_code: Optional[str] = None,
    original_verses: Optional[Iterable] = None,
) -> str:
    original_block = ""
    if original_verses:
        original_block = f"""
Original-language text ({original_code}):
{_verse_lines(original_verses)}
"""

    return f"""
You are a careful biblical scholar helping a reader understand a passage.

Passage: {reference} ({translation})
{_verse_lines(verses)}
{original_block}
Explain the passage: its historical and literary context, what it meant to
its first readers, and how it is commonly understood today. Be balanced
where traditions differ.

Then list the key words of the passage in the original language as JSON:
{{"keyWords": [{{"original": "...", "transliteration": "...", "english": "...", "strongs": "H1234 or G1234", "meaning": "..."}}]}}

{_JSON_RULES}
""".strip()


def build_search_prompt(query: str) -> str:
    return f"""
A reader is looking for Bible passages about: "{query}"

Suggest up to 8 passages that speak most directly to this. Use standard
references like "Romans 8:28" or "Psalm 23:1-4", one chapter per reference.

Return JSON:
{{"passages": [{{"reference": "...", "summary": "one sentence on why it fits"}}]}}

{_JSON_RULES}
""".strip()


def build_cross_reference_prompt(reference: str, passage: str) -> str:
    return f"""
Passage: {reference}
{passage}

Give up to 8 cross references elsewhere in the Bible that illuminate this
passage (quotations, allusions, shared themes, fulfilment). Use standard
references like "Isaiah 53:5".

Return JSON:
{{"crossReferences": [{{"reference": "...", "connection": "one sentence"}}]}}

{_JSON_RULES}
""".strip()


def build_word_study_prompt(word: str, reference: Optional[str] = None) -> str:
    context = f' as it is used in {reference}' if reference else ""
    return f"""
Give a word study of "{word}"{context}: the underlying Hebrew or Greek word,
its range of meaning, and how it is used across Scripture.

Return JSON:
{{"wordStudy": {{"word": "{word}", "original": "...", "transliteration": "...", "strongs": "...", "definition": "...", "usage": "..."}}}}

{_JSON_RULES}
""".strip()


def build_devotional_prompt(day: str) -> str:
    return f"""
Choose one Bible verse for a daily devotional for {day}. Quote it exactly
(KJV wording), then write a short reflection (about 150 words) and a
one-paragraph prayer.

Return JSON:
{{"verse": {{"reference": "...", "text": "..."}}, "reflection": "...", "prayer": "..."}}

{_JSON_RULES}
""".strip()
