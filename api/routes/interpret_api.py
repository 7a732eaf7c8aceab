# routes/interpret_api.py
"""
API endpoints for passage lookup and AI interpretation.

Provides access to:
- Passage, chapter and multi-translation lookup (bolls.life)
- AI analysis, topical search, cross references and word studies
- The daily devotional and running token usage

Endpoints that call the model pass through the per-client rate limiter.
"""

from flask import Blueprint, current_app, jsonify, request

from core.config import ALLOWED_TRANSLATIONS
from services.references import BOOKS, is_old_testament
from utils.errors import invalid_field, missing_field

interpret_bp = Blueprint("interpret_api", __name__, url_prefix="/api")


def get_service():
    return current_app.extensions["interpreter"]


def _rate_limit() -> int:
    """Count this request against the caller's window; raises RateLimited."""
    return current_app.extensions["rate_limiter"].check(request.remote_addr or "unknown")


def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _not_text(data: dict, *names: str):
    """invalid_field response for the first present field that is not a string."""
    for name in names:
        value = data.get(name)
        if value is not None and not isinstance(value, str):
            return invalid_field(name, f"'{name}' must be a string")
    return None


_TRUE = ("true", "1", "yes", "on")
_FALSE = ("false", "0", "no", "off")


def _flag(value, default: bool):
    """Read a JSON boolean, also accepting "true"/"false" style strings. None if invalid."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _TRUE + _FALSE:
        return value.strip().lower() in _TRUE
    return None


# =============================================================================
# Text Endpoints
# =============================================================================

@interpret_bp.post("/passage")
def passage():
    """
    Look up a passage.

    Body:
        {"reference": "John 3:16", "translation": "KJV"}
    """
    data = _body()
    reference = data.get("reference")
    if not reference:
        return missing_field("reference")
    error = _not_text(data, "reference", "translation")
    if error:
        return error

    return jsonify(get_service().get_passage(reference, data.get("translation")))


@interpret_bp.get("/chapter/<int:book>/<int:chapter>")
def chapter(book: int, chapter: int):
    translation = request.args.get("translation")
    return jsonify(get_service().get_chapter(book, chapter, translation))


@interpret_bp.post("/compare")
def compare():
    """
    Compare a passage across translations.

    Body:
        {"reference": "Romans 8:28", "translations": ["KJV", "ESV", "NIV"]}
    """
    data = _body()
    reference = data.get("reference")
    if not reference:
        return missing_field("reference")
    error = _not_text(data, "reference")
    if error:
        return error

    translations = data.get("translations")
    if not translations:
        return missing_field("translations")
    if isinstance(translations, str):
        translations = [t for t in translations.split(",") if t.strip()]
    if not isinstance(translations, list) or not all(isinstance(t, str) for t in translations):
        return invalid_field("translations", "Expected a list of translation codes")

    return jsonify(get_service().compare(reference, translations))


@interpret_bp.get("/books")
def books():
    return jsonify({
        "books": [
            {
                "number": number,
                "name": name,
                "testament": "OT" if is_old_testament(number) else "NT",
            }
            for number, name in enumerate(BOOKS, start=1)
        ]
    })


@interpret_bp.get("/translations")
def translations():
    return jsonify({
        "translations": list(ALLOWED_TRANSLATIONS),
        "default": get_service().settings.default_translation,
    })


# =============================================================================
# AI Endpoints
# =============================================================================

@interpret_bp.post("/analyze")
def analyze():
    """
    Interpret a passage.

    Body:
        {
            "reference": "1 Corinthians 4:3-6",
            "translation": "ESV",        # optional
            "includeOriginal": true      # optional, default true
        }

    Returns:
        Passage text, original-language text, the model's interpretation,
        key words with Strong's numbers, lexicon definitions and usage.
    """
    data = _body()
    reference = data.get("reference")
    if not reference:
        return missing_field("reference")
    error = _not_text(data, "reference", "translation")
    if error:
        return error
    include_original = _flag(data.get("includeOriginal"), True)
    if include_original is None:
        return invalid_field("includeOriginal", "'includeOriginal' must be true or false")

    _rate_limit()
    result = get_service().analyze(
        reference,
        translation=data.get("translation"),
        include_original=include_original,
    )
    return jsonify(result)


@interpret_bp.post("/search")
def search():
    data = _body()
    query = data.get("query")
    if not query:
        return missing_field("query")
    error = _not_text(data, "query")
    if error:
        return error

    _rate_limit()
    return jsonify(get_service().search(query))


@interpret_bp.post("/cross-references")
def cross_references():
    data = _body()
    reference = data.get("reference")
    if not reference:
        return missing_field("reference")
    error = _not_text(data, "reference", "translation")
    if error:
        return error

    _rate_limit()
    return jsonify(get_service().cross_references(reference, data.get("translation")))


@interpret_bp.post("/word-study")
def word_study():
    data = _body()
    word = data.get("word")
    if not word:
        return missing_field("word")
    error = _not_text(data, "word", "reference")
    if error:
        return error

    _rate_limit()
    return jsonify(get_service().word_study(word, data.get("reference")))


@interpret_bp.get("/daily-verse")
def daily_verse():
    service = get_service()
    # Cached days cost nothing upstream, so only count fresh generations
    if service.daily_cache.get() is None:
        _rate_limit()
    return jsonify(service.daily_devotional())


@interpret_bp.get("/usage")
def usage():
    return jsonify(get_service().usage_summary())
