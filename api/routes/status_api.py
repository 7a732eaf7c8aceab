from flask import Blueprint, current_app, jsonify
from datetime import datetime, timezone

status_bp = Blueprint("status_api", __name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _check_llm() -> tuple[bool, str]:
    """Check if LLM provider is configured."""
    llm = current_app.extensions["interpreter"].llm
    if llm.is_configured():
        return True, getattr(llm, "model", "configured")
    return False, "not configured"


@status_bp.get("/status")
def status():
    """Basic status check."""
    return jsonify({"status": "ok", "time_utc": _now()})


@status_bp.get("/health")
def health():
    """
    Health check endpoint.

    Returns component status for monitoring and diagnostics.
    HTTP 200 if the LLM is configured, 503 otherwise; text lookups work
    either way, so the chapter cache is reported but never fails the check.
    """
    service = current_app.extensions["interpreter"]
    llm_ok, llm_detail = _check_llm()

    response = {
        "status": "healthy" if llm_ok else "degraded",
        "time_utc": _now(),
        "components": {
            "llm": {"ok": llm_ok, "detail": llm_detail},
            "chapter_cache": service.bolls.cache.stats(),
        },
    }

    return jsonify(response), 200 if llm_ok else 503
