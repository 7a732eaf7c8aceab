# api/utils/errors.py
"""
Standardized API errors.

Two halves live here:

- A small exception hierarchy rooted at InterpreterError. Services raise
  these; each carries a machine-readable code and an HTTP status.
- Response helpers that render errors in the common shape
  {"error": "error_code", "detail": "optional message"}.

Error codes should be:
- snake_case
- descriptive but concise
- machine-parseable (no spaces or special chars)
"""

from flask import jsonify
from typing import Optional


# -----------------------------------------------------------------------------
# Exception hierarchy
# -----------------------------------------------------------------------------

class InterpreterError(Exception):
    """Base class for every error surfaced to API callers."""

    code = "internal_error"
    status = 500

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.code)
        self.detail = detail

    def to_response(self):
        return error_response(self.code, self.status, self.detail)


class InvalidFormat(InterpreterError):
    """Reference string does not match <book> <chapter>:<verse>[-<end>]."""
    code = "invalid_format"
    status = 400


class UnknownBook(InterpreterError):
    """Book segment of a reference is not in the book index."""
    code = "unknown_book"
    status = 400


class UnsupportedTranslation(InterpreterError):
    """Translation code is not on the allow-list."""
    code = "unsupported_translation"
    status = 400


class VerseNotFound(InterpreterError):
    """Chapter was fetched but holds none of the requested verses."""
    code = "verse_not_found"
    status = 404


class UpstreamUnavailable(InterpreterError):
    """Upstream provider answered with a failure or could not be reached."""
    code = "upstream_unavailable"
    status = 502


class UpstreamTimeout(UpstreamUnavailable):
    """Upstream call exceeded its timeout and was aborted."""
    code = "upstream_timeout"
    status = 504


class ExtractionFailed(InterpreterError):
    """No JSON payload could be located in the model output."""
    code = "extraction_failed"
    status = 502


class MalformedPayload(InterpreterError):
    """JSON parsed but does not have the expected shape."""
    code = "malformed_payload"
    status = 502


class ConfigurationMissing(InterpreterError):
    """A required credential or setting is absent."""
    code = "configuration_missing"
    status = 500


class RateLimited(InterpreterError):
    """Client exceeded the request budget for the current window."""
    code = "rate_limited"
    status = 429


# -----------------------------------------------------------------------------
# Standard HTTP Error Responses
# -----------------------------------------------------------------------------

def error_response(
    code: str,
    status: int = 400,
    detail: Optional[str] = None,
    **extra
):
    """
    Create a standardized error response.

    Args:
        code: Machine-readable error code (snake_case)
        status: HTTP status code
        detail: Human-readable explanation (optional)
        **extra: Additional fields to include in response

    Returns:
        Tuple of (jsonify response, status code)
    """
    payload = {"error": code}
    if detail:
        payload["detail"] = detail
    payload.update(extra)
    return jsonify(payload), status


# Not Found (404)
def not_found(resource: str = "resource", detail: str = None):
    """Requested resource does not exist."""
    return error_response("not_found", 404, detail or f"{resource} not found")


# Validation (400)
def missing_field(field: str):
    """Required field is missing."""
    return error_response(f"{field}_required", 400, f"Missing required field: {field}")


def invalid_field(field: str, detail: str = None):
    """Field value is invalid."""
    return error_response(f"invalid_{field}", 400, detail)


# Server Error (500)
def server_error(code: str = "internal_error", detail: str = None):
    """Internal server error."""
    return error_response(code, 500, detail)
