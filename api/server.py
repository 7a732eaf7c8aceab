import logging
import os
import sys

from flask import Flask, request
from flask_cors import CORS
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException

from core.config import Settings
from routes.interpret_api import interpret_bp
from routes.status_api import status_bp
from services.cache import ChapterCache, DailyResultCache
from services.interpretation_service import InterpretationService
from services.llm_service import AnthropicProvider
from services.rate_limiter import RateLimiter
from services.references import BollsClient
from services.usage_tracker import UsageTracker
from utils.errors import InterpreterError, not_found, server_error

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def build_service(settings: Settings) -> InterpretationService:
    """Wire the collaborators for one process."""
    bolls = BollsClient(
        ChapterCache(settings.chapter_cache_size),
        base_url=settings.bolls_base_url,
        timeout=settings.text_fetch_timeout,
        max_retries=settings.text_fetch_retries,
    )
    claude = AnthropicProvider(
        api_key=settings.anthropic_api_key,
        model=settings.anthropic_model,
        max_tokens=settings.llm_max_tokens,
        timeout=settings.llm_timeout,
        max_retries=settings.llm_max_retries,
    )
    tracker = UsageTracker(
        settings.llm_input_rate,
        settings.llm_output_rate,
        path=settings.usage_file,
    )
    return InterpretationService(bolls, claude, tracker, DailyResultCache(), settings)


def create_app(settings=None, service=None, limiter=None) -> Flask:
    settings = settings or Settings.from_env()
    service = service or build_service(settings)
    limiter = limiter or RateLimiter(settings.rate_limit_max, settings.rate_limit_window)

    app = Flask(__name__)
    CORS(app)

    app.extensions["interpreter"] = service
    app.extensions["rate_limiter"] = limiter

    @app.errorhandler(InterpreterError)
    def handle_interpreter_error(e):
        if e.status >= 500:
            logger.warning(f"{e.code}: {e.detail}")
        return e.to_response()

    @app.errorhandler(404)
    def handle_not_found(e):
        return not_found("endpoint", f"No endpoint at {request.path}")

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        # Other HTTP errors (405, 415, ...) keep their own status
        if isinstance(e, HTTPException):
            return e
        logger.exception(f"Unhandled error on {request.method} {request.path}")
        return server_error()

    # Register blueprints
    app.register_blueprint(interpret_bp)
    app.register_blueprint(status_bp)

    if not service.llm.is_configured():
        logger.warning("ANTHROPIC_API_KEY is not set; AI endpoints will return 500")

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
