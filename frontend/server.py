"""
Flask web server for the Support Q&A Bot.
Provides the JSON API consumed by the chat front-end.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from frontend.ratelimit import SlidingWindowRateLimiter
from supportbot.errors import SupportBotError
from supportbot.pipeline import validate_chat_input

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_app(
    pipeline,
    rate_limiter: Optional[SlidingWindowRateLimiter] = None,
    app_env: str = "production",
    cors_origin: str = "*",
):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    chat_limiter = rate_limiter or SlidingWindowRateLimiter()
    started_at = time.time()

    # ── Middleware ───────────────────────────────────────────────────────

    @app.before_request
    def start_timer():
        g.start_time = time.time()

    @app.after_request
    def add_headers(response):
        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        response.headers["Access-Control-Allow-Origin"] = cors_origin
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = (
            "Origin, X-Requested-With, Content-Type, Accept, Authorization"
        )

        duration_ms = int((time.time() - g.get("start_time", time.time())) * 1000)
        if response.status_code >= 400:
            logger.warning(
                "%s %s -> %d (%dms)", request.method, request.path, response.status_code, duration_ms
            )
        elif duration_ms > 1000:
            logger.info(
                "%s %s -> %d (%dms)", request.method, request.path, response.status_code, duration_ms
            )
        return response

    # ── Error handling ───────────────────────────────────────────────────

    @app.errorhandler(SupportBotError)
    def handle_bot_error(error):
        logger.error("Request error: %s (%s)", error.message, type(error).__name__)
        body = error.to_dict()
        if app_env == "development" and error.__cause__ is not None:
            body["detail"] = repr(error.__cause__)
        return jsonify({"error": body}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({
            "error": {
                "code": error.name.upper().replace(" ", "_"),
                "message": error.description,
                "timestamp": _now(),
            }
        }), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        body = {
            "code": "INTERNAL_ERROR",
            "message": "An internal server error occurred",
            "timestamp": _now(),
        }
        if app_env == "development":
            body["detail"] = repr(error)
        return jsonify({"error": body}), 500

    # ── Routes ───────────────────────────────────────────────────────────

    @app.route("/ping")
    def ping():
        return jsonify({"status": "ok", "timestamp": _now()})

    @app.route("/api/chat", methods=["POST"])
    def chat():
        """
        Chat endpoint.
        Request:  {"message": "..."}
        Response: {"response": "...", "has_context": bool, "sources": [...], ...}
        """
        client_id = request.remote_addr or "unknown"
        if not chat_limiter.allow(client_id):
            logger.warning("Rate limit exceeded for %s", client_id)
            return jsonify({
                "error": {
                    "code": "RATE_LIMIT_EXCEEDED",
                    "message": "Too many requests, please try again later",
                    "retry_after": chat_limiter.retry_after,
                    "timestamp": _now(),
                }
            }), 429

        message = validate_chat_input(request.get_json(silent=True))
        return jsonify(pipeline.ask({"message": message}))

    @app.route("/api/health", methods=["GET"])
    def health():
        status = pipeline.get_health()
        return jsonify(status), 200 if status["status"] == "healthy" else 503

    @app.route("/api/refresh", methods=["POST"])
    def refresh():
        """Reload and re-chunk every document."""
        logger.info("Manual refresh requested")
        pipeline.refresh_corpus()
        return jsonify({
            "message": "System refreshed successfully",
            "stats": pipeline.get_stats(),
            "timestamp": _now(),
        })

    @app.route("/api/stats", methods=["GET"])
    def stats():
        return jsonify(pipeline.get_stats())

    @app.route("/api/status", methods=["GET"])
    def status():
        return jsonify({
            "status": "operational",
            "service": "Support Q&A Bot",
            "uptime": round(time.time() - started_at, 1),
            "timestamp": _now(),
        })

    return app
