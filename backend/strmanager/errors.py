import logging

from flask import jsonify
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class StoreError(Exception):
    def __init__(self, code, status=400, **context):
        super().__init__(code)
        self.code = code
        self.status = status
        self.context = context


class StorageError(Exception):
    pass


class EmailDeliveryError(Exception):
    pass


class RateLimitExceeded(Exception):
    def __init__(self, key, limit, retry_after):
        super().__init__(f"rate limit exceeded for {key}")
        self.key = key
        self.limit = limit
        self.retry_after = retry_after


def validation_message(exc: ValidationError) -> str:
    """Flatten pydantic errors into "field: message; field: message"."""
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "body"
        parts.append(f"{field}: {err.get('msg')}")
    return "; ".join(parts)


def register_error_handlers(app):
    @app.errorhandler(StoreError)
    def _store_error(exc):
        return jsonify({"error": exc.code, **exc.context}), exc.status

    @app.errorhandler(StorageError)
    def _storage_error(exc):
        logger.error("storage failure: %s", exc)
        return jsonify({"error": "storage_error", "details": str(exc)}), 502

    @app.errorhandler(EmailDeliveryError)
    def _email_error(exc):
        logger.error("email delivery failure: %s", exc)
        return jsonify({"error": "email_delivery_failed", "details": str(exc)}), 502

    @app.errorhandler(RateLimitExceeded)
    def _rate_limited(exc):
        logger.warning("rate limit hit key=%s limit=%s", exc.key, exc.limit)
        resp = jsonify({"error": "rate_limit_exceeded", "retry_after": exc.retry_after})
        resp.headers["Retry-After"] = str(exc.retry_after)
        return resp, 429

    @app.errorhandler(ValidationError)
    def _validation_error(exc):
        return jsonify({"error": validation_message(exc)}), 400

    @app.errorhandler(HTTPException)
    def _http_error(exc):
        code = (exc.name or "error").lower().replace(" ", "_")
        return jsonify({"error": code}), exc.code

    @app.errorhandler(Exception)
    def _unhandled(exc):
        logger.exception("unhandled error")
        return jsonify({"error": "internal_server_error"}), 500
