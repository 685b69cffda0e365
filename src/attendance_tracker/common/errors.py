from __future__ import annotations

import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError

logger = logging.getLogger(__name__)


def error_body(kind: str, message: str) -> dict:
    return {"error": {"kind": kind, "message": message}}


def register(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, exc)
        return jsonify(error_body(exc.kind, exc.message)), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        kind = (exc.name or "http_error").lower().replace(" ", "_")
        return jsonify(error_body(kind, exc.description or exc.name)), exc.code or 500

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.path)
        message = f"Internal server error: {exc}" if app.config.get("DEBUG") else "Internal server error"
        return jsonify(error_body("internal_error", message)), 500
