from __future__ import annotations

from typing import Any, Optional

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DomainError, NotFoundError, ValidationError
from .datetime_utils import parse_iso_date

_STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (AuthorizationError, 403),
    (ValidationError, 400),
)


def current_role() -> Role:
    """Role of the caller, as stored in the session by the auth layer."""

    raw = session.get("role")
    try:
        return Role(str(raw))
    except ValueError:
        raise AuthorizationError("Please sign in to continue")


def current_user_id() -> Optional[int]:
    raw = session.get("user_id")
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise AuthorizationError("Please sign in to continue")


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("JSON object body expected")
    return data


def query_date(name: str):
    value = request.args.get(name)
    if not value:
        raise ValidationError(f"{name} is required")
    return parse_iso_date(value)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(e, cls)), 400)
        return jsonify({"success": False, "message": str(e)}), status

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return jsonify({"success": False, "message": e.description}), e.code

        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        message = f"Server error: {e}" if app.config.get("DEBUG") else "Server error"
        return jsonify({"success": False, "message": message}), 500
