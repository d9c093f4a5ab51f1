from __future__ import annotations

import logging
from enum import Enum
from functools import wraps
from typing import Optional, Type, TypeVar

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.actor import Actor
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

_STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (AuthorizationError, 403),
    (ConflictError, 409),
    (ValidationError, 422),
)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"error": "Authentication required"}), 401
        return view(*args, **kwargs)

    return wrapper


def current_actor() -> Actor:
    return Actor.from_roles(int(session["user_id"]), session.get("roles") or [])


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object")
    return data


def parse_enum(enum_cls: Type[E], value, field_name: str) -> E:
    try:
        return enum_cls(str(value or "").upper())
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def parse_date_field(value, field_name: str):
    try:
        return parse_iso_date(str(value or ""))
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


def parse_int_field(value, field_name: str, *, required: bool = True) -> Optional[int]:
    if value is None or value == "":
        if required:
            raise ValidationError(f"{field_name} is required")
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        for error_cls, status in _STATUS_BY_ERROR:
            if isinstance(e, error_cls):
                return jsonify({"error": str(e), "type": type(e).__name__}), status
        logger.error("Unmapped domain error: %r", e)
        return jsonify({"error": str(e), "type": type(e).__name__}), 400

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return e
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500
