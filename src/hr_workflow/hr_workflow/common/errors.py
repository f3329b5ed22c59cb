from __future__ import annotations

import logging

from flask import Flask
from werkzeug.exceptions import HTTPException

from ..core.exceptions import ConflictError, NotFoundError, StateError, ValidationError
from .http import fail

log = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    """Recover domain errors at the HTTP boundary as typed failures."""

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return fail(str(e), status=404, code="NOT_FOUND")

    @app.errorhandler(ValidationError)
    def _invalid(e: ValidationError):
        return fail(str(e), status=400, code="VALIDATION_ERROR")

    @app.errorhandler(ConflictError)
    def _conflict(e: ConflictError):
        return fail(str(e), status=409, code="CONFLICT", detail={"conflicts": e.conflicts} if e.conflicts else None)

    @app.errorhandler(StateError)
    def _state(e: StateError):
        detail = {"current_status": e.current} if e.current is not None else None
        return fail(str(e), status=409, code="INVALID_STATE", detail=detail)

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        return fail(e.description or e.name, status=e.code or 500)

    @app.errorhandler(Exception)
    def _500(e: Exception):
        log.exception("Unhandled error: %s", e)
        return fail("Internal server error", status=500)
