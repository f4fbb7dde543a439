"""Domain exceptions and JSON error handlers."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from flask import Flask
from werkzeug.exceptions import HTTPException

from swiftexpense import db
from swiftexpense.utils.helpers import json_response

logger = logging.getLogger(__name__)


class WorkflowError(Exception):
    """Base class for errors raised by the service layer."""

    status_code = 409

    def __init__(self, message: str, status_code: Optional[int] = None, errors: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors

    def to_dict(self) -> dict:
        payload: Dict[str, Any] = {"error": self.message}
        if self.errors:
            payload["errors"] = self.errors
        return payload


class ValidationFailed(WorkflowError):
    status_code = 400


class PermissionDenied(WorkflowError):
    status_code = 403


class ResourceNotFound(WorkflowError):
    status_code = 404


class InvalidTransition(WorkflowError):
    status_code = 409


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(WorkflowError)
    def handle_workflow_error(exc: WorkflowError):
        db.session.rollback()
        if exc.status_code >= 500:
            logger.error("Workflow error: %s", exc.message)
        return json_response(exc.to_dict(), status=exc.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return json_response({"error": exc.description or exc.name}, status=exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc: Exception):
        db.session.rollback()
        logger.exception("Unhandled error")
        return json_response({"error": "Internal server error"}, status=500)
