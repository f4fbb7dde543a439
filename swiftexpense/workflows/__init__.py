"""Approval workflow configuration blueprint."""
from flask import Blueprint

workflows_bp = Blueprint("workflows", __name__, url_prefix="/api/workflows")

from . import routes  # noqa: E402,F401
