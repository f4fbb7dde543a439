"""Activity log blueprint."""
from flask import Blueprint

activity_logs_bp = Blueprint("activity_logs", __name__, url_prefix="/api/activity-logs")

from . import routes  # noqa: E402,F401
