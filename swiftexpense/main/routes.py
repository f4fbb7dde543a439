"""Main application routes."""
from __future__ import annotations

from swiftexpense.utils.dates import utcnow
from swiftexpense.utils.helpers import json_response

from . import main_bp


@main_bp.route("/health", methods=["GET"])
def health():
    """Liveness check."""
    return json_response(
        {
            "status": "ok",
            "message": "SwiftExpense API is running!",
            "timestamp": utcnow().isoformat(),
        }
    )


@main_bp.route("/", methods=["GET"])
def index():
    return json_response(
        {
            "name": "SwiftExpense API",
            "endpoints": [
                "/api/auth",
                "/api/expenses",
                "/api/approvals",
                "/api/users",
                "/api/companies",
                "/api/workflows",
                "/api/analytics",
                "/api/notifications",
                "/api/activity-logs",
                "/api/upload",
            ],
        }
    )
