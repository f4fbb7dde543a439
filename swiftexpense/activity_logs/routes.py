"""Audit trail routes."""
from __future__ import annotations

from typing import Any

from flask import current_app, request
from flask_login import current_user, login_required

from swiftexpense.models import ActivityAction, UserRole
from swiftexpense.services import activity_logger
from swiftexpense.utils.helpers import json_response, paginate, parse_pagination, role_required

from . import activity_logs_bp


@activity_logs_bp.route("", methods=["GET"])
@login_required
@role_required(UserRole.ADMIN, UserRole.MANAGER)
def list_activity() -> Any:
    action_filter = (request.args.get("action") or "").strip().upper()
    if action_filter and action_filter not in ActivityAction.__members__:
        return json_response({"error": f"Unknown action '{action_filter}'."}, status=400)

    query = activity_logger.get_activity_history(
        current_user,
        user_id=request.args.get("user_id", type=int),
        expense_id=request.args.get("expense_id", type=int),
        action=ActivityAction[action_filter] if action_filter else None,
    )
    page, limit = parse_pagination(current_app.config["ACTIVITY_LOGS_PER_PAGE"])
    entries, pagination = paginate(query, page, limit)
    return json_response({"activity_logs": [entry.to_dict() for entry in entries], "pagination": pagination})


@activity_logs_bp.route("/stats", methods=["GET"])
@login_required
@role_required(UserRole.ADMIN)
def activity_stats() -> Any:
    days = request.args.get("days", type=int, default=30)
    if days is None or not 1 <= days <= 365:
        return json_response({"error": "days must be between 1 and 365."}, status=400)

    stats = activity_logger.get_activity_stats(current_user.company_id, days=days)
    return json_response({"days": days, "stats": stats, "total": sum(stats.values())})
