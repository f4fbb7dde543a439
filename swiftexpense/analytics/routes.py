"""Reporting routes over the caller's visible expenses."""
from __future__ import annotations

from typing import Any

from flask import request
from flask_login import current_user, login_required

from swiftexpense.services import analytics_service
from swiftexpense.services.visibility import visible_expenses
from swiftexpense.utils.helpers import json_response

from . import analytics_bp

MAX_TREND_MONTHS = 24


@analytics_bp.route("/dashboard", methods=["GET"])
@login_required
def dashboard() -> Any:
    query = visible_expenses(current_user)
    payload = analytics_service.dashboard_summary(query)
    payload["approval_metrics"] = analytics_service.approval_metrics(query)
    payload["currency"] = current_user.company.currency_code
    return json_response(payload)


@analytics_bp.route("/trends", methods=["GET"])
@login_required
def trends() -> Any:
    months = request.args.get("months", type=int, default=6)
    if months is None or not 1 <= months <= MAX_TREND_MONTHS:
        return json_response({"error": f"months must be between 1 and {MAX_TREND_MONTHS}."}, status=400)

    return json_response(
        {
            "months": months,
            "currency": current_user.company.currency_code,
            "trends": analytics_service.monthly_trends(visible_expenses(current_user), months=months),
        }
    )


@analytics_bp.route("/categories", methods=["GET"])
@login_required
def categories() -> Any:
    return json_response(
        {
            "currency": current_user.company.currency_code,
            "categories": analytics_service.category_breakdown(visible_expenses(current_user)),
        }
    )
