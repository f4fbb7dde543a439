"""Audit trail writes and queries."""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from flask import has_request_context, request
from sqlalchemy import func, or_

from swiftexpense import db
from swiftexpense.models import ActivityAction, ActivityLog, User, UserRole
from swiftexpense.utils.dates import utcnow

logger = logging.getLogger(__name__)


def log_activity(
    user: User,
    action: ActivityAction,
    details: Optional[Dict[str, Any]] = None,
    expense_id: Optional[int] = None,
) -> ActivityLog:
    """Add an activity row to the current session; the caller commits."""
    ip_address = None
    user_agent = None
    if has_request_context():
        ip_address = request.headers.get("X-Forwarded-For", request.remote_addr)
        user_agent = (request.user_agent.string or None) if request.user_agent else None
        details = {"method": request.method, "path": request.path, **(details or {})}

    entry = ActivityLog(
        user_id=user.id,
        expense_id=expense_id,
        action=action,
        details=details,
        ip_address=ip_address[:64] if ip_address else None,
        user_agent=user_agent[:255] if user_agent else None,
    )
    db.session.add(entry)
    logger.debug("Activity %s by user %s (expense=%s)", action.value, user.id, expense_id)
    return entry


def activity_query(viewer: User):
    """Activity rows the viewer may read: company-wide for admins, team-wide for managers."""
    query = ActivityLog.query.join(User, ActivityLog.user_id == User.id).filter(
        User.company_id == viewer.company_id
    )
    if viewer.role == UserRole.MANAGER:
        query = query.filter(or_(User.id == viewer.id, User.manager_id == viewer.id))
    return query


def get_activity_history(
    viewer: User,
    user_id: Optional[int] = None,
    expense_id: Optional[int] = None,
    action: Optional[ActivityAction] = None,
):
    query = activity_query(viewer)
    if user_id is not None:
        query = query.filter(ActivityLog.user_id == user_id)
    if expense_id is not None:
        query = query.filter(ActivityLog.expense_id == expense_id)
    if action is not None:
        query = query.filter(ActivityLog.action == action)
    return query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())


def get_activity_stats(company_id: int, days: int = 30) -> Dict[str, int]:
    since = utcnow() - timedelta(days=days)
    rows = (
        db.session.query(ActivityLog.action, func.count(ActivityLog.id))
        .join(User, ActivityLog.user_id == User.id)
        .filter(User.company_id == company_id, ActivityLog.created_at >= since)
        .group_by(ActivityLog.action)
        .all()
    )
    return {action.value: count for action, count in rows}
