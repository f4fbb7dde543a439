"""In-app notifications plus optional email copies."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from flask import current_app, g, has_request_context

from swiftexpense import db
from swiftexpense.models import Expense, Notification, NotificationType, User
from swiftexpense.services.email_service import email_service

logger = logging.getLogger(__name__)


def _format_amount(expense: Expense) -> str:
    return f"{expense.original_currency} {expense.amount:,.2f}"


def notify(
    user: User,
    notification_type: NotificationType,
    title: str,
    message: str,
    data: Optional[Dict[str, Any]] = None,
) -> Notification:
    """Add a notification to the current session; the caller commits.

    Email copies are queued and only sent once the request succeeds.
    """
    notification = Notification(
        user_id=user.id,
        company_id=user.company_id,
        type=notification_type,
        title=title,
        message=message,
        data=data,
        read=False,
    )
    db.session.add(notification)
    if has_request_context():
        g.setdefault("notification_outbox", []).append((user.email, user.first_name, title, message))
    return notification


def notify_approval_required(approver: User, expense: Expense) -> Notification:
    return notify(
        approver,
        NotificationType.APPROVAL_REQUIRED,
        "New Expense Requires Approval",
        f"{expense.employee.full_name} submitted an expense for {_format_amount(expense)} "
        "that requires your approval.",
        {"expense_id": expense.id, "amount": float(expense.amount)},
    )


def notify_submitted(expense: Expense) -> Notification:
    return notify(
        expense.employee,
        NotificationType.EXPENSE_SUBMITTED,
        "Expense Submitted",
        f"Your expense for {_format_amount(expense)} was submitted for approval.",
        {"expense_id": expense.id, "amount": float(expense.amount)},
    )


def notify_decision(expense: Expense, approver: User, approved: bool, comments: Optional[str]) -> Notification:
    verb = "approved" if approved else "rejected"
    message = f"{approver.full_name} {verb} your expense for {_format_amount(expense)}."
    if comments:
        message = f"{message} Comments: {comments}"
    return notify(
        expense.employee,
        NotificationType.EXPENSE_APPROVED if approved else NotificationType.EXPENSE_REJECTED,
        f"Expense {verb.capitalize()}",
        message,
        {"expense_id": expense.id, "amount": float(expense.amount), "comments": comments},
    )


def flush_outbox(response):
    """after_request hook: email queued notifications for successful requests."""
    outbox = g.pop("notification_outbox", None)
    if not outbox or response.status_code >= 400:
        return response
    if not current_app.config.get("NOTIFICATION_EMAILS_ENABLED"):
        return response

    for email, first_name, title, message in outbox:
        if not email_service.send_notification_email(email, title, message, user_name=first_name):
            logger.warning("Notification email to %s was not delivered", email)
    return response
