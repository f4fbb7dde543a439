"""Approval queue and decision routes."""
from __future__ import annotations

from typing import Any

from flask import current_app, request
from flask_login import current_user, login_required

from swiftexpense import db
from swiftexpense.expenses.forms import DecisionForm
from swiftexpense.models import ApprovalStatus, ApprovalStep, Expense, UserRole
from swiftexpense.services import approval_engine
from swiftexpense.services.visibility import get_visible_expense, unassigned_pending_expenses, visible_steps
from swiftexpense.utils.helpers import (
    bind_form,
    json_response,
    paginate,
    parse_pagination,
    role_required,
    validation_error,
)

from . import approvals_bp


def _step_page(query):
    page, limit = parse_pagination(current_app.config["EXPENSES_PER_PAGE"])
    steps, pagination = paginate(query, page, limit)
    return {"approvals": [step.to_dict(include_expense=True) for step in steps], "pagination": pagination}


@approvals_bp.route("/pending", methods=["GET"])
@login_required
@role_required(UserRole.MANAGER, UserRole.ADMIN)
def pending_approvals() -> Any:
    """Open steps assigned to the caller (every open step for admins), oldest first.

    Admins also get ``unassigned``: PENDING expenses with no approval step.
    """
    query = visible_steps(current_user, status=ApprovalStatus.PENDING).order_by(
        ApprovalStep.created_at.asc(), ApprovalStep.id.asc()
    )
    payload = _step_page(query)
    if current_user.role == UserRole.ADMIN:
        unassigned = unassigned_pending_expenses(current_user).order_by(Expense.created_at.asc(), Expense.id.asc())
        payload["unassigned"] = [expense.to_dict() for expense in unassigned]
    return json_response(payload)


@approvals_bp.route("/history", methods=["GET"])
@login_required
@role_required(UserRole.MANAGER, UserRole.ADMIN)
def approval_history() -> Any:
    status_filter = (request.args.get("status") or "").strip().upper()
    if status_filter and status_filter not in (ApprovalStatus.APPROVED.value, ApprovalStatus.REJECTED.value):
        return json_response({"error": "Status must be APPROVED or REJECTED."}, status=400)

    query = visible_steps(
        current_user, status=ApprovalStatus[status_filter] if status_filter else None, decided=True
    ).order_by(ApprovalStep.decided_at.desc(), ApprovalStep.id.desc())
    return json_response(_step_page(query))


def _decide(expense_id: int, decision: ApprovalStatus):
    if get_visible_expense(current_user, expense_id) is None:
        return json_response({"error": "Expense not found."}, status=404)

    form, _ = bind_form(DecisionForm)
    if not form.validate():
        return validation_error(form.errors)

    expense = approval_engine.lock_expense(expense_id, current_user.company_id)
    if expense is None:
        return json_response({"error": "Expense not found."}, status=404)

    step = approval_engine.decide(expense, current_user._get_current_object(), decision, form.comments.data)
    db.session.commit()

    verb = "approved" if decision == ApprovalStatus.APPROVED else "rejected"
    return json_response(
        {
            "message": f"Expense {verb}.",
            "expense": expense.to_dict(include_steps=True),
            "approval": step.to_dict(),
        }
    )


@approvals_bp.route("/<int:expense_id>/approve", methods=["POST"])
@login_required
def approve_expense(expense_id: int) -> Any:
    return _decide(expense_id, ApprovalStatus.APPROVED)


@approvals_bp.route("/<int:expense_id>/reject", methods=["POST"])
@login_required
def reject_expense(expense_id: int) -> Any:
    return _decide(expense_id, ApprovalStatus.REJECTED)
