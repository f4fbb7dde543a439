"""Approval workflow for expenses.

Statuses move DRAFT -> PENDING -> APPROVED | REJECTED. Every transition adds
its approval step, notifications and activity rows to the current session
so that the caller's single commit (or rollback) covers all of them.
"""
from __future__ import annotations

import logging
from typing import Optional

from swiftexpense import db
from swiftexpense.errors import InvalidTransition, PermissionDenied, ValidationFailed
from swiftexpense.models import (
    APPROVER_ROLES,
    ActivityAction,
    ApprovalStatus,
    ApprovalStep,
    Expense,
    ExpenseStatus,
    User,
    UserRole,
)
from swiftexpense.services import activity_logger, notification_service
from swiftexpense.utils.dates import utcnow

logger = logging.getLogger(__name__)


def find_approver(expense: Expense) -> Optional[User]:
    """Pick who approves ``expense``.

    The employee's own manager when active and allowed to approve, else the
    first active manager in the company, else the first active admin. The
    submitter is never their own approver.
    """
    employee = expense.employee
    manager = employee.manager
    if (
        manager is not None
        and manager.is_active
        and manager.role in APPROVER_ROLES
        and manager.company_id == expense.company_id
        and manager.id != employee.id
    ):
        return manager

    for role in (UserRole.MANAGER, UserRole.ADMIN):
        candidate = (
            User.query.filter(
                User.company_id == expense.company_id,
                User.role == role,
                User.is_active.is_(True),
                User.id != employee.id,
            )
            .order_by(User.created_at.asc(), User.id.asc())
            .first()
        )
        if candidate is not None:
            return candidate
    return None


def submit_expense(expense: Expense, actor: User) -> Optional[ApprovalStep]:
    """Move an expense into PENDING and open its approval step."""
    if expense.status not in {ExpenseStatus.DRAFT, ExpenseStatus.PENDING} or expense.approval_steps:
        raise InvalidTransition(f"Expense in status {expense.status.value} cannot be submitted.")

    expense.status = ExpenseStatus.PENDING
    db.session.flush()

    step = None
    approver = find_approver(expense)
    if approver is None:
        logger.warning("No approver available for expense %s in company %s", expense.id, expense.company_id)
    else:
        step = ApprovalStep(expense=expense, approver=approver, step_order=1, status=ApprovalStatus.PENDING)
        db.session.add(step)
        notification_service.notify_approval_required(approver, expense)

    notification_service.notify_submitted(expense)
    activity_logger.log_activity(
        actor,
        ActivityAction.EXPENSE_SUBMITTED,
        {"approver_id": approver.id if approver else None},
        expense_id=expense.id,
    )
    logger.info("Expense %s submitted, approver=%s", expense.id, approver.id if approver else None)
    return step


def decide(expense: Expense, actor: User, decision: ApprovalStatus, comments: Optional[str] = None) -> ApprovalStep:
    """Approve or reject a pending expense on behalf of ``actor``."""
    if decision not in {ApprovalStatus.APPROVED, ApprovalStatus.REJECTED}:
        raise ValidationFailed("Decision must be APPROVED or REJECTED.")

    if actor.role not in APPROVER_ROLES:
        raise PermissionDenied("Only managers and admins can decide on expenses.")
    if expense.company_id != actor.company_id:
        raise PermissionDenied("Expense belongs to another company.")
    if expense.employee_id == actor.id:
        raise PermissionDenied("You cannot decide on your own expense.")
    if expense.status != ExpenseStatus.PENDING:
        raise InvalidTransition(f"Expense is {expense.status.value}; only PENDING expenses can be decided.")

    comments = (comments or "").strip() or None
    if (
        decision == ApprovalStatus.REJECTED
        and not comments
        and expense.company.get_setting("require_rejection_comment", False)
    ):
        raise ValidationFailed("Comments are required when rejecting an expense.")

    step = expense.current_step
    if step is None:
        if actor.role != UserRole.ADMIN:
            raise PermissionDenied("This expense is not assigned to you.")
        step = ApprovalStep(expense=expense, approver=actor, step_order=len(expense.approval_steps) + 1)
        db.session.add(step)
    elif step.approver_id != actor.id:
        if actor.role != UserRole.ADMIN:
            raise PermissionDenied("This expense is not assigned to you.")
        step.approver = actor

    approved = decision == ApprovalStatus.APPROVED
    step.status = decision
    step.comments = comments
    step.decided_at = utcnow()
    expense.status = ExpenseStatus.APPROVED if approved else ExpenseStatus.REJECTED
    db.session.flush()

    notification_service.notify_decision(expense, actor, approved, comments)
    activity_logger.log_activity(
        actor,
        ActivityAction.EXPENSE_APPROVED if approved else ActivityAction.EXPENSE_REJECTED,
        {"comments": comments, "step_id": step.id},
        expense_id=expense.id,
    )
    logger.info("Expense %s %s by user %s", expense.id, decision.value, actor.id)
    return step


def lock_expense(expense_id: int, company_id: int) -> Optional[Expense]:
    """Load an expense for a decision, holding a row lock where the database supports it."""
    return (
        Expense.query.filter(Expense.id == expense_id, Expense.company_id == company_id)
        .with_for_update(of=Expense)
        .populate_existing()
        .first()
    )
