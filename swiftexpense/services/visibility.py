"""Role-scoped visibility rules.

Every query starts from the caller's company. On top of that:

* EMPLOYEE sees their own expenses;
* MANAGER sees their own, their direct reports', and any expense on which
  they hold an approval step;
* ADMIN sees the whole company.
"""
from __future__ import annotations

from sqlalchemy import or_

from swiftexpense import db
from swiftexpense.models import ApprovalStep, ApprovalStatus, Expense, ExpenseStatus, User, UserRole


def visible_expenses(user: User):
    query = Expense.query.filter(Expense.company_id == user.company_id)

    if user.role == UserRole.ADMIN:
        return query

    if user.role == UserRole.MANAGER:
        report_ids = db.select(User.id).where(User.manager_id == user.id)
        assigned_ids = db.select(ApprovalStep.expense_id).where(ApprovalStep.approver_id == user.id)
        return query.filter(
            or_(
                Expense.employee_id == user.id,
                Expense.employee_id.in_(report_ids),
                Expense.id.in_(assigned_ids),
            )
        )

    return query.filter(Expense.employee_id == user.id)


def get_visible_expense(user: User, expense_id: int):
    return visible_expenses(user).filter(Expense.id == expense_id).first()


def visible_steps(user: User, status: ApprovalStatus | None = None, decided: bool = False):
    """Approval steps the caller may act on or review."""
    query = ApprovalStep.query.join(Expense, ApprovalStep.expense_id == Expense.id).filter(
        Expense.company_id == user.company_id
    )
    if user.role != UserRole.ADMIN:
        query = query.filter(ApprovalStep.approver_id == user.id)
    if status is not None:
        query = query.filter(ApprovalStep.status == status)
    elif decided:
        query = query.filter(ApprovalStep.status != ApprovalStatus.PENDING)
    return query


def unassigned_pending_expenses(user: User):
    """PENDING expenses that never got an approver; only admins can pick these up."""
    return Expense.query.filter(
        Expense.company_id == user.company_id,
        Expense.status == ExpenseStatus.PENDING,
        ~Expense.approval_steps.any(),
    )


def visible_users(user: User):
    query = User.query.filter(User.company_id == user.company_id)
    if user.role == UserRole.ADMIN:
        return query
    if user.role == UserRole.MANAGER:
        return query.filter(or_(User.id == user.id, User.manager_id == user.id))
    return query.filter(User.id == user.id)


def can_edit_expense(user: User, expense: Expense) -> bool:
    if expense.company_id != user.company_id:
        return False
    return expense.employee_id == user.id or user.role == UserRole.ADMIN
