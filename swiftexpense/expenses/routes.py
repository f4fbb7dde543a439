"""Expense resource routes."""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from flask import current_app, request
from flask_login import current_user, login_required
from sqlalchemy import or_

from swiftexpense import db
from swiftexpense.errors import InvalidTransition, PermissionDenied, ResourceNotFound
from swiftexpense.models import ActivityAction, ActivityLog, Expense, ExpenseCategory, ExpenseStatus
from swiftexpense.services import activity_logger, approval_engine, currency_service
from swiftexpense.services.visibility import can_edit_expense, get_visible_expense, visible_expenses
from swiftexpense.utils.helpers import (
    bind_form,
    json_response,
    paginate,
    parse_pagination,
    validation_error,
)

from . import expenses_bp
from .forms import ExpenseForm, ExpenseUpdateForm

MAX_TAGS = 20


def _clean_extras(payload: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, List[str]]]:
    """Validate the JSON-only fields a WTForms form cannot carry."""
    extras: Dict[str, Any] = {}
    errors: Dict[str, List[str]] = {}

    if "tags" in payload:
        tags = payload["tags"] or []
        if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
            errors["tags"] = ["Tags must be a list of strings."]
        elif len(tags) > MAX_TAGS:
            errors["tags"] = [f"At most {MAX_TAGS} tags are allowed."]
        else:
            extras["tags"] = list(dict.fromkeys(tag.strip() for tag in tags if tag.strip()))

    if "location" in payload:
        location = payload["location"]
        if location is not None and not isinstance(location, dict):
            errors["location"] = ["Location must be an object."]
        else:
            extras["location"] = location

    if "receipt_data" in payload:
        receipt_data = payload["receipt_data"]
        if receipt_data is not None and not isinstance(receipt_data, dict):
            errors["receipt_data"] = ["Receipt data must be an object."]
        else:
            extras["receipt_data"] = receipt_data

    return extras, errors


def _parse_date_arg(name: str) -> Optional[date]:
    raw = request.args.get(name)
    if not raw:
        return None
    return date.fromisoformat(raw)


def _apply_conversion(expense: Expense) -> None:
    company_currency = current_user.company.currency_code
    conversion = currency_service.convert_currency(expense.amount, expense.original_currency, company_currency)
    if not conversion.success:
        current_app.logger.warning(
            "Stored expense amount unconverted: no %s->%s rate", expense.original_currency, company_currency
        )
    expense.converted_amount = conversion.converted_amount
    expense.exchange_rate = conversion.exchange_rate


def _editable_expense(expense_id: int) -> Expense:
    expense = get_visible_expense(current_user, expense_id)
    if expense is None:
        raise ResourceNotFound("Expense not found.")
    if not can_edit_expense(current_user, expense):
        raise PermissionDenied("Only the submitter or an admin can change this expense.")
    if not expense.is_editable:
        raise InvalidTransition(f"Expense is {expense.status.value} and can no longer be changed.")
    return expense


@expenses_bp.route("/categories", methods=["GET"])
@login_required
def list_categories() -> Any:
    return json_response({"categories": [category.value for category in ExpenseCategory]})


@expenses_bp.route("", methods=["GET"])
@login_required
def list_expenses() -> Any:
    """List expenses visible to the caller, newest first."""
    query = visible_expenses(current_user)

    status_filter = (request.args.get("status") or "").strip().upper()
    if status_filter:
        if status_filter not in ExpenseStatus.__members__:
            return json_response({"error": f"Unknown status '{status_filter}'."}, status=400)
        query = query.filter(Expense.status == ExpenseStatus[status_filter])

    category_filter = (request.args.get("category") or "").strip().upper()
    if category_filter:
        if category_filter not in ExpenseCategory.__members__:
            return json_response({"error": f"Unknown category '{category_filter}'."}, status=400)
        query = query.filter(Expense.category == ExpenseCategory[category_filter])

    employee_id = request.args.get("employee_id", type=int)
    if employee_id:
        query = query.filter(Expense.employee_id == employee_id)

    try:
        date_from = _parse_date_arg("date_from")
        date_to = _parse_date_arg("date_to")
    except ValueError:
        return json_response({"error": "Dates must use the YYYY-MM-DD format."}, status=400)
    if date_from:
        query = query.filter(Expense.expense_date >= date_from)
    if date_to:
        query = query.filter(Expense.expense_date <= date_to)

    search_query = (request.args.get("search") or "").strip()
    if search_query:
        like_term = f"%{search_query}%"
        query = query.filter(or_(Expense.description.ilike(like_term), Expense.subcategory.ilike(like_term)))

    page, limit = parse_pagination(current_app.config["EXPENSES_PER_PAGE"])
    expenses, pagination = paginate(query.order_by(Expense.created_at.desc(), Expense.id.desc()), page, limit)
    return json_response({"expenses": [expense.to_dict() for expense in expenses], "pagination": pagination})


@expenses_bp.route("", methods=["POST"])
@login_required
def create_expense() -> Any:
    """Create an expense, converting to the company currency and submitting it unless drafted."""
    form, payload = bind_form(ExpenseForm)
    extras, extra_errors = _clean_extras(payload)
    if not form.validate() or extra_errors:
        return validation_error({**form.errors, **extra_errors})

    company = current_user.company
    currency = form.currency.data or company.currency_code
    if currency != company.currency_code and not company.get_setting("allow_multi_currency", True):
        return validation_error({"currency": [f"Expenses must be filed in {company.currency_code}."]})

    is_draft = form.status.data == ExpenseStatus.DRAFT.value
    expense = Expense(
        company=company,
        employee=current_user._get_current_object(),
        amount=Decimal(form.amount.data).quantize(Decimal("0.01")),
        original_currency=currency,
        category=ExpenseCategory[form.category.data],
        subcategory=form.subcategory.data or None,
        description=form.description.data,
        expense_date=form.expense_date.data,
        receipt_url=form.receipt_url.data or None,
        status=ExpenseStatus.DRAFT if is_draft else ExpenseStatus.PENDING,
        tags=extras.get("tags", []),
        location=extras.get("location"),
        receipt_data=extras.get("receipt_data"),
    )
    _apply_conversion(expense)
    db.session.add(expense)
    db.session.flush()

    activity_logger.log_activity(
        current_user, ActivityAction.EXPENSE_CREATED, {"amount": float(expense.amount)}, expense_id=expense.id
    )
    step = None if is_draft else approval_engine.submit_expense(expense, current_user)
    db.session.commit()

    return json_response(
        {
            "message": "Expense saved as draft." if is_draft else "Expense submitted.",
            "expense": expense.to_dict(include_steps=True),
            "approval": step.to_dict() if step else None,
        },
        status=201,
    )


@expenses_bp.route("/<int:expense_id>", methods=["GET"])
@login_required
def get_expense(expense_id: int) -> Any:
    expense = get_visible_expense(current_user, expense_id)
    if expense is None:
        return json_response({"error": "Expense not found."}, status=404)
    return json_response({"expense": expense.to_dict(include_steps=True)})


@expenses_bp.route("/<int:expense_id>", methods=["PUT", "PATCH"])
@login_required
def update_expense(expense_id: int) -> Any:
    """Edit a DRAFT or PENDING expense; amounts are re-converted when they change."""
    expense = _editable_expense(expense_id)

    form, payload = bind_form(ExpenseUpdateForm)
    extras, extra_errors = _clean_extras(payload)
    if not form.validate() or extra_errors:
        return validation_error({**form.errors, **extra_errors})

    changes: Dict[str, Any] = {}
    if "category" in payload:
        if form.category.data not in ExpenseCategory.__members__:
            return validation_error({"category": ["Not a valid choice."]})
        expense.category = ExpenseCategory[form.category.data]
        changes["category"] = expense.category.value

    if "description" in payload:
        if not form.description.data:
            return validation_error({"description": ["This field cannot be empty."]})
        expense.description = form.description.data
        changes["description"] = expense.description

    if "expense_date" in payload:
        if form.expense_date.data is None:
            return validation_error({"expense_date": ["This field cannot be empty."]})
        expense.expense_date = form.expense_date.data
        changes["expense_date"] = expense.expense_date.isoformat()

    for field in ("subcategory", "receipt_url"):
        if field in payload:
            setattr(expense, field, getattr(form, field).data or None)
            changes[field] = getattr(expense, field)

    for field, value in extras.items():
        setattr(expense, field, value)
        changes[field] = value

    money_changed = False
    if "amount" in payload:
        if form.amount.data is None:
            return validation_error({"amount": ["This field cannot be empty."]})
        expense.amount = Decimal(form.amount.data).quantize(Decimal("0.01"))
        changes["amount"] = float(expense.amount)
        money_changed = True
    if "currency" in payload and form.currency.data:
        company = expense.company
        if form.currency.data != company.currency_code and not company.get_setting("allow_multi_currency", True):
            return validation_error({"currency": [f"Expenses must be filed in {company.currency_code}."]})
        expense.original_currency = form.currency.data
        changes["currency"] = expense.original_currency
        money_changed = True
    if money_changed:
        _apply_conversion(expense)

    activity_logger.log_activity(current_user, ActivityAction.EXPENSE_UPDATED, {"changes": changes}, expense_id=expense.id)
    db.session.commit()

    return json_response({"message": "Expense updated.", "expense": expense.to_dict(include_steps=True)})


@expenses_bp.route("/<int:expense_id>", methods=["DELETE"])
@login_required
def delete_expense(expense_id: int) -> Any:
    expense = _editable_expense(expense_id)

    activity_logger.log_activity(
        current_user,
        ActivityAction.EXPENSE_DELETED,
        {
            "deleted_expense_id": expense.id,
            "amount": float(expense.amount),
            "original_currency": expense.original_currency,
            "description": expense.description,
        },
    )
    ActivityLog.query.filter_by(expense_id=expense.id).update({"expense_id": None}, synchronize_session=False)
    db.session.delete(expense)
    db.session.commit()

    return json_response({"message": "Expense deleted."})


@expenses_bp.route("/<int:expense_id>/submit", methods=["POST"])
@login_required
def submit_expense(expense_id: int) -> Any:
    """Submit a DRAFT expense for approval."""
    expense = get_visible_expense(current_user, expense_id)
    if expense is None:
        return json_response({"error": "Expense not found."}, status=404)
    if expense.employee_id != current_user.id:
        return json_response({"error": "Only the submitter can submit this expense."}, status=403)
    if expense.status != ExpenseStatus.DRAFT:
        return json_response({"error": f"Expense is {expense.status.value}; only drafts can be submitted."}, status=409)

    step = approval_engine.submit_expense(expense, current_user)
    db.session.commit()

    return json_response(
        {
            "message": "Expense submitted.",
            "expense": expense.to_dict(include_steps=True),
            "approval": step.to_dict() if step else None,
        }
    )
