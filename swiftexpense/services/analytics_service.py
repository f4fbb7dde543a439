"""Aggregate reporting over a visibility-scoped expense query."""
from __future__ import annotations

from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy import func

from swiftexpense.models import Expense, ExpenseCategory, ExpenseStatus
from swiftexpense.utils.dates import month_start, shift_months, utcnow


def _amount_column():
    return func.coalesce(func.sum(func.coalesce(Expense.converted_amount, Expense.amount)), 0)


def _as_float(value: Any) -> float:
    return float(Decimal(str(value or 0)).quantize(Decimal("0.01")))


def _totals(query) -> Dict[str, Any]:
    count, amount = query.with_entities(func.count(Expense.id), _amount_column()).one()
    return {"count": count, "amount": _as_float(amount)}


def grouped_totals(query, column) -> Dict[str, Dict[str, Any]]:
    rows = query.with_entities(column, func.count(Expense.id), _amount_column()).group_by(column).all()
    return {key.value: {"count": count, "amount": _as_float(amount)} for key, count, amount in rows if key}


def category_breakdown(query) -> List[Dict[str, Any]]:
    totals = grouped_totals(query, Expense.category)
    grand_total = sum(item["amount"] for item in totals.values())
    breakdown = []
    for category in ExpenseCategory:
        item = totals.get(category.value, {"count": 0, "amount": 0.0})
        percentage = round(item["amount"] / grand_total * 100, 2) if grand_total else 0.0
        breakdown.append({"category": category.value, **item, "percentage": percentage})
    return sorted(breakdown, key=lambda row: row["amount"], reverse=True)


def status_breakdown(query) -> Dict[str, Dict[str, Any]]:
    totals = grouped_totals(query, Expense.status)
    return {status.value: totals.get(status.value, {"count": 0, "amount": 0.0}) for status in ExpenseStatus}


def dashboard_summary(query, today: date | None = None) -> Dict[str, Any]:
    today = today or utcnow().date()
    current_month = query.filter(Expense.expense_date >= month_start(today))
    statuses = status_breakdown(query)

    recent = query.order_by(Expense.created_at.desc(), Expense.id.desc()).limit(5).all()

    return {
        "summary": {
            "total_expenses": _totals(query),
            "current_month": _totals(current_month),
            "pending_approvals": statuses[ExpenseStatus.PENDING.value],
            "approved": statuses[ExpenseStatus.APPROVED.value],
            "rejected": statuses[ExpenseStatus.REJECTED.value],
            "drafts": statuses[ExpenseStatus.DRAFT.value],
        },
        "category_breakdown": category_breakdown(query),
        "status_breakdown": statuses,
        "recent_expenses": [expense.to_dict() for expense in recent],
    }


def monthly_trends(query, months: int = 6, today: date | None = None) -> List[Dict[str, Any]]:
    """Count and sum per calendar month for the last ``months`` months, zero-filled."""
    today = today or utcnow().date()
    first_month = shift_months(today, -(months - 1))

    buckets: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
    for offset in range(months):
        key = shift_months(first_month, offset).strftime("%Y-%m")
        buckets[key] = {"period": key, "count": 0, "amount": Decimal("0")}

    # Grouped in Python so the query stays portable between SQLite and PostgreSQL.
    rows = (
        query.filter(Expense.expense_date >= first_month)
        .with_entities(Expense.expense_date, func.coalesce(Expense.converted_amount, Expense.amount))
        .all()
    )
    for expense_date, amount in rows:
        bucket = buckets.get(expense_date.strftime("%Y-%m"))
        if bucket is None:
            continue
        bucket["count"] += 1
        bucket["amount"] += Decimal(str(amount or 0))

    return [{**bucket, "amount": _as_float(bucket["amount"])} for bucket in buckets.values()]


def approval_metrics(query) -> Dict[str, Any]:
    statuses = status_breakdown(query)
    approved = statuses[ExpenseStatus.APPROVED.value]["count"]
    rejected = statuses[ExpenseStatus.REJECTED.value]["count"]
    processed = approved + rejected
    return {
        "approval_rate": round(approved / processed * 100, 2) if processed else 0.0,
        "pending_count": statuses[ExpenseStatus.PENDING.value]["count"],
        "total_processed": processed,
    }
