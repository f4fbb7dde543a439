"""Expense model definitions."""
from __future__ import annotations

import enum

from swiftexpense import db
from swiftexpense.utils.dates import isoformat, utcnow


class ExpenseStatus(enum.Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ExpenseCategory(enum.Enum):
    TRAVEL = "TRAVEL"
    FOOD = "FOOD"
    OFFICE = "OFFICE"
    EQUIPMENT = "EQUIPMENT"
    SOFTWARE = "SOFTWARE"
    OTHER = "OTHER"


EDITABLE_STATUSES = frozenset({ExpenseStatus.DRAFT, ExpenseStatus.PENDING})
TERMINAL_STATUSES = frozenset({ExpenseStatus.APPROVED, ExpenseStatus.REJECTED})


def _money(value):
    return float(value) if value is not None else None


class Expense(db.Model):
    __tablename__ = "expenses"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    original_currency = db.Column(db.String(10), nullable=False)
    converted_amount = db.Column(db.Numeric(12, 2), nullable=True)
    exchange_rate = db.Column(db.Numeric(18, 8), nullable=True)
    category = db.Column(db.Enum(ExpenseCategory, name="expense_category"), nullable=False)
    subcategory = db.Column(db.String(120), nullable=True)
    description = db.Column(db.Text, nullable=False)
    expense_date = db.Column(db.Date, nullable=False)
    receipt_url = db.Column(db.String(255), nullable=True)
    receipt_data = db.Column(db.JSON, nullable=True)
    location = db.Column(db.JSON, nullable=True)
    tags = db.Column(db.JSON, nullable=False, default=list)
    status = db.Column(
        db.Enum(ExpenseStatus, name="expense_status"),
        nullable=False,
        default=ExpenseStatus.PENDING,
        index=True,
    )
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    company = db.relationship("Company", back_populates="expenses", lazy="joined")
    employee = db.relationship("User", back_populates="expenses", foreign_keys=[employee_id], lazy="joined")
    approval_steps = db.relationship(
        "ApprovalStep",
        back_populates="expense",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="ApprovalStep.step_order",
    )

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_STATUSES

    @property
    def current_step(self):
        """The open approval step, if any."""
        return next((step for step in self.approval_steps if step.is_pending), None)

    def to_dict(self, include_steps: bool = False) -> dict:
        payload = {
            "id": self.id,
            "company_id": self.company_id,
            "employee_id": self.employee_id,
            "employee": self.employee.to_summary() if self.employee else None,
            "amount": _money(self.amount),
            "original_currency": self.original_currency,
            "converted_amount": _money(self.converted_amount),
            "company_currency": self.company.currency_code if self.company else None,
            "exchange_rate": float(self.exchange_rate) if self.exchange_rate is not None else None,
            "category": self.category.value if self.category else None,
            "subcategory": self.subcategory,
            "description": self.description,
            "expense_date": isoformat(self.expense_date),
            "receipt_url": self.receipt_url,
            "receipt_data": self.receipt_data,
            "location": self.location,
            "tags": self.tags or [],
            "status": self.status.value if self.status else None,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
        if include_steps:
            payload["approval_steps"] = [step.to_dict() for step in self.approval_steps]
        return payload

    def __repr__(self) -> str:
        return f"<Expense id={self.id} status={self.status.value if self.status else None}>"
