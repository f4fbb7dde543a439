"""Activity (audit) logging model."""
from __future__ import annotations

import enum

from swiftexpense import db
from swiftexpense.utils.dates import isoformat, utcnow


class ActivityAction(enum.Enum):
    LOGIN = "LOGIN"
    EXPENSE_CREATED = "EXPENSE_CREATED"
    EXPENSE_UPDATED = "EXPENSE_UPDATED"
    EXPENSE_DELETED = "EXPENSE_DELETED"
    EXPENSE_SUBMITTED = "EXPENSE_SUBMITTED"
    EXPENSE_APPROVED = "EXPENSE_APPROVED"
    EXPENSE_REJECTED = "EXPENSE_REJECTED"
    USER_CREATED = "USER_CREATED"
    USER_UPDATED = "USER_UPDATED"


class ActivityLog(db.Model):
    __tablename__ = "activity_logs"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    expense_id = db.Column(
        db.Integer, db.ForeignKey("expenses.id", ondelete="SET NULL"), nullable=True, index=True
    )
    action = db.Column(db.Enum(ActivityAction, name="activity_action"), nullable=False, index=True)
    details = db.Column(db.JSON, nullable=True)
    ip_address = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    user = db.relationship("User", lazy="joined")
    expense = db.relationship("Expense", lazy="joined")

    def to_dict(self) -> dict:
        expense = None
        if self.expense is not None:
            expense = {
                "description": self.expense.description,
                "amount": float(self.expense.amount) if self.expense.amount is not None else None,
                "original_currency": self.expense.original_currency,
                "status": self.expense.status.value if self.expense.status else None,
            }
        return {
            "id": self.id,
            "user_id": self.user_id,
            "user": self.user.to_summary() if self.user else None,
            "expense_id": self.expense_id,
            "expense": expense,
            "action": self.action.value if self.action else None,
            "details": self.details,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "created_at": isoformat(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<ActivityLog {self.action.value if self.action else None} user_id={self.user_id}>"
