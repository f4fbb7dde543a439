"""Approval-related models."""
from __future__ import annotations

import enum

from swiftexpense import db
from swiftexpense.utils.dates import isoformat, utcnow


class ApprovalStatus(enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ApprovalStep(db.Model):
    __tablename__ = "approval_steps"

    id = db.Column(db.Integer, primary_key=True)
    expense_id = db.Column(
        db.Integer, db.ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    approver_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    step_order = db.Column(db.Integer, nullable=False, default=1)
    status = db.Column(
        db.Enum(ApprovalStatus, name="approval_status"),
        nullable=False,
        default=ApprovalStatus.PENDING,
        index=True,
    )
    comments = db.Column(db.Text, nullable=True)
    decided_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    expense = db.relationship("Expense", back_populates="approval_steps", lazy="joined")
    approver = db.relationship("User", back_populates="approval_steps", lazy="joined")

    @property
    def is_pending(self) -> bool:
        return self.status == ApprovalStatus.PENDING

    def to_dict(self, include_expense: bool = False) -> dict:
        payload = {
            "id": self.id,
            "expense_id": self.expense_id,
            "approver_id": self.approver_id,
            "approver": self.approver.to_summary() if self.approver else None,
            "step_order": self.step_order,
            "status": self.status.value if self.status else None,
            "comments": self.comments,
            "decided_at": isoformat(self.decided_at),
            "created_at": isoformat(self.created_at),
        }
        if include_expense:
            payload["expense"] = self.expense.to_dict() if self.expense else None
        return payload

    def __repr__(self) -> str:
        return (
            f"<ApprovalStep expense_id={self.expense_id} "
            f"status={self.status.value if self.status else None}>"
        )


class ApprovalWorkflow(db.Model):
    __tablename__ = "approval_workflows"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    rules = db.Column(db.JSON, nullable=False, default=dict)
    conditions = db.Column(db.JSON, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    company = db.relationship("Company", back_populates="approval_workflows", lazy="joined")
    creator = db.relationship("User", lazy="joined")

    __table_args__ = (db.UniqueConstraint("company_id", "name", name="uq_approval_workflows_company_name"),)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company_id": self.company_id,
            "name": self.name,
            "description": self.description,
            "rules": self.rules or {},
            "conditions": self.conditions,
            "is_active": self.is_active,
            "created_by": self.created_by,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<ApprovalWorkflow {self.name}>"
