"""Company model."""
from __future__ import annotations

from typing import Any, Dict

from swiftexpense import db
from swiftexpense.utils.dates import isoformat, utcnow


class Company(db.Model):
    __tablename__ = "companies"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, nullable=False)
    country = db.Column(db.String(120), nullable=False)
    currency_code = db.Column(db.String(10), nullable=False)
    settings = db.Column(db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    users = db.relationship(
        "User",
        back_populates="company",
        lazy="selectin",
        cascade="all, delete-orphan",
    )
    expenses = db.relationship(
        "Expense",
        back_populates="company",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )
    approval_workflows = db.relationship(
        "ApprovalWorkflow",
        back_populates="company",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    def get_setting(self, key: str, default: Any = None) -> Any:
        return (self.settings or {}).get(key, default)

    def update_settings(self, changes: Dict[str, Any]) -> None:
        # Reassign so the JSON column is flagged dirty.
        merged = dict(self.settings or {})
        merged.update(changes)
        self.settings = merged

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "country": self.country,
            "currency_code": self.currency_code,
            "settings": self.settings or {},
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Company {self.name} ({self.currency_code})>"
