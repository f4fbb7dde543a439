"""User-related models."""
from __future__ import annotations

import enum

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from swiftexpense import db
from swiftexpense.utils.dates import isoformat, utcnow


class UserRole(enum.Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


APPROVER_ROLES = frozenset({UserRole.ADMIN, UserRole.MANAGER})


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.Enum(UserRole, name="user_role"), nullable=False, default=UserRole.EMPLOYEE)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    manager_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    avatar_url = db.Column(db.String(255), nullable=True)
    preferences = db.Column(db.JSON, nullable=False, default=dict)
    last_login_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    company = db.relationship("Company", back_populates="users", lazy="joined")
    manager = db.relationship(
        "User",
        remote_side=[id],
        back_populates="direct_reports",
        lazy="select",
    )
    direct_reports = db.relationship(
        "User",
        back_populates="manager",
        lazy="select",
    )
    expenses = db.relationship(
        "Expense",
        foreign_keys="Expense.employee_id",
        back_populates="employee",
        lazy="dynamic",
    )
    approval_steps = db.relationship(
        "ApprovalStep",
        foreign_keys="ApprovalStep.approver_id",
        back_populates="approver",
        lazy="dynamic",
    )

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def get_id(self) -> str:
        return str(self.id)

    @property
    def full_name(self) -> str:
        """Get user's full name."""
        return f"{self.first_name} {self.last_name}"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def can_approve(self) -> bool:
        return self.role in APPROVER_ROLES

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "email": self.email,
            "role": self.role.value,
        }

    def to_dict(self, include_company: bool = False) -> dict:
        payload = {
            **self.to_summary(),
            "company_id": self.company_id,
            "manager_id": self.manager_id,
            "is_active": self.is_active,
            "avatar_url": self.avatar_url,
            "preferences": self.preferences or {},
            "last_login_at": isoformat(self.last_login_at),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
        if include_company:
            payload["company"] = self.company.to_dict() if self.company else None
        return payload

    def __repr__(self) -> str:
        return f"<User {self.email} role={self.role.value if self.role else None}>"
