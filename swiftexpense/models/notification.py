"""In-app notification model."""
from __future__ import annotations

import enum

from swiftexpense import db
from swiftexpense.utils.dates import isoformat, utcnow


class NotificationType(enum.Enum):
    EXPENSE_SUBMITTED = "EXPENSE_SUBMITTED"
    APPROVAL_REQUIRED = "APPROVAL_REQUIRED"
    EXPENSE_APPROVED = "EXPENSE_APPROVED"
    EXPENSE_REJECTED = "EXPENSE_REJECTED"


class Notification(db.Model):
    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    type = db.Column(db.Enum(NotificationType, name="notification_type"), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    data = db.Column(db.JSON, nullable=True)
    read = db.Column(db.Boolean, default=False, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    user = db.relationship("User", lazy="joined")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "company_id": self.company_id,
            "type": self.type.value if self.type else None,
            "title": self.title,
            "message": self.message,
            "data": self.data,
            "read": self.read,
            "created_at": isoformat(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<Notification {self.type.value if self.type else None} user_id={self.user_id}>"
