"""Per-user notification inbox."""
from __future__ import annotations

from typing import Any

from flask import current_app
from flask_login import current_user, login_required

from swiftexpense import db
from swiftexpense.models import Notification
from swiftexpense.utils.helpers import json_response, paginate, parse_bool_arg, parse_pagination

from . import notifications_bp


def _own_notifications():
    return Notification.query.filter_by(user_id=current_user.id)


def _own_notification(notification_id: int):
    return _own_notifications().filter(Notification.id == notification_id).first()


@notifications_bp.route("", methods=["GET"])
@login_required
def list_notifications() -> Any:
    query = _own_notifications()
    if parse_bool_arg("unread"):
        query = query.filter(Notification.read.is_(False))

    page, limit = parse_pagination(
        current_app.config["NOTIFICATIONS_PER_PAGE"], current_app.config["MAX_NOTIFICATIONS_PER_PAGE"]
    )
    notifications, pagination = paginate(
        query.order_by(Notification.created_at.desc(), Notification.id.desc()), page, limit
    )
    return json_response(
        {
            "notifications": [notification.to_dict() for notification in notifications],
            "pagination": pagination,
            "unread_count": _own_notifications().filter(Notification.read.is_(False)).count(),
        }
    )


@notifications_bp.route("/unread-count", methods=["GET"])
@login_required
def unread_count() -> Any:
    return json_response({"unread_count": _own_notifications().filter(Notification.read.is_(False)).count()})


@notifications_bp.route("/<int:notification_id>/read", methods=["POST", "PUT"])
@login_required
def mark_read(notification_id: int) -> Any:
    notification = _own_notification(notification_id)
    if notification is None:
        return json_response({"error": "Notification not found."}, status=404)
    notification.read = True
    db.session.commit()
    return json_response({"message": "Notification marked as read.", "notification": notification.to_dict()})


@notifications_bp.route("/read-all", methods=["POST", "PUT"])
@login_required
def mark_all_read() -> Any:
    updated = (
        _own_notifications()
        .filter(Notification.read.is_(False))
        .update({Notification.read: True}, synchronize_session=False)
    )
    db.session.commit()
    return json_response({"message": "All notifications marked as read.", "updated": updated})


@notifications_bp.route("/<int:notification_id>", methods=["DELETE"])
@login_required
def delete_notification(notification_id: int) -> Any:
    notification = _own_notification(notification_id)
    if notification is None:
        return json_response({"error": "Notification not found."}, status=404)
    db.session.delete(notification)
    db.session.commit()
    return json_response({"message": "Notification deleted."})
