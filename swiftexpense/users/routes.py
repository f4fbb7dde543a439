"""User management routes."""
from __future__ import annotations

from typing import Any, Dict, Optional

from flask import current_app, request
from flask_login import current_user, login_required
from sqlalchemy import or_

from swiftexpense import db
from swiftexpense.models import APPROVER_ROLES, ActivityAction, User, UserRole
from swiftexpense.services import activity_logger
from swiftexpense.services.visibility import visible_users
from swiftexpense.utils.helpers import bind_form, json_response, role_required, validation_error

from . import users_bp
from .forms import UserCreateForm, UserUpdateForm


def _resolve_manager(raw_manager_id: Any, user_id: Optional[int] = None):
    """Return (manager, error) for a manager_id taken from a request payload."""
    if raw_manager_id in (None, ""):
        return None, None
    try:
        manager_id = int(raw_manager_id)
    except (TypeError, ValueError):
        return None, "Invalid manager_id."
    if user_id is not None and manager_id == user_id:
        return None, "A user cannot be their own manager."

    manager = db.session.get(User, manager_id)
    if manager is None or manager.company_id != current_user.company_id:
        return None, "Manager must belong to the same company."
    if manager.role not in APPROVER_ROLES or not manager.is_active:
        return None, "Manager must be an active manager or admin."
    return manager, None


@users_bp.route("", methods=["GET"])
@login_required
@role_required(UserRole.ADMIN, UserRole.MANAGER)
def list_users() -> Any:
    """List users visible to the caller."""
    query = visible_users(current_user)

    role_filter = (request.args.get("role") or "").strip().upper()
    if role_filter:
        if role_filter not in UserRole.__members__:
            return json_response({"error": f"Unknown role '{role_filter}'."}, status=400)
        query = query.filter(User.role == UserRole[role_filter])

    search_query = (request.args.get("search") or "").strip()
    if search_query:
        like_term = f"%{search_query}%"
        query = query.filter(
            or_(User.first_name.ilike(like_term), User.last_name.ilike(like_term), User.email.ilike(like_term))
        )

    users = query.order_by(User.first_name.asc(), User.last_name.asc()).all()
    return json_response({"users": [user.to_dict() for user in users]})


@users_bp.route("", methods=["POST"])
@login_required
@role_required(UserRole.ADMIN)
def create_user() -> Any:
    """Create a new employee, manager or admin in the caller's company."""
    form, payload = bind_form(UserCreateForm)
    if not form.validate():
        return validation_error(form.errors)

    if User.query.filter_by(email=form.email.data).first():
        return json_response({"error": "Email already exists."}, status=409)

    manager, error = _resolve_manager(payload.get("manager_id"))
    if error:
        return json_response({"error": error}, status=400)

    role = UserRole[form.role.data]
    user = User(
        first_name=form.first_name.data,
        last_name=form.last_name.data,
        email=form.email.data,
        role=role,
        company_id=current_user.company_id,
        manager=manager,
        is_active=True,
        preferences={"theme": "light", "notifications": True},
    )
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.flush()

    activity_logger.log_activity(current_user, ActivityAction.USER_CREATED, {"created_user_id": user.id, "role": role.value})
    db.session.commit()

    current_app.logger.info("User %s created %s (%s)", current_user.id, user.email, role.value)
    return json_response({"message": "User created.", "user": user.to_dict()}, status=201)


@users_bp.route("/<int:user_id>", methods=["GET"])
@login_required
def get_user(user_id: int) -> Any:
    user = visible_users(current_user).filter(User.id == user_id).first()
    if user is None:
        return json_response({"error": "User not found."}, status=404)
    return json_response({"user": user.to_dict()})


@users_bp.route("/<int:user_id>", methods=["PUT", "PATCH"])
@login_required
def update_user(user_id: int) -> Any:
    """Admins update anyone in the company; everyone else only their own profile fields."""
    user = User.query.filter_by(id=user_id, company_id=current_user.company_id).first()
    if user is None:
        return json_response({"error": "User not found."}, status=404)

    is_admin = current_user.role == UserRole.ADMIN
    if not is_admin and user.id != current_user.id:
        return json_response({"error": "Insufficient permissions."}, status=403)

    form, payload = bind_form(UserUpdateForm)
    if not form.validate():
        return validation_error(form.errors)

    admin_fields = {"role", "manager_id", "is_active"} & payload.keys()
    if admin_fields and not is_admin:
        return json_response({"error": f"Only admins can change: {', '.join(sorted(admin_fields))}"}, status=403)

    changes: Dict[str, Any] = {}
    for field in ("first_name", "last_name"):
        if field in payload:
            if not getattr(form, field).data:
                return validation_error({field: ["This field cannot be empty."]})
            setattr(user, field, getattr(form, field).data)
            changes[field] = getattr(user, field)

    if "avatar_url" in payload:
        user.avatar_url = form.avatar_url.data or None
        changes["avatar_url"] = user.avatar_url

    if "preferences" in payload:
        if not isinstance(payload["preferences"], dict):
            return validation_error({"preferences": ["Preferences must be an object."]})
        user.preferences = {**(user.preferences or {}), **payload["preferences"]}
        changes["preferences"] = user.preferences

    if "role" in payload:
        if form.role.data not in UserRole.__members__:
            return validation_error({"role": ["Not a valid choice."]})
        if user.id == current_user.id and form.role.data != UserRole.ADMIN.value:
            return json_response({"error": "Admins cannot demote themselves."}, status=400)
        user.role = UserRole[form.role.data]
        changes["role"] = user.role.value

    if "manager_id" in payload:
        manager, error = _resolve_manager(payload["manager_id"], user_id=user.id)
        if error:
            return json_response({"error": error}, status=400)
        user.manager = manager
        changes["manager_id"] = manager.id if manager else None

    if "is_active" in payload:
        if not isinstance(payload["is_active"], bool):
            return validation_error({"is_active": ["is_active must be a boolean."]})
        if user.id == current_user.id and not form.is_active.data:
            return json_response({"error": "You cannot deactivate your own account."}, status=400)
        user.is_active = form.is_active.data
        changes["is_active"] = user.is_active

    activity_logger.log_activity(current_user, ActivityAction.USER_UPDATED, {"updated_user_id": user.id, "changes": changes})
    db.session.commit()

    return json_response({"message": "User updated.", "user": user.to_dict()})


@users_bp.route("/<int:user_id>", methods=["DELETE"])
@login_required
@role_required(UserRole.ADMIN)
def deactivate_user(user_id: int) -> Any:
    """Deactivate a user; rows are kept for the audit trail."""
    user = User.query.filter_by(id=user_id, company_id=current_user.company_id).first()
    if user is None:
        return json_response({"error": "User not found."}, status=404)
    if user.id == current_user.id:
        return json_response({"error": "You cannot deactivate your own account."}, status=400)

    user.is_active = False
    activity_logger.log_activity(
        current_user, ActivityAction.USER_UPDATED, {"updated_user_id": user.id, "changes": {"is_active": False}}
    )
    db.session.commit()
    return json_response({"message": "User deactivated.", "user": user.to_dict()})
