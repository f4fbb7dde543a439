"""Authentication routes."""
from __future__ import annotations

from typing import Any

from flask import current_app
from flask_login import current_user, login_required

from swiftexpense import db
from swiftexpense.models import ActivityAction, Company, User, UserRole
from swiftexpense.services import activity_logger, currency_service
from swiftexpense.services.token_service import create_access_token
from swiftexpense.utils.dates import utcnow
from swiftexpense.utils.helpers import bind_form, json_response, validation_error

from . import auth_bp
from .forms import LoginForm, RegisterForm


def _auth_payload(user: User) -> dict:
    return {"user": user.to_dict(include_company=True), "token": create_access_token(user)}


def _new_company(name: str, country: str | None) -> Company:
    config = current_app.config
    country = country or config["DEFAULT_COUNTRY"]
    currency_code = currency_service.get_currency_for_country(country) or config["DEFAULT_CURRENCY"]
    return Company(
        name=name,
        country=country,
        currency_code=currency_code,
        settings=dict(config["DEFAULT_COMPANY_SETTINGS"]),
    )


@auth_bp.route("/register", methods=["POST"])
def register() -> Any:
    """Register a user, creating their company when the name is new."""
    form, _ = bind_form(RegisterForm)
    if not form.validate():
        return validation_error(form.errors)

    if User.query.filter_by(email=form.email.data).first():
        return json_response({"error": "User already exists with this email."}, status=409)

    company = Company.query.filter_by(name=form.company_name.data).first()
    if company is None:
        company = _new_company(form.company_name.data, form.country.data)
        db.session.add(company)
        role = UserRole.ADMIN
    else:
        role = UserRole.EMPLOYEE

    user = User(
        first_name=form.first_name.data,
        last_name=form.last_name.data,
        email=form.email.data,
        role=role,
        company=company,
        is_active=True,
        preferences={"theme": "light", "notifications": True},
    )
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.flush()

    activity_logger.log_activity(user, ActivityAction.USER_CREATED, {"self_registered": True, "role": role.value})
    db.session.commit()

    current_app.logger.info("Registered user %s in company %s as %s", user.email, company.name, role.value)
    return json_response({"message": "User registered successfully.", **_auth_payload(user)}, status=201)


@auth_bp.route("/login", methods=["POST"])
def login() -> Any:
    """Authenticate a user using email/password and issue a bearer token."""
    form, _ = bind_form(LoginForm)
    if not form.validate():
        return validation_error(form.errors)

    user = User.query.filter_by(email=form.email.data).first()
    if user is None or not user.check_password(form.password.data):
        return json_response({"error": "Invalid credentials."}, status=401)

    if not user.is_active:
        return json_response({"error": "Account is deactivated."}, status=401)

    user.last_login_at = utcnow()
    activity_logger.log_activity(user, ActivityAction.LOGIN)
    db.session.commit()

    return json_response({"message": "Login successful.", **_auth_payload(user)})


@auth_bp.route("/me", methods=["GET"])
@login_required
def me() -> Any:
    return json_response({"user": current_user.to_dict(include_company=True)})


@auth_bp.route("/refresh", methods=["POST"])
@login_required
def refresh() -> Any:
    """Issue a fresh token for the authenticated user."""
    return json_response({"token": create_access_token(current_user)})


@auth_bp.route("/logout", methods=["POST"])
def logout() -> Any:
    # Tokens are stateless; the client discards its copy.
    return json_response({"message": "Logged out successfully."})
