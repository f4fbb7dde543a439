"""Company settings and currency/country lookup routes."""
from __future__ import annotations

import re
from typing import Any

from flask import request
from flask_login import current_user, login_required

from swiftexpense import db
from swiftexpense.models import Company, UserRole
from swiftexpense.services import currency_service
from swiftexpense.utils.helpers import json_response, request_payload, role_required, validation_error

from . import companies_bp

CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")


@companies_bp.route("", methods=["GET"])
@login_required
def list_companies() -> Any:
    """Tenants only ever see their own company."""
    return json_response({"companies": [current_user.company.to_dict()]})


@companies_bp.route("/current", methods=["GET"])
@login_required
def current_company() -> Any:
    return json_response({"company": current_user.company.to_dict()})


@companies_bp.route("/current", methods=["PUT", "PATCH"])
@login_required
@role_required(UserRole.ADMIN)
def update_company() -> Any:
    payload = request_payload()
    company: Company = current_user.company
    errors = {}

    if "name" in payload:
        name = str(payload["name"] or "").strip()
        if not name:
            errors["name"] = ["Company name is required."]
        elif Company.query.filter(Company.name == name, Company.id != company.id).first():
            return json_response({"error": "Company name already taken."}, status=409)
        else:
            company.name = name

    if "country" in payload:
        country = str(payload["country"] or "").strip()
        if not country:
            errors["country"] = ["Country is required."]
        else:
            company.country = country

    if "currency_code" in payload:
        currency_code = str(payload["currency_code"] or "").strip().upper()
        if not CURRENCY_PATTERN.match(currency_code):
            errors["currency_code"] = ["Currency must be a three-letter ISO code."]
        else:
            company.currency_code = currency_code

    if "settings" in payload:
        if not isinstance(payload["settings"], dict):
            errors["settings"] = ["Settings must be an object."]
        else:
            company.update_settings(payload["settings"])

    if errors:
        db.session.rollback()
        return validation_error(errors)

    db.session.commit()
    return json_response({"message": "Company updated.", "company": company.to_dict()})


@companies_bp.route("/currencies", methods=["GET"])
@login_required
def currencies() -> Any:
    return json_response({"currencies": currency_service.get_supported_currencies()})


@companies_bp.route("/countries", methods=["GET"])
@login_required
def countries() -> Any:
    return json_response({"countries": currency_service.get_country_choices()})


@companies_bp.route("/exchange-rates", methods=["GET"])
@login_required
def exchange_rates() -> Any:
    """Rate between two currencies; ``to`` defaults to the company currency."""
    source = (request.args.get("from") or "").strip().upper()
    target = (request.args.get("to") or current_user.company.currency_code).strip().upper()
    if not CURRENCY_PATTERN.match(source) or not CURRENCY_PATTERN.match(target):
        return json_response({"error": "'from' and 'to' must be three-letter currency codes."}, status=400)

    conversion = currency_service.convert_currency(1, source, target)
    return json_response(
        {
            "from": source,
            "to": target,
            "rate": float(conversion.exchange_rate),
            "success": conversion.success,
        }
    )
