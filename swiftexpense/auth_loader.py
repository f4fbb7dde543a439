"""Attach the bearer-token identity to each request through Flask-Login."""
from __future__ import annotations

import logging
from typing import Optional

from flask import Request
from flask_login import LoginManager

from swiftexpense import db
from swiftexpense.models import User
from swiftexpense.services.token_service import TokenError, decode_token, extract_bearer_token
from swiftexpense.utils.helpers import json_response

logger = logging.getLogger(__name__)


def load_user_from_request(req: Request) -> Optional[User]:
    token = extract_bearer_token(req.headers.get("Authorization"))
    if token is None:
        return None

    try:
        claims = decode_token(token)
        user_id = int(claims["sub"])
    except (TokenError, KeyError, TypeError, ValueError) as exc:
        logger.info("Rejected bearer token: %s", exc)
        return None

    user = db.session.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user


def init_login_manager(login_manager: LoginManager) -> None:
    login_manager.request_loader(load_user_from_request)

    @login_manager.unauthorized_handler
    def unauthorized():
        return json_response({"error": "Invalid or missing access token."}, status=401)
