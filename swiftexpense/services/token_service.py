"""Bearer token issuing and verification."""
from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, Optional

from flask import current_app
from jose import JWTError, jwt

from swiftexpense.models import User
from swiftexpense.utils.dates import utcnow


class TokenError(Exception):
    """Raised when a bearer token is missing, malformed or expired."""


def create_access_token(user: User) -> str:
    config = current_app.config
    issued_at = utcnow()
    claims = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role.value,
        "company_id": user.company_id,
        "iat": issued_at,
        "exp": issued_at + timedelta(days=config["JWT_EXPIRES_DAYS"]),
    }
    return jwt.encode(claims, config["JWT_SECRET_KEY"], algorithm=config["JWT_ALGORITHM"])


def decode_token(token: str) -> Dict[str, Any]:
    config = current_app.config
    try:
        return jwt.decode(token, config["JWT_SECRET_KEY"], algorithms=[config["JWT_ALGORITHM"]])
    except JWTError as exc:
        raise TokenError(str(exc)) from exc


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[len("Bearer "):].strip()
    return token or None
