"""General helper utilities."""
from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Dict, Tuple, Type

from flask import current_app, jsonify, request
from flask_login import current_user
from werkzeug.datastructures import MultiDict

JsonView = Callable[..., Any]


def json_response(payload: Any, status: int = 200):
    """Return a JSON response with status code."""
    return jsonify(payload), status


def validation_error(errors: Dict[str, Any], message: str = "Validation failed"):
    return json_response({"error": message, "errors": errors}, status=400)


def role_required(*roles):
    """Restrict a route to one or more roles."""
    def decorator(view_func: JsonView) -> JsonView:
        @wraps(view_func)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                return json_response({"error": "Authentication required."}, status=401)
            if current_user.role not in roles:
                return json_response({"error": "Insufficient permissions."}, status=403)
            return view_func(*args, **kwargs)

        return wrapped

    return decorator


def request_payload() -> Dict[str, Any]:
    """JSON body or form fields of the current request as a plain dict."""
    if request.is_json:
        payload = request.get_json(silent=True)
        return payload if isinstance(payload, dict) else {}
    return request.form.to_dict()


def bind_form(form_class: Type, payload: Dict[str, Any] | None = None):
    """Build a WTForms form from the request payload.

    Nulls and nested values are left out of the form data; callers read those
    from the returned payload directly. JSON booleans become the strings
    ``BooleanField`` understands; other scalars are passed as text, the way
    an HTML form would send them.
    """
    if payload is None:
        payload = request_payload()
    scalars = {
        key: ("true" if value else "false") if isinstance(value, bool) else str(value)
        for key, value in payload.items()
        if value is not None and not isinstance(value, (list, dict))
    }
    return form_class(formdata=MultiDict(scalars)), payload


def parse_pagination(default_limit: int, max_limit: int | None = None) -> Tuple[int, int]:
    max_limit = max_limit or current_app.config.get("MAX_PER_PAGE", 100)
    page = request.args.get("page", type=int, default=1)
    limit = request.args.get("limit", type=int, default=default_limit)
    if page is None or page < 1:
        page = 1
    if limit is None or limit < 1:
        limit = default_limit
    return page, min(limit, max_limit)


def paginate(query, page: int, limit: int) -> Tuple[list, Dict[str, Any]]:
    result = query.paginate(page=page, per_page=limit, error_out=False)
    pagination = {
        "page": page,
        "limit": limit,
        "total": result.total,
        "pages": result.pages,
        "has_next": page < result.pages,
        "has_prev": page > 1,
    }
    return result.items, pagination


def parse_bool_arg(name: str) -> bool:
    return (request.args.get(name) or "").strip().lower() in {"1", "true", "yes"}
