"""Expense resource blueprint."""
from flask import Blueprint

expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")

from . import routes  # noqa: E402,F401
