"""Receipt upload blueprint."""
from flask import Blueprint

uploads_bp = Blueprint("uploads", __name__, url_prefix="/api/upload")

from . import routes  # noqa: E402,F401
