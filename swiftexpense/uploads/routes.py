"""Receipt upload, retrieval and placeholder OCR."""
from __future__ import annotations

import mimetypes
import os
import uuid
from typing import Any, Optional, Tuple

from flask import current_app, request, send_from_directory
from flask_login import current_user, login_required
from werkzeug.utils import secure_filename

from swiftexpense.models import UserRole
from swiftexpense.services import ocr_service
from swiftexpense.utils.helpers import json_response

from . import uploads_bp


def _upload_folder() -> str:
    folder = current_app.config["UPLOAD_FOLDER"]
    os.makedirs(folder, exist_ok=True)
    return folder


def _owner_ids(filename: str) -> Optional[Tuple[int, int]]:
    """Stored names look like ``<company_id>_<user_id>_<hex><ext>``."""
    parts = filename.split("_", 2)
    if len(parts) != 3 or not parts[0].isdigit() or not parts[1].isdigit():
        return None
    return int(parts[0]), int(parts[1])


def _save_receipt():
    """Validate and store the ``receipt`` file; returns (info, error_response)."""
    upload = request.files.get("receipt")
    if upload is None or not upload.filename:
        return None, json_response({"error": "No receipt file provided."}, status=400)

    mimetype = (upload.mimetype or "").lower()
    if mimetype not in current_app.config["ALLOWED_RECEIPT_MIMETYPES"]:
        return None, json_response({"error": "Only image and PDF receipts are allowed."}, status=400)

    original_name = secure_filename(upload.filename) or "receipt"
    extension = os.path.splitext(original_name)[1].lower() or mimetypes.guess_extension(mimetype) or ""
    stored_name = f"{current_user.company_id}_{current_user.id}_{uuid.uuid4().hex}{extension}"
    path = os.path.join(_upload_folder(), stored_name)
    upload.save(path)

    current_app.logger.info("Stored receipt %s for user %s", stored_name, current_user.id)
    return {
        "filename": stored_name,
        "original_name": original_name,
        "mimetype": mimetype,
        "size": os.path.getsize(path),
        "url": f"{uploads_bp.url_prefix}/receipt/{stored_name}",
        "path": path,
    }, None


@uploads_bp.route("/receipt", methods=["POST"])
@login_required
def upload_receipt() -> Any:
    info, error = _save_receipt()
    if error:
        return error
    info.pop("path")
    return json_response({"message": "Receipt uploaded.", "file": info}, status=201)


@uploads_bp.route("/receipt/<filename>", methods=["GET"])
@login_required
def get_receipt(filename: str) -> Any:
    owner = _owner_ids(secure_filename(filename))
    if owner is None or owner[0] != current_user.company_id:
        return json_response({"error": "Receipt not found."}, status=404)
    return send_from_directory(_upload_folder(), secure_filename(filename))


@uploads_bp.route("/receipt/<filename>", methods=["DELETE"])
@login_required
def delete_receipt(filename: str) -> Any:
    filename = secure_filename(filename)
    owner = _owner_ids(filename)
    path = os.path.join(_upload_folder(), filename)
    if owner is None or owner[0] != current_user.company_id or not os.path.isfile(path):
        return json_response({"error": "Receipt not found."}, status=404)
    if owner[1] != current_user.id and current_user.role != UserRole.ADMIN:
        return json_response({"error": "Insufficient permissions."}, status=403)

    os.remove(path)
    current_app.logger.info("Deleted receipt %s", filename)
    return json_response({"message": "Receipt deleted."})


@uploads_bp.route("/ocr", methods=["POST"])
@login_required
def ocr_receipt() -> Any:
    """Store a receipt and return placeholder extraction results for it."""
    info, error = _save_receipt()
    if error:
        return error
    extraction = ocr_service.extract_expense_data(info.pop("path"), currency=current_user.company.currency_code)
    return json_response({"message": "Receipt processed.", "file": info, "ocr": extraction}, status=201)
