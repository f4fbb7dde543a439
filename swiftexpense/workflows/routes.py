"""Approval workflow definitions.

Rules and conditions are stored as submitted; routing of individual expenses
does not consult them yet.
"""
from __future__ import annotations

from typing import Any, Dict, List

from flask_login import current_user, login_required

from swiftexpense import db
from swiftexpense.models import ApprovalWorkflow, UserRole
from swiftexpense.utils.helpers import json_response, request_payload, role_required, validation_error

from . import workflows_bp


def _company_workflow(workflow_id: int):
    return ApprovalWorkflow.query.filter_by(id=workflow_id, company_id=current_user.company_id).first()


def _validate(payload: Dict[str, Any], partial: bool = False) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    if not partial or "name" in payload:
        name = str(payload.get("name") or "").strip()
        if not name:
            errors["name"] = ["Workflow name is required."]
        elif len(name) > 255:
            errors["name"] = ["Workflow name must be at most 255 characters."]
    if not partial or "rules" in payload:
        if not isinstance(payload.get("rules"), dict):
            errors["rules"] = ["Rules must be an object."]
    if payload.get("conditions") is not None and not isinstance(payload["conditions"], dict):
        errors["conditions"] = ["Conditions must be an object."]
    if "is_active" in payload and not isinstance(payload["is_active"], bool):
        errors["is_active"] = ["is_active must be true or false."]
    return errors


def _name_taken(name: str, exclude_id: int | None = None) -> bool:
    query = ApprovalWorkflow.query.filter_by(company_id=current_user.company_id, name=name)
    if exclude_id is not None:
        query = query.filter(ApprovalWorkflow.id != exclude_id)
    return db.session.query(query.exists()).scalar()


@workflows_bp.route("", methods=["GET"])
@login_required
@role_required(UserRole.ADMIN, UserRole.MANAGER)
def list_workflows() -> Any:
    workflows = (
        ApprovalWorkflow.query.filter_by(company_id=current_user.company_id)
        .order_by(ApprovalWorkflow.created_at.desc(), ApprovalWorkflow.id.desc())
        .all()
    )
    return json_response({"workflows": [workflow.to_dict() for workflow in workflows]})


@workflows_bp.route("", methods=["POST"])
@login_required
@role_required(UserRole.ADMIN)
def create_workflow() -> Any:
    payload = request_payload()
    errors = _validate(payload)
    if errors:
        return validation_error(errors)

    name = str(payload["name"]).strip()
    if _name_taken(name):
        return json_response({"error": "A workflow with this name already exists."}, status=409)

    workflow = ApprovalWorkflow(
        company_id=current_user.company_id,
        name=name,
        description=payload.get("description"),
        rules=payload["rules"],
        conditions=payload.get("conditions"),
        is_active=payload.get("is_active", True),
        created_by=current_user.id,
    )
    db.session.add(workflow)
    db.session.commit()
    return json_response({"message": "Workflow created.", "workflow": workflow.to_dict()}, status=201)


@workflows_bp.route("/<int:workflow_id>", methods=["GET"])
@login_required
@role_required(UserRole.ADMIN, UserRole.MANAGER)
def get_workflow(workflow_id: int) -> Any:
    workflow = _company_workflow(workflow_id)
    if workflow is None:
        return json_response({"error": "Workflow not found."}, status=404)
    return json_response({"workflow": workflow.to_dict()})


@workflows_bp.route("/<int:workflow_id>", methods=["PUT", "PATCH"])
@login_required
@role_required(UserRole.ADMIN)
def update_workflow(workflow_id: int) -> Any:
    workflow = _company_workflow(workflow_id)
    if workflow is None:
        return json_response({"error": "Workflow not found."}, status=404)

    payload = request_payload()
    errors = _validate(payload, partial=True)
    if errors:
        return validation_error(errors)

    if "name" in payload:
        name = str(payload["name"]).strip()
        if _name_taken(name, exclude_id=workflow.id):
            return json_response({"error": "A workflow with this name already exists."}, status=409)
        workflow.name = name
    for field in ("description", "rules", "conditions", "is_active"):
        if field in payload:
            setattr(workflow, field, payload[field])

    db.session.commit()
    return json_response({"message": "Workflow updated.", "workflow": workflow.to_dict()})


@workflows_bp.route("/<int:workflow_id>", methods=["DELETE"])
@login_required
@role_required(UserRole.ADMIN)
def delete_workflow(workflow_id: int) -> Any:
    workflow = _company_workflow(workflow_id)
    if workflow is None:
        return json_response({"error": "Workflow not found."}, status=404)
    db.session.delete(workflow)
    db.session.commit()
    return json_response({"message": "Workflow deleted."})
