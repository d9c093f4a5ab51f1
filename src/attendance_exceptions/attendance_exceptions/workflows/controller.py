from __future__ import annotations

from typing import List

from flask import Flask, jsonify

from ..common.web import current_actor, json_body, login_required, parse_enum, parse_int_field
from ..container import Container
from ..core.enums import ApproverType
from ..core.exceptions import ValidationError
from .model import NewWorkflowStep, Workflow


def workflow_to_dict(w: Workflow) -> dict:
    return {
        "workflow_id": w.workflow_id,
        "name": w.name,
        "description": w.description,
        "is_active": w.is_active,
        "steps": [
            {
                "step_id": s.step_id,
                "step_order": s.step_order,
                "approver_type": s.approver_type.value,
                "approver_employee_id": s.approver_employee_id,
            }
            for s in sorted(w.steps, key=lambda s: s.step_order)
        ],
    }


def _parse_steps(raw) -> List[NewWorkflowStep]:
    if not isinstance(raw, list):
        raise ValidationError("steps must be a list")
    steps = []
    for item in raw:
        if not isinstance(item, dict):
            raise ValidationError("Each step must be an object")
        steps.append(
            NewWorkflowStep(
                step_order=parse_int_field(item.get("step_order"), "step_order"),
                approver_type=parse_enum(ApproverType, item.get("approver_type"), "approver_type"),
                approver_employee_id=parse_int_field(
                    item.get("approver_employee_id"), "approver_employee_id", required=False
                ),
            )
        )
    return steps


def register(app: Flask, container: Container) -> None:
    svc = container.workflow_service

    @app.route("/api/workflows", methods=["GET"], endpoint="list_workflows")
    @login_required
    def list_workflows():
        return jsonify({"items": [workflow_to_dict(w) for w in svc.list_active()]})

    @app.route("/api/workflows/<int:workflow_id>", methods=["GET"], endpoint="get_workflow")
    @login_required
    def get_workflow(workflow_id: int):
        return jsonify(workflow_to_dict(svc.get_workflow(workflow_id)))

    @app.route("/api/workflows", methods=["POST"], endpoint="create_workflow")
    @login_required
    def create_workflow():
        data = json_body()
        workflow_id = svc.create_workflow(
            actor=current_actor(),
            name=str(data.get("name") or ""),
            description=data.get("description"),
            steps=_parse_steps(data.get("steps")),
        )
        return jsonify(workflow_to_dict(svc.get_workflow(workflow_id))), 201

    @app.route("/api/workflows/<int:workflow_id>", methods=["PUT"], endpoint="update_workflow")
    @login_required
    def update_workflow(workflow_id: int):
        data = json_body()
        svc.update_workflow(
            actor=current_actor(),
            workflow_id=workflow_id,
            name=str(data.get("name") or ""),
            description=data.get("description"),
            steps=_parse_steps(data.get("steps")),
        )
        return jsonify(workflow_to_dict(svc.get_workflow(workflow_id)))

    @app.route("/api/workflows/<int:workflow_id>/activate", methods=["POST"], endpoint="activate_workflow")
    @login_required
    def activate_workflow(workflow_id: int):
        svc.activate(actor=current_actor(), workflow_id=workflow_id)
        return jsonify({"ok": True})

    @app.route("/api/workflows/<int:workflow_id>/deactivate", methods=["POST"], endpoint="deactivate_workflow")
    @login_required
    def deactivate_workflow(workflow_id: int):
        svc.deactivate(actor=current_actor(), workflow_id=workflow_id)
        return jsonify({"ok": True})

    @app.route("/api/employees/<int:employee_id>/workflow", methods=["PUT"], endpoint="assign_workflow")
    @login_required
    def assign_workflow(employee_id: int):
        data = json_body()
        svc.assign_to_employee(
            actor=current_actor(),
            employee_id=employee_id,
            workflow_id=parse_int_field(data.get("workflow_id"), "workflow_id", required=False),
        )
        return jsonify({"ok": True})
