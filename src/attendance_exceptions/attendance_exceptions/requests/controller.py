from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.web import (
    current_actor,
    json_body,
    login_required,
    parse_date_field,
    parse_enum,
    parse_int_field,
)
from ..container import Container
from ..core.enums import ApprovalAction, AttachmentType, ExceptionRequestType
from ..core.exceptions import ValidationError
from .model import ExceptionRequest, RequestDetails


def request_to_dict(r: ExceptionRequest) -> dict:
    return {
        "request_id": r.request_id,
        "employee_id": r.employee_id,
        "exception_date": r.exception_date.strftime("%Y-%m-%d"),
        "type": r.request_type.value,
        "reason": r.reason,
        "status": r.status.value,
        "current_step_order": r.current_step_order,
        "workflow_id": r.workflow_id,
        "created_at": r.created_at.strftime("%Y-%m-%d %H:%M:%S"),
        "version": r.version,
    }


def details_to_dict(d: RequestDetails) -> dict:
    out = request_to_dict(d.request)
    out["employee_name"] = d.employee_name
    out["steps"] = [
        {
            "step_order": s.step_order,
            "approver_type": s.approver_type.value,
            "approver_employee_id": s.approver_employee_id,
        }
        for s in sorted(d.request.steps, key=lambda s: s.step_order)
    ]
    out["approval_history"] = [
        {
            "step_order": h.entry.step_order,
            "action": h.entry.action.value,
            "approver_employee_id": h.entry.approver_employee_id,
            "approver_name": h.approver_name,
            "notes": h.entry.notes or "",
            "action_at": h.entry.action_at.strftime("%Y-%m-%d %H:%M:%S"),
        }
        for h in d.history
    ]
    out["attachments"] = [
        {
            "attachment_id": a.attachment_id,
            "file_name": a.file_name,
            "content_type": a.content_type,
            "attachment_type": a.attachment_type.value,
        }
        for a in d.attachments
    ]
    return out


def register(app: Flask, container: Container) -> None:
    svc = container.request_service

    @app.route("/api/exception-requests", methods=["POST"], endpoint="create_exception_request")
    @login_required
    def create_exception_request():
        data = json_body()
        created = svc.create(
            actor=current_actor(),
            exception_date=parse_date_field(data.get("exception_date"), "exception_date"),
            reason=str(data.get("reason") or ""),
            request_type=parse_enum(ExceptionRequestType, data.get("type"), "type"),
        )
        return jsonify(request_to_dict(created)), 201

    @app.route("/api/exception-requests", methods=["GET"], endpoint="list_exception_requests")
    @login_required
    def list_exception_requests():
        page = svc.list_all(
            actor=current_actor(),
            offset=parse_int_field(request.args.get("offset", 0), "offset"),
            limit=parse_int_field(request.args.get("limit", 50), "limit"),
        )
        return jsonify({"total": page.total, "items": [request_to_dict(r) for r in page.items]})

    @app.route("/api/exception-requests/mine", methods=["GET"], endpoint="my_exception_requests")
    @login_required
    def my_exception_requests():
        items = svc.list_mine(actor=current_actor())
        return jsonify({"items": [request_to_dict(r) for r in items]})

    @app.route("/api/exception-requests/pending-approvals", methods=["GET"], endpoint="pending_approvals")
    @login_required
    def pending_approvals():
        items = svc.list_actionable(actor=current_actor())
        return jsonify({"items": [request_to_dict(r) for r in items]})

    @app.route("/api/exception-requests/<int:request_id>", methods=["GET"], endpoint="get_exception_request")
    @login_required
    def get_exception_request(request_id: int):
        return jsonify(details_to_dict(svc.get_details(request_id)))

    @app.route(
        "/api/exception-requests/<int:request_id>/actions",
        methods=["POST"],
        endpoint="act_on_exception_request",
    )
    @login_required
    def act_on_exception_request(request_id: int):
        data = json_body()
        updated = svc.record_action(
            actor=current_actor(),
            request_id=request_id,
            action=parse_enum(ApprovalAction, data.get("action"), "action"),
            notes=data.get("notes"),
            step_order=parse_int_field(data.get("step_order"), "step_order", required=False),
        )
        return jsonify(request_to_dict(updated))

    @app.route(
        "/api/exception-requests/<int:request_id>/cancel",
        methods=["POST"],
        endpoint="cancel_exception_request",
    )
    @login_required
    def cancel_exception_request(request_id: int):
        return jsonify(request_to_dict(svc.cancel(actor=current_actor(), request_id=request_id)))

    @app.route(
        "/api/exception-requests/<int:request_id>/attachments",
        methods=["POST"],
        endpoint="upload_attachment",
    )
    @login_required
    def upload_attachment(request_id: int):
        file = request.files.get("file")
        if file is None:
            raise ValidationError("file is required")
        attachment_id = svc.upload_attachment(
            actor=current_actor(),
            request_id=request_id,
            file_name=file.filename or "",
            data=file.read(),
            content_type=file.mimetype,
            attachment_type=parse_enum(
                AttachmentType, request.form.get("attachment_type") or AttachmentType.OTHER.value, "attachment_type"
            ),
        )
        return jsonify({"attachment_id": attachment_id}), 201

    @app.route("/api/attachments/<int:attachment_id>", methods=["GET"], endpoint="download_attachment")
    @login_required
    def download_attachment(attachment_id: int):
        f = svc.download_attachment(actor=current_actor(), attachment_id=attachment_id)
        return send_file(
            io.BytesIO(f.data),
            mimetype=f.content_type or "application/octet-stream",
            as_attachment=True,
            download_name=f.file_name,
        )
