from __future__ import annotations

from flask import Flask, request

from ..common.web import current_actor, json_body, login_required, ok
from ..container import Container
from ..core.exceptions import ValidationError
from .service import attendance_to_dict


def register(app: Flask, container: Container) -> None:
    svc = container.attendance_service

    @app.route("/api/attendances", methods=["GET"], endpoint="attendances_list")
    @login_required
    def attendances_list():
        rows = svc.list(actor_role=current_actor().role, status=request.args.get("status"))
        return ok([attendance_to_dict(a) for a in rows])

    @app.route("/api/attendances/<int:attendance_id>", methods=["GET"], endpoint="attendances_get")
    @login_required
    def attendances_get(attendance_id: int):
        return ok(attendance_to_dict(svc.get(actor_role=current_actor().role, attendance_id=attendance_id)))

    @app.route("/api/attendances", methods=["POST"], endpoint="attendances_create")
    @login_required
    def attendances_create():
        data = json_body()
        record = svc.create(
            employee_id=data.get("employee_id"),
            work_date=data.get("date", data.get("work_date")),
            session_count=data.get("session_count"),
            actor_role=current_actor().role,
            submitted_by=data.get("submitted_by"),
        )
        return ok(attendance_to_dict(record), 201)

    @app.route("/api/attendances/batch", methods=["POST"], endpoint="attendances_batch")
    @login_required
    def attendances_batch():
        rows = json_body().get("rows")
        if not isinstance(rows, list):
            raise ValidationError("rows must be a list")
        results = svc.create_batch(rows=rows, actor_role=current_actor().role)
        return ok(
            [
                {
                    "index": r.index,
                    "ok": r.ok,
                    "record": attendance_to_dict(r.record) if r.record else None,
                    "error": {"kind": r.error_kind, "message": r.error_message} if not r.ok else None,
                }
                for r in results
            ]
        )

    @app.route("/api/attendances/<int:attendance_id>/approve", methods=["POST"], endpoint="attendances_approve")
    @login_required
    def attendances_approve(attendance_id: int):
        return ok(attendance_to_dict(svc.approve(attendance_id=attendance_id, actor_role=current_actor().role)))

    @app.route("/api/attendances/<int:attendance_id>/reject", methods=["POST"], endpoint="attendances_reject")
    @login_required
    def attendances_reject(attendance_id: int):
        return ok(attendance_to_dict(svc.reject(attendance_id=attendance_id, actor_role=current_actor().role)))

    @app.route("/api/attendances/<int:attendance_id>/edit-request", methods=["POST"], endpoint="attendances_edit_request")
    @login_required
    def attendances_edit_request(attendance_id: int):
        actor = current_actor()
        data = json_body()
        req = svc.edit_request(
            attendance_id=attendance_id,
            payload=data.get("payload", data),
            actor_role=actor.role,
            actor_id=actor.user_id,
        )
        return ok(req.to_dict(), 201)

    @app.route(
        "/api/attendances/<int:attendance_id>/delete-request", methods=["POST"], endpoint="attendances_delete_request"
    )
    @login_required
    def attendances_delete_request(attendance_id: int):
        actor = current_actor()
        req = svc.delete_request(attendance_id=attendance_id, actor_role=actor.role, actor_id=actor.user_id)
        return ok(req.to_dict(), 201)
