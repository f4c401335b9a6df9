from __future__ import annotations

from flask import Flask, request

from ..common.web import current_actor, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    svc = container.change_request_service

    @app.route("/api/change-requests", methods=["GET"], endpoint="change_requests_list")
    @login_required
    def change_requests_list():
        actor = current_actor()
        rows = svc.list(actor_role=actor.role, actor_id=actor.user_id, status=request.args.get("status"))
        return ok([r.to_dict() for r in rows])

    @app.route("/api/change-requests", methods=["POST"], endpoint="change_requests_submit")
    @login_required
    def change_requests_submit():
        actor = current_actor()
        data = json_body()
        req = svc.submit(
            table_name=data.get("table_name", ""),
            row_id=data.get("row_id"),
            action=data.get("action", ""),
            requester_id=actor.user_id,
            actor_role=actor.role,
            payload=data.get("payload"),
        )
        return ok(req.to_dict(), 201)

    @app.route("/api/change-requests/<int:request_id>/approve", methods=["POST"], endpoint="change_requests_approve")
    @login_required
    def change_requests_approve(request_id: int):
        actor = current_actor()
        return ok(svc.approve(request_id=request_id, actor_role=actor.role, actor_id=actor.user_id).to_dict())

    @app.route("/api/change-requests/<int:request_id>/reject", methods=["POST"], endpoint="change_requests_reject")
    @login_required
    def change_requests_reject(request_id: int):
        actor = current_actor()
        return ok(svc.reject(request_id=request_id, actor_role=actor.role, actor_id=actor.user_id).to_dict())
