from __future__ import annotations

from flask import Flask, request

from ..common.web import current_actor, json_body, login_required, ok
from ..container import Container
from .service import deduction_to_dict


def register(app: Flask, container: Container) -> None:
    svc = container.deduction_service

    @app.route("/api/deductions", methods=["GET"], endpoint="deductions_list")
    @login_required
    def deductions_list():
        rows = svc.list_deductions(actor_role=current_actor().role, employee_id=request.args.get("employee_id"))
        return ok([deduction_to_dict(d) for d in rows])

    @app.route("/api/deductions/<int:deduction_id>", methods=["GET"], endpoint="deductions_get")
    @login_required
    def deductions_get(deduction_id: int):
        return ok(deduction_to_dict(svc.get_deduction(actor_role=current_actor().role, deduction_id=deduction_id)))

    @app.route("/api/deductions", methods=["POST"], endpoint="deductions_create")
    @login_required
    def deductions_create():
        data = json_body()
        d = svc.create_deduction(
            actor_role=current_actor().role,
            employee_id=data.get("employee_id"),
            name=data.get("name", ""),
            amount=data.get("amount"),
            month=data.get("month"),
            year=data.get("year"),
            note=data.get("note", ""),
        )
        return ok(deduction_to_dict(d), 201)

    @app.route("/api/deductions/<int:deduction_id>", methods=["DELETE"], endpoint="deductions_delete")
    @login_required
    def deductions_delete(deduction_id: int):
        svc.delete_deduction(actor_role=current_actor().role, deduction_id=deduction_id)
        return ok()

    @app.route("/api/deductions/<int:deduction_id>", methods=["PATCH"], endpoint="deductions_update")
    @login_required
    def deductions_update(deduction_id: int):
        d = svc.update_deduction(actor_role=current_actor().role, deduction_id=deduction_id, payload=json_body())
        return ok(deduction_to_dict(d))
