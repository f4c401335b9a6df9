from __future__ import annotations

from flask import Flask, request

from ..common.web import current_actor, json_body, login_required, ok
from ..container import Container
from .service import employee_to_dict


def register(app: Flask, container: Container) -> None:
    svc = container.employee_service

    @app.route("/api/employees", methods=["GET"], endpoint="employees_list")
    @login_required
    def employees_list():
        rows = svc.list_employees(actor_role=current_actor().role, client_id=request.args.get("client_id"))
        return ok([employee_to_dict(e) for e in rows])

    @app.route("/api/employees", methods=["POST"], endpoint="employees_create")
    @login_required
    def employees_create():
        emp = svc.create_employee(actor_role=current_actor().role, data=json_body())
        return ok(employee_to_dict(emp), 201)

    @app.route("/api/employees/<int:employee_id>", methods=["GET"], endpoint="employees_get")
    @login_required
    def employees_get(employee_id: int):
        return ok(employee_to_dict(svc.get_employee(actor_role=current_actor().role, employee_id=employee_id)))

    @app.route("/api/employees/<int:employee_id>", methods=["PATCH"], endpoint="employees_update")
    @login_required
    def employees_update(employee_id: int):
        emp = svc.update_employee(actor_role=current_actor().role, employee_id=employee_id, payload=json_body())
        return ok(employee_to_dict(emp))

    @app.route("/api/employees/<int:employee_id>", methods=["DELETE"], endpoint="employees_delete")
    @login_required
    def employees_delete(employee_id: int):
        svc.delete_employee(actor_role=current_actor().role, employee_id=employee_id)
        return ok()
