from __future__ import annotations

from flask import Flask, request

from ..common.web import current_actor, json_body, login_required, ok
from ..container import Container
from .service import salary_to_dict


def register(app: Flask, container: Container) -> None:
    svc = container.payroll_service

    @app.route("/api/salaries/generate", methods=["POST"], endpoint="salaries_generate")
    @login_required
    def salaries_generate():
        data = json_body()
        rows = svc.generate_salaries(month=data.get("month"), year=data.get("year"), actor_role=current_actor().role)
        return ok([salary_to_dict(s) for s in rows], 201)

    @app.route("/api/salaries", methods=["GET"], endpoint="salaries_list")
    @login_required
    def salaries_list():
        rows = svc.list_salaries(
            actor_role=current_actor().role,
            month=request.args.get("month"),
            year=request.args.get("year"),
            employee_id=request.args.get("employee_id"),
        )
        return ok([salary_to_dict(s) for s in rows])

    @app.route("/api/salaries/<int:salary_id>", methods=["GET"], endpoint="salaries_get")
    @login_required
    def salaries_get(salary_id: int):
        return ok(salary_to_dict(svc.get_salary(actor_role=current_actor().role, salary_id=salary_id)))

    @app.route("/api/salaries/<int:salary_id>", methods=["DELETE"], endpoint="salaries_delete")
    @login_required
    def salaries_delete(salary_id: int):
        svc.delete_salary(actor_role=current_actor().role, salary_id=salary_id)
        return ok()

    @app.route("/api/salaries.csv", methods=["GET"], endpoint="salaries_csv")
    @login_required
    def salaries_csv():
        role = current_actor().role
        month, year = request.args.get("month"), request.args.get("year")
        rows = svc.list_salaries(actor_role=role, month=month, year=year)
        employees = {e.employee_id: e for e in container.employee_service.list_employees(actor_role=role)}

        renderer = container.document_renderer
        body = renderer.render_salary_sheet(rows, employees)
        suffix = f"_{int(year)}_{int(month):02d}" if month and year else ""
        return app.response_class(
            body,
            mimetype=renderer.media_type,
            headers={"Content-Disposition": f"attachment; filename=salaries{suffix}.{renderer.extension}"},
        )
