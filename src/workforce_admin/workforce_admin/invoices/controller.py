from __future__ import annotations

import logging

from flask import Flask, request

from ..common.web import current_actor, json_body, login_required, ok
from ..container import Container
from ..core.exceptions import NotFoundError
from .service import invoice_result_to_dict, invoice_to_dict

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    svc = container.invoice_service

    @app.route("/api/invoices/generate", methods=["POST"], endpoint="invoices_generate")
    @login_required
    def invoices_generate():
        data = json_body()
        result = svc.generate_invoice(
            client_id=data.get("client_id"),
            month=data.get("month"),
            year=data.get("year"),
            actor_role=current_actor().role,
            invoice_no=data.get("invoice_no"),
        )
        return ok(invoice_result_to_dict(result), 201)

    @app.route("/api/invoices", methods=["GET"], endpoint="invoices_list")
    @login_required
    def invoices_list():
        rows = svc.list_invoices(actor_role=current_actor().role, client_id=request.args.get("client_id"))
        return ok([invoice_to_dict(i) for i in rows])

    @app.route("/api/invoices/<int:invoice_id>", methods=["GET"], endpoint="invoices_get")
    @login_required
    def invoices_get(invoice_id: int):
        return ok(invoice_to_dict(svc.get_invoice(actor_role=current_actor().role, invoice_id=invoice_id)))

    @app.route("/api/invoices/<int:invoice_id>", methods=["DELETE"], endpoint="invoices_delete")
    @login_required
    def invoices_delete(invoice_id: int):
        svc.delete_invoice(actor_role=current_actor().role, invoice_id=invoice_id)
        return ok()

    @app.route("/api/invoices/<int:invoice_id>.csv", methods=["GET"], endpoint="invoices_csv")
    @login_required
    def invoices_csv(invoice_id: int):
        role = current_actor().role
        invoice = svc.get_invoice(actor_role=role, invoice_id=invoice_id)
        try:
            client = container.client_service.get_client(actor_role=role, client_id=invoice.client_id)
        except NotFoundError:
            # Invoices outlive deleted clients.
            client = None

        renderer = container.document_renderer
        body = renderer.render_invoice(invoice, client)
        logger.info("invoice %s rendered as %s", invoice.invoice_id, renderer.extension)
        return app.response_class(
            body,
            mimetype=renderer.media_type,
            headers={
                "Content-Disposition": f"attachment; filename=invoice_{invoice.invoice_no}.{renderer.extension}"
            },
        )
