from __future__ import annotations

from flask import Flask

from ..common.web import current_actor, json_body, login_required, ok
from ..container import Container
from .service import client_to_dict


def register(app: Flask, container: Container) -> None:
    svc = container.client_service

    @app.route("/api/clients", methods=["GET"], endpoint="clients_list")
    @login_required
    def clients_list():
        return ok([client_to_dict(c) for c in svc.list_clients(actor_role=current_actor().role)])

    @app.route("/api/clients", methods=["POST"], endpoint="clients_create")
    @login_required
    def clients_create():
        client = svc.create_client(actor_role=current_actor().role, data=json_body())
        return ok(client_to_dict(client), 201)

    @app.route("/api/clients/<int:client_id>", methods=["GET"], endpoint="clients_get")
    @login_required
    def clients_get(client_id: int):
        return ok(client_to_dict(svc.get_client(actor_role=current_actor().role, client_id=client_id)))

    @app.route("/api/clients/<int:client_id>", methods=["PATCH"], endpoint="clients_update")
    @login_required
    def clients_update(client_id: int):
        client = svc.update_client(actor_role=current_actor().role, client_id=client_id, payload=json_body())
        return ok(client_to_dict(client))

    @app.route("/api/clients/<int:client_id>", methods=["DELETE"], endpoint="clients_delete")
    @login_required
    def clients_delete(client_id: int):
        svc.delete_client(actor_role=current_actor().role, client_id=client_id)
        return ok()
