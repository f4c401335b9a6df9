from __future__ import annotations

import logging

from flask import Flask, session

from ..common.web import current_actor, json_body, login_required, ok
from ..container import Container
from ..core.exceptions import ValidationError
from ..core.permissions import to_role
from .service import account_to_dict

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))

        session.clear()
        session["user_id"] = user.user_id
        session["role"] = user.role.value
        session["name"] = user.full_name
        logger.info("user %s logged in as %s", user.user_id, user.role.value)
        return ok({"user_id": user.user_id, "full_name": user.full_name, "role": user.role.value})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok()

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        actor = current_actor()
        return ok({"user_id": actor.user_id, "role": actor.role.value, "full_name": session.get("name")})

    @app.route("/api/auth/change-password", methods=["POST"], endpoint="change_password")
    @login_required
    def change_password():
        data = json_body()
        container.user_service.change_password(
            actor_id=current_actor().user_id,
            old_password=data.get("old_password", ""),
            new_password=data.get("new_password"),
        )
        return ok()

    @app.route("/api/users", methods=["GET"], endpoint="users_list")
    @login_required
    def users_list():
        return ok(container.user_service.list_accounts(actor_role=current_actor().role))

    @app.route("/api/users", methods=["POST"], endpoint="users_create")
    @login_required
    def users_create():
        data = json_body()
        role = to_role(data.get("role"))
        if role is None:
            raise ValidationError("role must be one of: admin, hr, accountant, supervisor")

        user_id = container.user_service.create_account(
            actor_role=current_actor().role,
            full_name=data.get("full_name", ""),
            username=data.get("username", ""),
            password=data.get("password", ""),
            role=role,
            client_id=data.get("client_id"),
            site_name=data.get("site_name", ""),
        )
        return ok({"user_id": user_id}, 201)

    @app.route("/api/users/<int:user_id>", methods=["PATCH"], endpoint="users_update")
    @login_required
    def users_update(user_id: int):
        user = container.user_service.update_account(
            actor_role=current_actor().role, user_id=user_id, payload=json_body()
        )
        return ok(account_to_dict(user))

    @app.route("/api/users/<int:user_id>/password", methods=["POST"], endpoint="users_reset_password")
    @login_required
    def users_reset_password(user_id: int):
        container.user_service.reset_password(
            actor_role=current_actor().role, user_id=user_id, new_password=json_body().get("new_password")
        )
        return ok()

    @app.route("/api/users/<int:user_id>/active", methods=["POST"], endpoint="users_set_active")
    @login_required
    def users_set_active(user_id: int):
        actor = current_actor()
        user = container.user_service.set_active(
            actor_role=actor.role, actor_id=actor.user_id, user_id=user_id, active=json_body().get("is_active")
        )
        return ok(account_to_dict(user))

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="users_delete")
    @login_required
    def users_delete(user_id: int):
        container.user_service.delete_account(actor_role=current_actor().role, user_id=user_id)
        return ok()
