from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import optional_id, require_non_empty, require_positive_id
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..core.permissions import Operation, require_role
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
PROFILE_FIELDS = frozenset({"full_name", "username", "client_id", "site_name"})


def account_to_dict(u: User) -> dict:
    return {
        "user_id": u.user_id,
        "full_name": u.full_name,
        "username": u.username,
        "role": u.role.value,
        "client_id": u.client_id,
        "site_name": u.site_name,
        "is_active": u.is_active,
    }


def _require_new_password(password: Optional[str]) -> str:
    if password is None or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"password must be at least {MIN_PASSWORD_LENGTH} characters")
    return password


def _password_matches(user: User, password: Optional[str]) -> bool:
    try:
        return check_password_hash(user.password_hash, password or "")
    except ValueError:
        # e.g. placeholder hashes like 'CHANGE_ME'
        return False


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    full_name: str
    role: Role
    client_id: Optional[int]


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> SessionUser:
        user = self._users.get_by_username((username or "").strip())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid username or password")

        if not _password_matches(user, password):
            logger.warning("failed login for %r", username)
            raise AuthenticationError("Invalid username or password")

        return SessionUser(user_id=user.user_id, full_name=user.full_name, role=user.role, client_id=user.client_id)


class UserService:
    """Use case: manage accounts (admin) and let users change their own password."""

    def __init__(self, users: UserRepository):
        self._users = users

    def create_account(
        self,
        *,
        actor_role: Role,
        full_name: str,
        username: str,
        password: str,
        role: Role,
        client_id=None,
        site_name: str = "",
    ) -> int:
        require_role(Operation.ENTITY_WRITE_DIRECT, actor_role)

        full_name = require_non_empty(full_name, "full_name")
        username = require_non_empty(username, "username")
        _require_new_password(password)
        if role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be created from the API")
        if self._users.get_by_username(username):
            raise ValidationError("username already exists")

        user_id = self._users.create_user(
            full_name=full_name,
            username=username,
            password_hash=generate_password_hash(password),
            role=role,
            client_id=optional_id(client_id, "client_id"),
            site_name=(site_name or "").strip() or None,
        )
        logger.info("created %s account %r (id=%s)", role.value, username, user_id)
        return user_id

    def list_accounts(self, *, actor_role: Role) -> list[dict]:
        require_role(Operation.ENTITY_WRITE_DIRECT, actor_role)
        return [account_to_dict(u) for u in self._users.list_all()]

    def _get(self, user_id: Any) -> User:
        uid = require_positive_id(user_id, "user_id")
        user = self._users.get_by_id(uid)
        if not user:
            raise NotFoundError(f"User {uid} not found")
        return user

    def change_password(self, *, actor_id: int, old_password: str, new_password: str) -> None:
        """Any signed-in user may change their own password."""

        user = self._get(actor_id)
        if not _password_matches(user, old_password):
            raise ValidationError("Old password incorrect")
        password_hash = generate_password_hash(_require_new_password(new_password))
        self._users.update_fields(user.user_id, {"password_hash": password_hash})
        logger.info("user %s changed their password", user.user_id)

    def reset_password(self, *, actor_role: Role, user_id: Any, new_password: str) -> None:
        require_role(Operation.ENTITY_WRITE_DIRECT, actor_role)
        user = self._get(user_id)
        password_hash = generate_password_hash(_require_new_password(new_password))
        self._users.update_fields(user.user_id, {"password_hash": password_hash})
        logger.info("password of user %s reset by admin", user.user_id)

    def update_account(self, *, actor_role: Role, user_id: Any, payload: Mapping[str, Any]) -> User:
        require_role(Operation.ENTITY_WRITE_DIRECT, actor_role)
        user = self._get(user_id)
        if not isinstance(payload, Mapping) or not payload:
            raise ValidationError("payload must be a non-empty object")
        unknown = sorted(set(payload) - PROFILE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields not editable on accounts: {', '.join(unknown)}")

        fields: dict[str, Any] = {}
        if "full_name" in payload:
            fields["full_name"] = require_non_empty(payload["full_name"], "full_name")
        if "username" in payload:
            username = require_non_empty(payload["username"], "username")
            other = self._users.get_by_username(username)
            if other and other.user_id != user.user_id:
                raise ValidationError("username already exists")
            fields["username"] = username
        if "client_id" in payload:
            fields["client_id"] = optional_id(payload["client_id"], "client_id")
        if "site_name" in payload:
            fields["site_name"] = str(payload["site_name"] or "").strip() or None

        self._users.update_fields(user.user_id, fields)
        logger.info("account %s updated: %s", user.user_id, ", ".join(sorted(fields)))
        return self._users.get_by_id(user.user_id)

    def set_active(self, *, actor_role: Role, actor_id: int, user_id: Any, active: Any) -> User:
        require_role(Operation.ENTITY_WRITE_DIRECT, actor_role)
        user = self._get(user_id)
        if not isinstance(active, bool):
            raise ValidationError("is_active must be true or false")
        if user.user_id == actor_id and not active:
            raise ValidationError("You cannot deactivate your own account")

        self._users.set_active(user.user_id, is_active=active)
        logger.info("account %s %s", user.user_id, "activated" if active else "deactivated")
        return self._users.get_by_id(user.user_id)

    def delete_account(self, *, actor_role: Role, user_id: Any) -> None:
        require_role(Operation.ENTITY_WRITE_DIRECT, actor_role)
        user = self._get(user_id)
        if user.role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be deleted")
        self._users.delete_by_id(user.user_id)
        logger.info("deleted %s account %s", user.role.value, user.user_id)
