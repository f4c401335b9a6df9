from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Any

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError


@dataclass(frozen=True)
class Actor:
    user_id: int
    role: Role


def current_actor() -> Actor:
    if "user_id" not in session:
        raise AuthenticationError("Please log in to continue")
    try:
        role = Role(session.get("role"))
    except ValueError:
        session.clear()
        raise AuthenticationError("Session role is no longer valid, log in again")
    return Actor(user_id=int(session["user_id"]), role=role)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        current_actor()
        return view(*args, **kwargs)

    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def ok(payload: Any = None, status: int = 200):
    return jsonify(payload if payload is not None else {"ok": True}), status
