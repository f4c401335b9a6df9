from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an application account.

    Note: Plain data object (no DB access). Supervisors are users with
    ``Role.SUPERVISOR`` tied to a client site.
    """

    user_id: int
    full_name: str
    username: str
    password_hash: str
    role: Role
    client_id: Optional[int] = None
    site_name: Optional[str] = None
    is_active: bool = True
