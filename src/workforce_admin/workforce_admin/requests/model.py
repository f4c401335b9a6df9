from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from ..core.enums import EntityTag, RequestAction, RequestStatus


@dataclass(frozen=True)
class ChangeRequest:
    """A proposed edit/delete of a protected row, applied only once an admin approves it."""

    request_id: int
    table_name: EntityTag
    row_id: int
    action: RequestAction
    requester_id: int
    status: RequestStatus
    created_at: datetime
    payload: Optional[Mapping[str, Any]] = None
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "table_name": self.table_name.value,
            "row_id": self.row_id,
            "action": self.action.value,
            "requester_id": self.requester_id,
            "payload": dict(self.payload) if self.payload is not None else None,
            "status": self.status.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "decided_by": self.decided_by,
            "decided_at": self.decided_at.isoformat() if self.decided_at else None,
        }
