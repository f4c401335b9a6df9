from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import EntityTag, RequestAction, RequestStatus
from .model import ChangeRequest


class ChangeRequestRepository(Protocol):
    def create(
        self,
        *,
        table_name: EntityTag,
        row_id: int,
        action: RequestAction,
        requester_id: int,
        payload: Optional[Mapping[str, Any]],
    ) -> int:
        raise NotImplementedError

    def get(self, request_id: int, *, for_update: bool = False) -> Optional[ChangeRequest]:
        """``for_update`` locks the row until the enclosing transaction ends."""
        raise NotImplementedError

    def list(
        self,
        *,
        requester_id: Optional[int] = None,
        status: Optional[RequestStatus] = None,
    ) -> Sequence[ChangeRequest]:
        """Newest first."""
        raise NotImplementedError

    def decide(self, *, request_id: int, status: RequestStatus, decided_by: int) -> bool:
        """PENDING -> status. Returns False if the row was no longer PENDING."""
        raise NotImplementedError
