from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import Client, ClientCategory


class ClientRepository(Protocol):
    def get_by_id(self, client_id: int) -> Optional[Client]:
        raise NotImplementedError

    def exists(self, client_id: int) -> bool:
        raise NotImplementedError

    def create(self, fields: Mapping[str, Any], categories: Sequence[ClientCategory]) -> int:
        raise NotImplementedError

    def list_all(self) -> Sequence[Client]:
        raise NotImplementedError

    def update_fields(self, client_id: int, fields: Mapping[str, Any]) -> bool:
        """Partial update. A ``categories`` key replaces the whole category list."""
        raise NotImplementedError

    def delete(self, client_id: int) -> bool:
        raise NotImplementedError
