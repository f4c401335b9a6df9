from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..common.validators import optional_percentage, require_non_empty, require_positive_id, to_decimal
from ..core.enums import Role
from ..core.exceptions import NotFoundError, ValidationError
from ..core.permissions import Operation, require_role
from .model import Client, ClientCategory
from .repository import ClientRepository

logger = logging.getLogger(__name__)

TEXT_FIELDS = (
    "address_line1",
    "address_line2",
    "contact",
    "telephone",
    "email",
    "gst_number",
    "state",
    "district",
)
RATE_FIELDS = ("cgst_rate", "sgst_rate", "igst_rate")
EDITABLE_FIELDS = frozenset({"name", "categories", *TEXT_FIELDS, *RATE_FIELDS})


def coerce_categories(value: Any) -> List[ClientCategory]:
    if not isinstance(value, (list, tuple)):
        raise ValidationError("categories must be a list")
    out: List[ClientCategory] = []
    seen: set[str] = set()
    for i, item in enumerate(value):
        if isinstance(item, ClientCategory):
            name, rate = item.name, item.rate_per_month
        elif isinstance(item, Mapping):
            name, rate = item.get("name"), item.get("rate_per_month", item.get("rate"))
        else:
            raise ValidationError(f"categories[{i}] must be an object with name and rate_per_month")
        name = require_non_empty(name, f"categories[{i}].name")
        key = name.lower()
        if key in seen:
            raise ValidationError(f"duplicate category {name!r}")
        seen.add(key)
        amount = to_decimal(rate, f"categories[{i}].rate_per_month")
        if amount < 0:
            raise ValidationError(f"categories[{i}].rate_per_month cannot be negative")
        out.append(ClientCategory(name=name, rate_per_month=amount))
    return out


def coerce_client_patch(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate an edit payload for a client; keys must be editable fields."""

    if not isinstance(payload, Mapping) or not payload:
        raise ValidationError("payload must be a non-empty object")
    unknown = sorted(set(payload) - EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Fields not editable on clients: {', '.join(unknown)}")

    fields: Dict[str, Any] = {}
    for key, value in payload.items():
        if key == "name":
            fields[key] = require_non_empty(value, "name")
        elif key == "categories":
            fields[key] = coerce_categories(value)
        elif key in RATE_FIELDS:
            fields[key] = optional_percentage(value, key)
        else:
            fields[key] = (str(value).strip() if value is not None else "")
    return fields


def client_to_dict(c: Client) -> dict:
    return {
        "client_id": c.client_id,
        "name": c.name,
        **{f: getattr(c, f) for f in TEXT_FIELDS},
        **{f: (str(getattr(c, f)) if getattr(c, f) is not None else None) for f in RATE_FIELDS},
        "categories": [{"name": cat.name, "rate_per_month": str(cat.rate_per_month)} for cat in c.categories],
    }


class ClientService:
    def __init__(self, clients: ClientRepository):
        self._clients = clients

    def create_client(self, *, actor_role: Role, data: Mapping[str, Any]) -> Client:
        require_role(Operation.CLIENT_CREATE, actor_role)
        if "name" not in data:
            raise ValidationError("name is required")
        fields = coerce_client_patch(data)
        categories: Sequence[ClientCategory] = fields.pop("categories", [])

        client_id = self._clients.create(fields, categories)
        logger.info("created client %s (%s) with %d categories", client_id, fields["name"], len(categories))
        return self._require(client_id)

    def get_client(self, *, actor_role: Role, client_id: Any) -> Client:
        require_role(Operation.RECORDS_READ, actor_role)
        return self._require(require_positive_id(client_id, "client_id"))

    def list_clients(self, *, actor_role: Role) -> Sequence[Client]:
        require_role(Operation.RECORDS_READ, actor_role)
        return self._clients.list_all()

    def update_client(self, *, actor_role: Role, client_id: Any, payload: Mapping[str, Any]) -> Client:
        require_role(Operation.ENTITY_WRITE_DIRECT, actor_role)
        cid = require_positive_id(client_id, "client_id")
        if not self._clients.update_fields(cid, coerce_client_patch(payload)):
            raise NotFoundError(f"Client {cid} not found")
        return self._require(cid)

    def delete_client(self, *, actor_role: Role, client_id: Any) -> None:
        require_role(Operation.ENTITY_WRITE_DIRECT, actor_role)
        cid = require_positive_id(client_id, "client_id")
        if not self._clients.delete(cid):
            raise NotFoundError(f"Client {cid} not found")
        logger.info("deleted client %s", cid)

    def _require(self, client_id: int) -> Client:
        client: Optional[Client] = self._clients.get_by_id(client_id)
        if not client:
            raise NotFoundError(f"Client {client_id} not found")
        return client
