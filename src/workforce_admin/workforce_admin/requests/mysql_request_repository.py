from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional, Sequence

from ..core.enums import EntityTag, RequestAction, RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ChangeRequest
from .repository import ChangeRequestRepository

_SELECT = """
    SELECT request_id, table_name, row_id, action, requester_id, payload, status,
           created_at, decided_by, decided_at
    FROM change_requests
"""


def _load_payload(raw: Any) -> Optional[Dict[str, Any]]:
    if raw is None:
        return None
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        return json.loads(raw)
    return dict(raw)


def _to_request(r: Dict[str, Any]) -> ChangeRequest:
    return ChangeRequest(
        request_id=int(r["request_id"]),
        table_name=EntityTag(r["table_name"]),
        row_id=int(r["row_id"]),
        action=RequestAction(r["action"]),
        requester_id=int(r["requester_id"]),
        payload=_load_payload(r.get("payload")),
        status=RequestStatus(r["status"]),
        created_at=r["created_at"],
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
    )


class MySQLChangeRequestRepository(ChangeRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        table_name: EntityTag,
        row_id: int,
        action: RequestAction,
        requester_id: int,
        payload: Optional[Mapping[str, Any]],
    ) -> int:
        body = json.dumps(dict(payload), default=str) if payload is not None else None
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO change_requests(table_name, row_id, action, requester_id, payload, status)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (table_name.value, int(row_id), action.value, int(requester_id), body, RequestStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def get(self, request_id: int, *, for_update: bool = False) -> Optional[ChangeRequest]:
        sql = _SELECT + " WHERE request_id=%s"
        if for_update:
            sql += " FOR UPDATE"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def list(
        self,
        *,
        requester_id: Optional[int] = None,
        status: Optional[RequestStatus] = None,
    ) -> Sequence[ChangeRequest]:
        clauses = []
        params: list[Any] = []
        if requester_id is not None:
            clauses.append("requester_id=%s")
            params.append(int(requester_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} {where} ORDER BY created_at DESC, request_id DESC", tuple(params))
            return [_to_request(r) for r in fetchall(cur)]

    def decide(self, *, request_id: int, status: RequestStatus, decided_by: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE change_requests
                SET status=%s, decided_by=%s, decided_at=NOW()
                WHERE request_id=%s AND status=%s
                """,
                (status.value, int(decided_by), int(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount == 1
