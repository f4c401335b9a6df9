from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_set_clause, db_cursor, fetchall, fetchone
from .model import Client, ClientCategory
from .repository import ClientRepository

CLIENT_COLUMNS = (
    "name",
    "address_line1",
    "address_line2",
    "contact",
    "telephone",
    "email",
    "gst_number",
    "state",
    "district",
    "cgst_rate",
    "sgst_rate",
    "igst_rate",
)


def _opt_decimal(v) -> Optional[Decimal]:
    return None if v is None else Decimal(str(v))


def _to_client(row: Dict[str, Any], categories: Sequence[ClientCategory]) -> Client:
    return Client(
        client_id=int(row["client_id"]),
        name=row["name"],
        address_line1=row.get("address_line1") or "",
        address_line2=row.get("address_line2") or "",
        contact=row.get("contact") or "",
        telephone=row.get("telephone") or "",
        email=row.get("email") or "",
        gst_number=row.get("gst_number") or "",
        state=row.get("state") or "",
        district=row.get("district") or "",
        cgst_rate=_opt_decimal(row.get("cgst_rate")),
        sgst_rate=_opt_decimal(row.get("sgst_rate")),
        igst_rate=_opt_decimal(row.get("igst_rate")),
        categories=tuple(categories),
    )


class MySQLClientRepository(ClientRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_categories(self, cur, client_ids: Sequence[int]) -> Dict[int, List[ClientCategory]]:
        out: Dict[int, List[ClientCategory]] = {cid: [] for cid in client_ids}
        if not client_ids:
            return out
        placeholders = ",".join(["%s"] * len(client_ids))
        cur.execute(
            f"""
            SELECT client_id, name, rate_per_month
            FROM client_categories
            WHERE client_id IN ({placeholders})
            ORDER BY client_id, position, category_id
            """,
            tuple(client_ids),
        )
        for r in fetchall(cur):
            out[int(r["client_id"])].append(
                ClientCategory(name=r["name"], rate_per_month=Decimal(str(r["rate_per_month"])))
            )
        return out

    def _write_categories(self, cur, client_id: int, categories: Sequence[ClientCategory]) -> None:
        cur.execute("DELETE FROM client_categories WHERE client_id=%s", (client_id,))
        for position, cat in enumerate(categories):
            cur.execute(
                "INSERT INTO client_categories(client_id, position, name, rate_per_month) VALUES(%s,%s,%s,%s)",
                (client_id, position, cat.name, cat.rate_per_month),
            )

    def get_by_id(self, client_id: int) -> Optional[Client]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM clients WHERE client_id=%s", (int(client_id),))
            row = fetchone(cur)
            if not row:
                return None
            cats = self._load_categories(cur, [int(row["client_id"])])
            return _to_client(row, cats[int(row["client_id"])])

    def exists(self, client_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS ok FROM clients WHERE client_id=%s", (int(client_id),))
            return fetchone(cur) is not None

    def create(self, fields: Mapping[str, Any], categories: Sequence[ClientCategory]) -> int:
        cols = [c for c in CLIENT_COLUMNS if c in fields]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO clients({', '.join(cols)}) VALUES({', '.join(['%s'] * len(cols))})",
                tuple(fields[c] for c in cols),
            )
            client_id = int(cur.lastrowid)
            self._write_categories(cur, client_id, categories)
            return client_id

    def list_all(self) -> Sequence[Client]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM clients ORDER BY client_id ASC")
            rows = fetchall(cur)
            cats = self._load_categories(cur, [int(r["client_id"]) for r in rows])
            return [_to_client(r, cats[int(r["client_id"])]) for r in rows]

    def update_fields(self, client_id: int, fields: Mapping[str, Any]) -> bool:
        set_sql, params = build_set_clause(fields, CLIENT_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT client_id FROM clients WHERE client_id=%s FOR UPDATE", (int(client_id),))
            if fetchone(cur) is None:
                return False
            if set_sql:
                cur.execute(f"UPDATE clients SET {set_sql} WHERE client_id=%s", (*params, int(client_id)))
            if "categories" in fields:
                self._write_categories(cur, int(client_id), fields["categories"])
            return True

    def delete(self, client_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM clients WHERE client_id=%s", (int(client_id),))
            return cur.rowcount > 0
