from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .connection import DatabaseConnection


@contextmanager
def transaction(conn_factory: DatabaseConnection) -> Iterator[Any]:
    """Unit of work: every db_cursor() opened inside shares one connection.

    Nested calls join the outer transaction.
    """

    outer = conn_factory.bound
    if outer is not None:
        yield outer
        return

    conn = conn_factory.connect()
    conn_factory.bind(conn)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn_factory.unbind()
        conn.close()


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    bound = conn_factory.bound
    if bound is not None:
        # Commit/rollback belong to the enclosing transaction().
        cur = bound.cursor(dictionary=dictionary)
        try:
            yield bound, cur
        finally:
            cur.close()
        return

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def build_set_clause(fields: Mapping[str, Any], columns: Sequence[str]) -> Tuple[str, List[Any]]:
    """Build "a=%s, b=%s" for a partial update, keeping only whitelisted columns."""

    parts: list[str] = []
    params: list[Any] = []
    for col in columns:
        if col in fields:
            parts.append(f"{col}=%s")
            params.append(fields[col])
    return ", ".join(parts), params
