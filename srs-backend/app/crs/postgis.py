"""PostGIS `spatial_ref_sys` backend for the reference table capability."""
from __future__ import annotations

import logging
import threading
from typing import Any, List, Optional, Sequence

import psycopg2
from psycopg2 import sql

from .reference import UNITS_MARKER, AuthMatch, IdMatch, ReferenceTableError

logger = logging.getLogger(__name__)

# position() is 1-based with 0 meaning "not found"; shift to a zero-based
# offset with -1 for absence so every backend reports the same thing.
_UNITS_POSITION = sql.SQL("position({marker} in proj4text) - 1").format(marker=sql.Literal(UNITS_MARKER))


class PostgisReferenceTable:
    """Queries a PostGIS spatial_ref_sys (or any table with the same columns).

    The connection is opened lazily (read-only, autocommit) and reopened when
    found closed. Queries are serialized on it. Query errors roll back the
    connection and surface as ReferenceTableError.
    """

    def __init__(self, dsn: str | None = None, table: str = "spatial_ref_sys", conn: Any = None):
        if dsn is None and conn is None:
            raise ValueError("PostgisReferenceTable needs a dsn or a connection")
        self.dsn = dsn
        self.table = table
        # "schema.table" is accepted
        self._table_ident = sql.Identifier(*table.split("."))
        self._conn = conn
        # one query at a time on the shared connection
        self._lock = threading.Lock()

    def get_conn(self):
        if self._conn is None or self._conn.closed:
            try:
                self._conn = psycopg2.connect(self.dsn)
                self._conn.set_session(readonly=True, autocommit=True)
            except psycopg2.Error as e:
                logger.error("Cannot connect to reference database: %s", e)
                raise ReferenceTableError(str(e)) from e
        return self._conn

    def close(self) -> None:
        if self._conn is not None and not self._conn.closed:
            self._conn.close()
        self._conn = None

    def _fetchall(self, query: sql.Composable, params: Sequence[Any]) -> List[tuple]:
        with self._lock:
            return self._fetchall_locked(query, params)

    def _fetchall_locked(self, query: sql.Composable, params: Sequence[Any]) -> List[tuple]:
        conn = self.get_conn()
        try:
            with conn.cursor() as cur:
                cur.execute(query, params)
                return cur.fetchall()
        except psycopg2.Error as e:
            logger.warning("Reference query on %s failed: %s", self.table, e)
            try:
                conn.rollback()
            except psycopg2.Error:  # pragma: no cover - connection already gone
                logger.debug("rollback failed", exc_info=True)
            raise ReferenceTableError(str(e)) from e

    def find_by_authority_code(self, authority_name: str, authority_code: int) -> List[AuthMatch]:
        query = sql.SQL("SELECT srid, {pos} FROM {table} WHERE auth_name = %s AND auth_srid = %s").format(
            pos=_UNITS_POSITION, table=self._table_ident
        )
        rows = self._fetchall(query, (authority_name, int(authority_code)))
        return [AuthMatch(int(srid), _position(pos)) for srid, pos in rows]

    def find_by_internal_id(self, internal_id: int) -> List[IdMatch]:
        query = sql.SQL("SELECT auth_name, auth_srid, {pos} FROM {table} WHERE srid = %s").format(
            pos=_UNITS_POSITION, table=self._table_ident
        )
        rows = self._fetchall(query, (int(internal_id),))
        return [IdMatch(auth_name or "", int(auth_srid), _position(pos)) for auth_name, auth_srid, pos in rows]

    def find_canonical_string(self, internal_id: int) -> List[str]:
        query = sql.SQL("SELECT auth_name || ':' || auth_srid AS srs FROM {table} WHERE srid = %s").format(
            table=self._table_ident
        )
        rows = self._fetchall(query, (int(internal_id),))
        return [srs or "" for (srs,) in rows]


def _position(value: Optional[int]) -> int:
    # NULL proj4text yields NULL position
    return -1 if value is None else int(value)


__all__ = ["PostgisReferenceTable"]
