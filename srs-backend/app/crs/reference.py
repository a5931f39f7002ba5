"""Reference table capability.

The resolver never talks to a database directly: it is handed an object that
answers the three read-only query shapes below. Backends return *all* matching
rows; deciding that exactly one row is required is the resolver's job.

Env (see build_reference_table_from_env):
  SRS_DATABASE_URL   libpq DSN, e.g. "dbname=gis user=ows"; enables PostGIS
  SRS_TABLE          reference table name (default 'spatial_ref_sys')
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Protocol

logger = logging.getLogger(__name__)

# proj4 token whose offset tells meter units from degree units
UNITS_MARKER = "+units=m "


class ReferenceTableError(Exception):
    """The backend could not run a query (connection lost, bad table, ...)."""


@dataclass(frozen=True)
class ReferenceRow:
    internal_id: int
    authority_name: str
    authority_code: int
    proj_text: str = ""

    @property
    def units_position(self) -> int:
        return units_position(self.proj_text)


class AuthMatch(NamedTuple):
    internal_id: int
    units_position: int


class IdMatch(NamedTuple):
    authority_name: str
    authority_code: int
    units_position: int


class ReferenceTable(Protocol):
    def find_by_authority_code(self, authority_name: str, authority_code: int) -> List[AuthMatch]:
        ...

    def find_by_internal_id(self, internal_id: int) -> List[IdMatch]:
        ...

    def find_canonical_string(self, internal_id: int) -> List[str]:
        ...


def units_position(proj_text: str | None) -> int:
    """Zero-based offset of UNITS_MARKER in proj_text, -1 when absent."""
    return (proj_text or "").find(UNITS_MARKER)


class MemoryReferenceTable:
    """In-process table; rows sharing an id or authority pair are kept as-is."""

    def __init__(self, rows: Iterable[ReferenceRow] = ()):
        self.rows: List[ReferenceRow] = list(rows)

    def add(self, row: ReferenceRow) -> None:
        self.rows.append(row)

    def __len__(self) -> int:
        return len(self.rows)

    def find_by_authority_code(self, authority_name: str, authority_code: int) -> List[AuthMatch]:
        return [
            AuthMatch(r.internal_id, r.units_position)
            for r in self.rows
            if r.authority_name == authority_name and r.authority_code == authority_code
        ]

    def find_by_internal_id(self, internal_id: int) -> List[IdMatch]:
        return [
            IdMatch(r.authority_name, r.authority_code, r.units_position)
            for r in self.rows
            if r.internal_id == internal_id
        ]

    def find_canonical_string(self, internal_id: int) -> List[str]:
        return [f"{r.authority_name}:{r.authority_code}" for r in self.rows if r.internal_id == internal_id]


def build_reference_table_from_env() -> ReferenceTable:
    """PostGIS table when SRS_DATABASE_URL is set, else the built-in catalog."""
    dsn = os.getenv("SRS_DATABASE_URL")
    if dsn:
        from .postgis import PostgisReferenceTable

        table_name = os.getenv("SRS_TABLE", "spatial_ref_sys")
        logger.info("Using PostGIS reference table %s", table_name)
        return PostgisReferenceTable(dsn, table=table_name)

    from .epsg_catalog import catalog_rows

    rows = catalog_rows()
    logger.info("SRS_DATABASE_URL not set; using built-in catalog (%d rows)", len(rows))
    return MemoryReferenceTable(rows)


__all__ = [
    "ReferenceTable",
    "ReferenceTableError",
    "ReferenceRow",
    "AuthMatch",
    "IdMatch",
    "MemoryReferenceTable",
    "UNITS_MARKER",
    "units_position",
    "build_reference_table_from_env",
]
