"""Resolve authority codes, SRIDs and srsName strings into SRSRecord values.

Every resolve_* function works on a copy of the record and commits it only
when the reference table returns exactly one row; on failure the caller's
record is untouched and False is returned. Backend errors count as failures.
"""
from __future__ import annotations

import logging
import re
from typing import Iterable, List

from .record import NATIVE_SRID, SRSRecord
from .reference import ReferenceTable, ReferenceTableError
from .srsname import parse_srs_name

logger = logging.getLogger(__name__)

# SRID tokens in batch lookups; -1 is the native sentinel
SRID_TOKEN_RE = re.compile(r"-?[0-9]+")


def _is_linear(units_position: int) -> bool:
    # Marker found at the very start of the proj text means meter units
    return units_position == 0


def resolve_auth(table: ReferenceTable, srs: SRSRecord, authority_name: str, authority_code: int) -> bool:
    """Set `srs` from an authority name and authority-specific code."""
    if not authority_name:
        return False
    try:
        matches = table.find_by_authority_code(authority_name, int(authority_code))
    except ReferenceTableError:
        return False
    if len(matches) != 1:
        logger.debug(
            "%s:%s not handled (%d rows)", authority_name, authority_code, len(matches),
            extra={"srs": f"{authority_name}:{authority_code}"},
        )
        return False

    match = matches[0]
    out = srs.copy()
    out.internal_id = int(match.internal_id)
    out.authority_name = authority_name
    out.authority_code = int(authority_code)
    out.is_linear_units = _is_linear(match.units_position)
    srs.commit(out)
    return True


def resolve_srid(table: ReferenceTable, srs: SRSRecord, internal_id: int) -> bool:
    """Set `srs` from an internal identifier; -1 resets it to the native state."""
    if internal_id == NATIVE_SRID:
        srs.reset()
        return True
    try:
        matches = table.find_by_internal_id(int(internal_id))
    except ReferenceTableError:
        return False
    if len(matches) != 1:
        logger.debug("srid %s not handled (%d rows)", internal_id, len(matches), extra={"srid": internal_id})
        return False

    match = matches[0]
    out = srs.copy()
    out.internal_id = int(internal_id)
    out.authority_name = match.authority_name
    out.authority_code = int(match.authority_code)
    out.is_linear_units = _is_linear(match.units_position)
    srs.commit(out)
    return True


def resolve_srs_name(table: ReferenceTable, srs: SRSRecord, name: str) -> bool:
    """Set `srs` from a client srsName such as ``urn:ogc:def:crs:EPSG::4326``.

    The axis order implied by the syntax is applied together with the rest of
    the record, never on its own.
    """
    parsed = parse_srs_name(name)
    if parsed is None:
        logger.debug("unrecognized srsName %r", name, extra={"srs": name})
        return False

    out = srs.copy()
    if not resolve_srid(table, out, parsed.code):
        return False
    out.is_reverse_axis = parsed.is_reverse_axis
    srs.commit(out)
    return True


def canonical_srs(table: ReferenceTable, internal_id: int) -> str:
    """'AUTH:CODE' for a single matching row, '' otherwise."""
    try:
        matches = table.find_canonical_string(int(internal_id))
    except ReferenceTableError:
        return ""
    if len(matches) != 1:
        return ""
    return matches[0]


def canonical_srs_list(table: ReferenceTable, srids: Iterable[object]) -> List[str]:
    """Ordered canonical strings for a list of SRID tokens ('' where unknown)."""
    out: List[str] = []
    for token in srids:
        text = str(token).strip()
        if not SRID_TOKEN_RE.fullmatch(text):
            out.append("")
            continue
        out.append(canonical_srs(table, int(text)))
    return out


__all__ = [
    "resolve_auth",
    "resolve_srid",
    "resolve_srs_name",
    "canonical_srs",
    "canonical_srs_list",
]
