from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

from .record import SRSRecord


def describe_srs(srs: SRSRecord) -> Dict[str, Any]:
    d = asdict(srs)
    # Derived fields for API/log consumers
    d["is_set"] = srs.is_set
    d["srs"] = f"{srs.authority_name}:{srs.authority_code}" if srs.is_set and srs.authority_name else ""
    return d


def format_srs(srs: SRSRecord) -> str:
    """Multi-line dump of a record, one field per line."""
    lines = ["["]
    for key, value in asdict(srs).items():
        if isinstance(value, bool):
            value = "true" if value else "false"
        lines.append(f" {key}: {value}")
    lines.append("]")
    return "\n".join(lines)


__all__ = ["describe_srs", "format_srs"]
