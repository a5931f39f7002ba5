from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

# srsName spellings accepted by WFS 1.0/1.1/2.0 clients:
#  cf WFS 1.1.0 -> 9.2
#  cf ISO 19142 -> 7.9.2.4.4
#  cf RFC 5165
#
#   EPSG:4326
#   urn:EPSG:geographicCRS:4326
#   urn:ogc:def:crs:EPSG:4326
#   urn:ogc:def:crs:EPSG::4326
#   urn:ogc:def:crs:EPSG:6.6:4326
#   urn:x-ogc:def:crs:EPSG:6.6:4326
#   http://www.opengis.net/gml/srs/epsg.xml#4326
#   http://www.epsg.org/6.11.2/4326
#
# (prefix, separator, reverse_axis). URN forms carry the authority axis order
# (lat/long for geographic CRS); the rest are read as x/y.
SRS_NAME_FORMS: List[Tuple[str, str, bool]] = [
    ("urn:ogc:def:crs:EPSG:", ":", True),
    ("urn:x-ogc:def:crs:EPSG:", ":", True),
    ("urn:EPSG:geographicCRS:", ":", True),
    ("http://www.opengis.net/gml/srs/epsg.xml#", "#", False),
    ("http://www.epsg.org/", "/", False),
    ("EPSG:", ":", False),
]

CODE_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class ParsedSrsName:
    code: int
    is_reverse_axis: bool
    prefix: str


def _match_form(name: str) -> Optional[Tuple[str, str, bool]]:
    best = None
    for form in SRS_NAME_FORMS:
        prefix = form[0]
        if name.startswith(prefix) and (best is None or len(prefix) > len(best[0])):
            best = form
    return best


def _last_token(remainder: str, sep: str) -> Optional[str]:
    tokens = [t for t in remainder.split(sep) if t]
    return tokens[-1] if tokens else None


def parse_srs_name(name: str) -> Optional[ParsedSrsName]:
    """Classify an srsName and extract its trailing EPSG code.

    Returns None when the syntax is not one of SRS_NAME_FORMS or when the last
    token after the prefix is missing or not purely numeric. Version segments
    (``urn:ogc:def:crs:EPSG:6.6:4326``) are skipped since the code is always
    the final token.
    """
    if not isinstance(name, str):
        return None
    form = _match_form(name)
    if form is None:
        return None
    prefix, sep, reverse_axis = form
    token = _last_token(name[len(prefix):], sep)
    if token is None or not CODE_RE.fullmatch(token):
        return None
    return ParsedSrsName(code=int(token), is_reverse_axis=reverse_axis, prefix=prefix)


__all__ = ["parse_srs_name", "ParsedSrsName", "SRS_NAME_FORMS"]
