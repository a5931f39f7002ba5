from __future__ import annotations

from typing import Dict, List

from .reference import ReferenceRow

# Minimal, programmatic EPSG catalog used when no PostGIS table is configured.
# Projected entries keep the units token first so their marker offset is 0.

# Datum families: geographic CRS code, proj datum terms, and UTM code bases.
# For north-only families the 'S' hemisphere is not generated.
FAMILIES = {
    "WGS84": {"geog": 4326, "datum": "+datum=WGS84", "north": 32600, "south": 32700},
    "NAD83": {"geog": 4269, "datum": "+datum=NAD83", "north": 26900, "south": None},
    "NAD27": {"geog": 4267, "datum": "+datum=NAD27", "north": 26700, "south": None},
    "ED50": {"geog": 4230, "datum": "+ellps=intl", "north": 23000, "south": None},
    "ETRS89": {"geog": 4258, "datum": "+ellps=GRS80", "north": 25800, "south": None},
}

# Zone ranges published by EPSG for the north-only families
UTM_ZONES = {
    "WGS84": range(1, 61),
    "NAD83": range(1, 24),
    "NAD27": range(1, 23),
    "ED50": range(28, 39),
    "ETRS89": range(28, 39),
}

EXTRA: Dict[int, str] = {
    3857: (
        "+units=m +proj=merc +a=6378137 +b=6378137 +lat_ts=0 +lon_0=0 "
        "+x_0=0 +y_0=0 +k=1 +nadgrids=@null +wktext +no_defs"
    ),
    2154: (
        "+units=m +proj=lcc +lat_0=46.5 +lon_0=3 +lat_1=49 +lat_2=44 "
        "+x_0=700000 +y_0=6600000 +ellps=GRS80 +towgs84=0,0,0,0,0,0,0 +no_defs"
    ),
    3035: (
        "+units=m +proj=laea +lat_0=52 +lon_0=10 +x_0=4321000 +y_0=3210000 "
        "+ellps=GRS80 +towgs84=0,0,0,0,0,0,0 +no_defs"
    ),
}


def utm_epsg(datum: str, zone: int, hemi: str | None) -> int | None:
    fam = FAMILIES.get(datum)
    if not fam:
        return None
    base = fam.get("south") if hemi == "S" else fam.get("north")
    if base is None:
        return None
    return base + int(zone)


def utm_proj(datum: str, zone: int, hemi: str | None) -> str:
    south = " +south" if hemi == "S" else ""
    return f"+units=m +proj=utm +zone={int(zone)}{south} {FAMILIES[datum]['datum']} +no_defs"


def geographic_proj(datum: str) -> str:
    return f"+proj=longlat {FAMILIES[datum]['datum']} +no_defs"


def catalog_rows() -> List[ReferenceRow]:
    rows: List[ReferenceRow] = []
    for datum, fam in FAMILIES.items():
        rows.append(ReferenceRow(fam["geog"], "EPSG", fam["geog"], geographic_proj(datum)))
        for zone in UTM_ZONES[datum]:
            for hemi in ("N", "S"):
                code = utm_epsg(datum, zone, hemi)
                if code is None:
                    continue
                rows.append(ReferenceRow(code, "EPSG", code, utm_proj(datum, zone, hemi)))
    for code, proj in EXTRA.items():
        rows.append(ReferenceRow(code, "EPSG", code, proj))
    return rows


__all__ = ["catalog_rows", "utm_epsg", "utm_proj", "geographic_proj", "FAMILIES"]
