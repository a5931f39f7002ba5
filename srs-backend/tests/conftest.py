import os
import sys

import pytest

# Ensure imports like `from app.main import app` work when pytest is run from repo root
BACKEND_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from app.crs.reference import MemoryReferenceTable, ReferenceRow  # noqa: E402

WGS84 = ReferenceRow(4326, "EPSG", 4326, "+proj=longlat +datum=WGS84 +no_defs")
LAMBERT93 = ReferenceRow(
    2154, "EPSG", 2154,
    "+units=m +proj=lcc +lat_0=46.5 +lon_0=3 +lat_1=49 +lat_2=44 +x_0=700000 +y_0=6600000 +ellps=GRS80 +no_defs",
)
# Projected row whose marker is not at the start
UTM32_LATE_MARKER = ReferenceRow(32632, "EPSG", 32632, "+proj=utm +zone=32 +datum=WGS84 +units=m +no_defs")
# Non-EPSG authority with an internal id unrelated to its code
ESRI_ROW = ReferenceRow(900913, "ESRI", 102100, "+units=m +proj=merc +a=6378137 +b=6378137 +no_defs")


@pytest.fixture
def table():
    return MemoryReferenceTable([WGS84, LAMBERT93, UTM32_LATE_MARKER, ESRI_ROW])


@pytest.fixture
def wgs84_row():
    return WGS84


@pytest.fixture
def lambert93_row():
    return LAMBERT93
