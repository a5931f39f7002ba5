import threading
import time
from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from app.crs.epsg_catalog import catalog_rows, utm_epsg
from app.crs.postgis import PostgisReferenceTable
from app.crs.record import SRSRecord
from app.crs.reference import (
    AuthMatch,
    IdMatch,
    MemoryReferenceTable,
    ReferenceRow,
    ReferenceTableError,
    build_reference_table_from_env,
    units_position,
)
from app.crs.resolver import canonical_srs, resolve_srid, resolve_srs_name


def fake_conn(rows=None, error=None):
    conn = MagicMock()
    conn.closed = 0
    cur = conn.cursor.return_value.__enter__.return_value
    if error is not None:
        cur.execute.side_effect = error
    cur.fetchall.return_value = rows or []
    return conn, cur


def test_units_position():
    assert units_position("+units=m +proj=lcc") == 0
    assert units_position("+proj=utm +units=m +no_defs") == 10
    assert units_position("+proj=longlat") == -1
    assert units_position(None) == -1


def test_memory_table_returns_every_match(table):
    assert table.find_by_authority_code("EPSG", 2154) == [AuthMatch(2154, 0)]
    assert table.find_by_internal_id(4326) == [IdMatch("EPSG", 4326, -1)]
    assert table.find_canonical_string(900913) == ["ESRI:102100"]
    table.add(ReferenceRow(4326, "EPSG", 4326, ""))
    assert len(table.find_by_internal_id(4326)) == 2
    assert table.find_by_authority_code("EPSG", 1) == []


def test_catalog_rows_are_unique_and_consistent():
    rows = catalog_rows()
    ids = [r.internal_id for r in rows]
    assert len(ids) == len(set(ids))
    t = MemoryReferenceTable(rows)
    srs = SRSRecord()
    assert resolve_srs_name(t, srs, "urn:ogc:def:crs:EPSG::32632")
    assert srs.is_linear_units is True and srs.is_reverse_axis is True
    assert resolve_srs_name(t, srs, "EPSG:4326")
    assert srs.is_linear_units is False
    assert canonical_srs(t, 3857) == "EPSG:3857"


def test_utm_epsg_families():
    assert utm_epsg("WGS84", 32, "N") == 32632
    assert utm_epsg("WGS84", 22, "S") == 32722
    assert utm_epsg("NAD83", 12, "N") == 26912
    assert utm_epsg("NAD83", 12, "S") is None
    assert utm_epsg("XYZ", 1, "N") is None


def test_postgis_find_by_authority_code():
    conn, cur = fake_conn(rows=[(2154, 0)])
    t = PostgisReferenceTable(conn=conn)
    assert t.find_by_authority_code("EPSG", 2154) == [AuthMatch(2154, 0)]
    _query, params = cur.execute.call_args[0]
    assert params == ("EPSG", 2154)


def test_postgis_find_by_internal_id_handles_nulls():
    conn, _ = fake_conn(rows=[(None, 4326, None)])
    t = PostgisReferenceTable(conn=conn)
    assert t.find_by_internal_id(4326) == [IdMatch("", 4326, -1)]


def test_postgis_canonical_strings():
    conn, cur = fake_conn(rows=[("EPSG:4326",), (None,)])
    t = PostgisReferenceTable(conn=conn, table="public.spatial_ref_sys")
    assert t.find_canonical_string(4326) == ["EPSG:4326", ""]
    assert cur.execute.call_args[0][1] == (4326,)


def test_postgis_resolve_through_resolver():
    conn, _ = fake_conn(rows=[("EPSG", 2154, 0)])
    t = PostgisReferenceTable(conn=conn)
    srs = SRSRecord()
    assert resolve_srid(t, srs, 2154)
    assert (srs.authority_name, srs.authority_code, srs.is_linear_units) == ("EPSG", 2154, True)


def test_postgis_query_error_rolls_back_and_raises():
    conn, _ = fake_conn(error=psycopg2.ProgrammingError("relation does not exist"))
    t = PostgisReferenceTable(conn=conn)
    with pytest.raises(ReferenceTableError):
        t.find_by_internal_id(4326)
    conn.rollback.assert_called_once()
    srs = SRSRecord()
    assert not resolve_srid(t, srs, 4326)
    assert srs == SRSRecord()


def test_postgis_connects_lazily():
    conn, _ = fake_conn(rows=[("EPSG:4326",)])
    with patch("app.crs.postgis.psycopg2.connect", return_value=conn) as connect:
        t = PostgisReferenceTable("dbname=gis")
        connect.assert_not_called()
        assert t.find_canonical_string(4326) == ["EPSG:4326"]
        connect.assert_called_once_with("dbname=gis")


def test_postgis_session_is_read_only_autocommit():
    conn, _ = fake_conn(rows=[("EPSG", 4326, -1)])
    with patch("app.crs.postgis.psycopg2.connect", return_value=conn):
        t = PostgisReferenceTable("dbname=gis")
        assert resolve_srid(t, SRSRecord(), 4326)
    # no transaction is left open between lookups
    conn.set_session.assert_called_once_with(readonly=True, autocommit=True)
    conn.commit.assert_not_called()
    conn.rollback.assert_not_called()


def test_postgis_queries_run_one_at_a_time():
    conn, cur = fake_conn(rows=[("EPSG:4326",)])
    state = {"active": 0, "peak": 0}
    guard = threading.Lock()

    def slow_execute(query, params):
        with guard:
            state["active"] += 1
            state["peak"] = max(state["peak"], state["active"])
        time.sleep(0.05)
        with guard:
            state["active"] -= 1

    cur.execute.side_effect = slow_execute
    t = PostgisReferenceTable(conn=conn)
    workers = [threading.Thread(target=t.find_canonical_string, args=(4326,)) for _ in range(4)]
    for w in workers:
        w.start()
    for w in workers:
        w.join()
    assert state["peak"] == 1
    assert cur.execute.call_count == 4


def test_postgis_connect_failure_is_a_table_error():
    with patch("app.crs.postgis.psycopg2.connect", side_effect=psycopg2.OperationalError("refused")):
        t = PostgisReferenceTable("dbname=gis")
        with pytest.raises(ReferenceTableError):
            t.find_by_internal_id(4326)
        assert canonical_srs(t, 4326) == ""


def test_postgis_needs_dsn_or_connection():
    with pytest.raises(ValueError):
        PostgisReferenceTable()


def test_build_reference_table_from_env(monkeypatch):
    monkeypatch.delenv("SRS_DATABASE_URL", raising=False)
    t = build_reference_table_from_env()
    assert isinstance(t, MemoryReferenceTable)
    assert len(t) > 0

    monkeypatch.setenv("SRS_DATABASE_URL", "dbname=gis")
    monkeypatch.setenv("SRS_TABLE", "ref.srs")
    t = build_reference_table_from_env()
    assert isinstance(t, PostgisReferenceTable)
    assert t.table == "ref.srs"
