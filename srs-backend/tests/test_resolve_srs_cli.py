import importlib.util
import json
import os
import sys

import pytest

SCRIPT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "scripts", "resolve_srs.py"))


@pytest.fixture
def cli(monkeypatch):
    spec = importlib.util.spec_from_file_location("resolve_srs", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    # keep the root logger untouched across tests
    monkeypatch.setattr(module, "configure_logging", lambda: None)
    monkeypatch.delenv("SRS_DATABASE_URL", raising=False)
    return module


def run_cli(cli, monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["resolve_srs.py", *args])
    with pytest.raises(SystemExit) as exc:
        cli.main()
    return exc.value.code


def test_cli_writes_json_and_reports_failures(cli, monkeypatch, tmp_path):
    out = tmp_path / "out.json"
    code = run_cli(cli, monkeypatch, "EPSG:4326", "CRS:84", "--format", "json", "--output", str(out))
    assert code == 1
    rows = json.loads(out.read_text())
    assert [(r["name"], r["ok"]) for r in rows] == [("EPSG:4326", True), ("CRS:84", False)]
    assert rows[0]["internal_id"] == 4326
    assert rows[0]["srs"] == "EPSG:4326"
    assert rows[1]["internal_id"] == -1
    assert rows[1]["srs"] == ""


def test_cli_exit_zero_when_all_resolve(cli, monkeypatch, tmp_path, capsys):
    names = tmp_path / "names.txt"
    names.write_text("# projected\nurn:ogc:def:crs:EPSG::2154\n\n")
    code = run_cli(cli, monkeypatch, "EPSG:4326", "--input", str(names))
    assert code == 0
    assert "2/2 resolved" in capsys.readouterr().out


def test_cli_without_names_exits_2(cli, monkeypatch):
    assert run_cli(cli, monkeypatch) == 2
