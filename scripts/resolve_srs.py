#!/usr/bin/env python3
from __future__ import annotations

import argparse
import csv
import json
import os
import sys
from typing import List, Tuple

# Make srs-backend importable
THIS_DIR = os.path.dirname(__file__)
BACKEND_DIR = os.path.abspath(os.path.join(THIS_DIR, "..", "srs-backend"))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

from app.crs.diagnostics import describe_srs, format_srs  # type: ignore
from app.crs.epsg_catalog import catalog_rows  # type: ignore
from app.crs.record import SRSRecord  # type: ignore
from app.crs.reference import MemoryReferenceTable, ReferenceTable  # type: ignore
from app.crs.resolver import resolve_srs_name  # type: ignore
from app.logging_setup import configure_logging  # type: ignore


def _collect_names(names: List[str], input_path: str | None) -> List[str]:
    out = [n.strip() for n in names if n.strip()]
    if input_path:
        with open(input_path, encoding="utf-8") as f:
            out.extend(line.strip() for line in f if line.strip() and not line.startswith("#"))
    return out


def _build_table(dsn: str | None, table: str) -> ReferenceTable:
    if dsn:
        from app.crs.postgis import PostgisReferenceTable  # type: ignore

        return PostgisReferenceTable(dsn, table=table)
    return MemoryReferenceTable(catalog_rows())


def resolve_names(table: ReferenceTable, names: List[str]) -> Tuple[List[dict], int]:
    results: List[dict] = []
    failed = 0
    for name in names:
        srs = SRSRecord()
        ok = resolve_srs_name(table, srs, name)
        if not ok:
            failed += 1
        results.append({"name": name, "ok": ok, "record": srs})
    return results, failed


def main():
    ap = argparse.ArgumentParser(description="Resolve srsName values (EPSG:, urn:, http:) to SRS records.")
    ap.add_argument("names", nargs="*", help="srsName values, e.g. urn:ogc:def:crs:EPSG::4326")
    ap.add_argument("--input", help="File with one srsName per line ('#' comments allowed)")
    ap.add_argument("--dsn", default=os.getenv("SRS_DATABASE_URL"), help="libpq DSN; built-in catalog when absent")
    ap.add_argument("--table", default=os.getenv("SRS_TABLE", "spatial_ref_sys"), help="Reference table name")
    ap.add_argument("--format", choices=["pretty", "json", "csv"], default="pretty")
    ap.add_argument("--output", help="Optional path to write JSON/CSV output")
    args = ap.parse_args()

    configure_logging()
    names = _collect_names(args.names, args.input)
    if not names:
        print("No srsName given. Pass names or --input FILE.")
        sys.exit(2)

    table = _build_table(args.dsn, args.table)
    results, failed = resolve_names(table, names)

    if args.format == "pretty":
        for r in results:
            status = "ok" if r["ok"] else "UNSUPPORTED"
            print(f"\n=== {r['name']} ({status}) ===")
            if r["ok"]:
                print(format_srs(r["record"]))
        print(f"\n--- {len(results) - failed}/{len(results)} resolved ---")
    else:
        rows = [{"name": r["name"], "ok": r["ok"], **describe_srs(r["record"])} for r in results]
        if args.format == "json":
            text = json.dumps(rows, indent=2)
            if args.output:
                with open(args.output, "w") as f:
                    f.write(text)
                print(f"Wrote JSON to {args.output}")
            else:
                print(text)
        else:
            out = open(args.output, "w", newline="") if args.output else sys.stdout
            try:
                w = csv.DictWriter(out, fieldnames=list(rows[0].keys()))
                w.writeheader()
                w.writerows(rows)
            finally:
                if out is not sys.stdout:
                    out.close()
                    print(f"Wrote CSV to {args.output}")

    close = getattr(table, "close", None)
    if close is not None:
        close()
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
