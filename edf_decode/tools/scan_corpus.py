"""Scan a corpus of EDF files and report header geometry and decode failures."""

from __future__ import annotations

import argparse
import csv
import json
from pathlib import Path

from edf_decode.edf.errors import EdfError
from edf_decode.edf.header import read_edf_header

FIELDS = [
    "file",
    "signals",
    "records",
    "record_duration",
    "header_bytes",
    "data_bytes",
    "size_bytes",
    "error",
]


def _collect_files(root: Path, pattern: str) -> list[Path]:
    files = sorted(root.glob(pattern))
    return [path for path in files if path.is_file()]


def _scan_file(path: Path, strict: bool) -> dict[str, object]:
    size = path.stat().st_size
    try:
        header = read_edf_header(path, strict=strict)
    except (EdfError, OSError) as exc:
        return {
            "file": str(path),
            "signals": 0,
            "records": 0,
            "record_duration": 0.0,
            "header_bytes": 0,
            "data_bytes": 0,
            "size_bytes": size,
            "error": str(exc),
        }

    error = ""
    if header.header_bytes + header.data_size > size:
        error = "data region shorter than declared"
    return {
        "file": str(path),
        "signals": header.signal_count,
        "records": header.record_count,
        "record_duration": header.record_duration,
        "header_bytes": header.header_bytes,
        "data_bytes": header.data_size,
        "size_bytes": size,
        "error": error,
    }


def _write_csv(rows: list[dict[str, object]], output: Path) -> None:
    with output.open("w", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)


def _write_json(rows: list[dict[str, object]], output: Path) -> None:
    payload = {"files": rows}
    output.write_text(json.dumps(payload, indent=2))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Scan EDF files and summarise their headers.")
    parser.add_argument("--root", type=Path, default=Path("."), help="Root folder to scan")
    parser.add_argument("--pattern", default="**/*.edf", help="Glob pattern to match files")
    parser.add_argument("--strict", action="store_true", help="Treat unparseable numeric fields as errors")
    parser.add_argument("--csv", type=Path, default=None, help="Write CSV output to this file")
    parser.add_argument("--json", type=Path, default=None, help="Write JSON output to this file")
    args = parser.parse_args(argv)

    files = _collect_files(args.root, args.pattern)
    rows = [_scan_file(path, args.strict) for path in files]

    totals = {
        "files": len(rows),
        "errors": sum(1 for row in rows if row.get("error")),
        "signals": sum(int(row["signals"]) for row in rows),
        "records": sum(max(int(row["records"]), 0) for row in rows),
    }

    print("files,errors,signals,records")
    print(f"{totals['files']},{totals['errors']},{totals['signals']},{totals['records']}")

    if args.csv:
        _write_csv(rows, args.csv)
    if args.json:
        _write_json(rows, args.json)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
