from __future__ import annotations

import argparse
import hashlib
import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from .data import demultiplex, digital_to_physical
from .errors import EdfError
from .export import default_output_names, write_header_json, write_samples_csv
from .header import decode_header
from .tui import rich_available, run_tui
from .types import DecodeOptions, EdfHeader

logger = logging.getLogger(__name__)

RECORD_CHOICES = ("header", "data", "both")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="edf-decode",
        description="Decode EDF recordings into a JSON header document and a CSV sample table.",
    )
    parser.add_argument(
        "--in",
        dest="input_paths",
        nargs="*",
        help="Input .edf file(s) and/or folder(s)",
    )
    parser.add_argument("--out", dest="output_dir", default=".", help="Output directory (default: %(default)s)")
    parser.add_argument(
        "--glob",
        default="*.edf",
        help="Glob pattern when input is a folder (default: %(default)s)",
    )
    parser.add_argument(
        "--record",
        choices=RECORD_CHOICES,
        default="both",
        help="Write only the header, only the samples, or both (default: %(default)s)",
    )
    parser.add_argument(
        "--no-labels",
        dest="include_labels",
        action="store_false",
        help="Do not prefix each CSV row with the signal label",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject headers whose numeric fields do not parse instead of reading them as 0",
    )
    parser.add_argument(
        "--physical",
        action="store_true",
        help="Write samples in physical units using the header calibration",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument(
        "--ui",
        action="store_true",
        help="Terminal progress view with header summaries (requires 'rich')",
    )
    return parser


def options_from_args(args: argparse.Namespace) -> DecodeOptions:
    return DecodeOptions(
        include_labels=args.include_labels,
        header_only=args.record == "header",
        data_only=args.record == "data",
        strict=args.strict,
        physical=args.physical,
    )


def _discover_inputs(input_paths: Iterable[Path], glob_pattern: str) -> list[Path]:
    discovered: list[Path] = []
    for input_path in input_paths:
        if input_path.is_file():
            discovered.append(input_path)
            continue
        if input_path.is_dir():
            matches = set(input_path.glob(glob_pattern))
            if glob_pattern.endswith(".edf"):
                matches.update(input_path.glob(glob_pattern[:-4] + ".EDF"))
            discovered.extend(sorted(path for path in matches if path.is_file()))
            continue
        raise FileNotFoundError(f"Input path not found: {input_path}")
    return discovered


def _unique_path(candidate: Path, source_path: Path, taken: set[Path]) -> Path:
    if candidate not in taken:
        taken.add(candidate)
        return candidate
    digest = hashlib.sha1(str(source_path).encode("utf-8"), usedforsecurity=False).hexdigest()[:8].upper()
    resolved = candidate.with_name(f"{candidate.stem}_{digest}{candidate.suffix}")
    taken.add(resolved)
    return resolved


def decode_file(
    input_path: Path,
    output_dir: Path,
    options: DecodeOptions,
    *,
    taken: set[Path] | None = None,
    status_cb: Callable[[str], None] | None = None,
) -> tuple[EdfHeader, list[Path]]:
    """Decode one recording and write the selected outputs into ``output_dir``."""

    options.validate()
    taken = set() if taken is None else taken
    matrix = None
    with Path(input_path).open("rb") as handle:
        if status_cb:
            status_cb("read header")
        header = decode_header(handle, strict=options.strict)
        if options.emit_data:
            if status_cb:
                status_cb("demultiplex")
            matrix = demultiplex(handle, header, include_labels=options.include_labels)

    json_name, csv_name = default_output_names(header)
    written: list[Path] = []
    if options.emit_header:
        if status_cb:
            status_cb("write json")
        target = _unique_path(output_dir / json_name, input_path, taken)
        written.append(write_header_json(header, target))
    if matrix is not None:
        if status_cb:
            status_cb("write csv")
        physical = digital_to_physical(header, matrix) if options.physical else None
        target = _unique_path(output_dir / csv_name, input_path, taken)
        written.append(write_samples_csv(matrix, target, physical=physical))
    logger.info(
        "Decoded %s → %s (%d signals, %d records)",
        input_path.name,
        ", ".join(path.name for path in written),
        header.signal_count,
        header.record_count,
    )
    return header, written


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.input_paths:
        parser.error("--in is required")
    options = options_from_args(args)
    try:
        options.validate()
    except ValueError as exc:
        parser.error(str(exc))

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    if args.ui and not rich_available():
        print(
            "UI mode requires 'rich'.\n\n"
            "Install it (pick one):\n"
            "- uv run --with rich edf-decode --ui\n"
            "- uv pip install -p .venv '.[tui]' && edf-decode --ui\n"
        )
        return 1

    input_paths = [Path(raw).expanduser() for raw in args.input_paths]
    output_dir = Path(args.output_dir).expanduser()
    try:
        inputs = _discover_inputs(input_paths, args.glob)
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return 1
    if not inputs:
        logger.error("No input files matched the supplied path/pattern")
        return 1

    output_dir.mkdir(parents=True, exist_ok=True)
    taken: set[Path] = set()

    if args.ui:

        def _decode_one(*, source_path: Path, status_cb) -> tuple[EdfHeader, list[Path]]:
            return decode_file(source_path, output_dir, options, taken=taken, status_cb=status_cb)

        return run_tui(inputs=inputs, options=options, decode_one=_decode_one, title="edf-decode")

    failures = 0
    for source_path in inputs:
        try:
            decode_file(source_path, output_dir, options, taken=taken)
        except (EdfError, OSError) as exc:
            failures += 1
            logger.error("Failed to decode %s: %s", source_path, exc)
    if failures:
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
