"""Header parsing utilities for EDF recordings."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import BinaryIO

from .errors import IOFailureError, InvalidFormatError, MalformedFieldError, TruncatedDataError
from .types import GLOBAL_HEADER_BYTES, SIGNAL_HEADER_BYTES, EdfHeader

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

VERSION_MARKER = "0"

# (field, offset, width) inside the 256-byte global header.
GLOBAL_FIELDS = (
    ("version", 0, 8),
    ("patient_id", 8, 80),
    ("recording_id", 88, 80),
    ("start_date", 168, 8),
    ("start_time", 176, 8),
    ("header_bytes", 184, 8),
    ("reserved", 192, 44),
    ("record_count", 236, 8),
    ("record_duration", 244, 8),
    ("signal_count", 252, 4),
)

# (field, width) of the per-signal arrays. Each array stores one entry per
# signal back to back before the next array starts.
SIGNAL_FIELDS = (
    ("labels", 16),
    ("transducer_types", 80),
    ("physical_dimensions", 8),
    ("physical_minimums", 8),
    ("physical_maximums", 8),
    ("digital_minimums", 8),
    ("digital_maximums", 8),
    ("prefiltering", 80),
    ("samples_per_record", 8),
    ("signal_reserved", 32),
)

_INTEGER = re.compile(r"[+-]?[0-9]+")
_DECIMAL = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


# ---------------------------------------------------------------------------
# Stream helpers
# ---------------------------------------------------------------------------


def _read_exact(handle: BinaryIO, size: int, what: str) -> bytes:
    try:
        data = handle.read(size)
    except OSError as exc:
        raise IOFailureError(f"Reading {what} failed: {exc}") from exc
    if len(data) != size:
        raise TruncatedDataError(what, size, len(data))
    return data


def _tell(handle: BinaryIO) -> int:
    try:
        return handle.tell()
    except OSError as exc:
        raise IOFailureError(f"Unable to query stream position: {exc}") from exc


def _seek(handle: BinaryIO, offset: int) -> None:
    try:
        handle.seek(offset, 0)
    except OSError as exc:
        raise IOFailureError(f"Seeking to byte {offset} failed: {exc}") from exc


def _remaining(handle: BinaryIO) -> int:
    """Bytes left between the current position and the end of the stream."""

    position = _tell(handle)
    try:
        end = handle.seek(0, 2)
        handle.seek(position, 0)
    except OSError as exc:
        raise IOFailureError(f"Unable to determine stream size: {exc}") from exc
    return max(end - position, 0)


def _text(block: bytes, offset: int, width: int) -> str:
    return block[offset : offset + width].decode("ascii", errors="ignore").strip()


# ---------------------------------------------------------------------------
# Field parsing
# ---------------------------------------------------------------------------


def _parse_int(field: str, raw: str, strict: bool) -> int:
    if _INTEGER.fullmatch(raw):
        return int(raw)
    if strict:
        raise MalformedFieldError(field, raw)
    logger.warning("Header field %s is not an integer (%r); treating it as 0", field, raw)
    return 0


def _parse_float(field: str, raw: str, strict: bool) -> float:
    if _DECIMAL.fullmatch(raw):
        return float(raw)
    if strict:
        raise MalformedFieldError(field, raw, reason="is not a valid number")
    logger.warning("Header field %s is not a number (%r); treating it as 0", field, raw)
    return 0.0


def _split_signal_block(block: bytes, signal_count: int) -> dict[str, tuple[str, ...]]:
    arrays: dict[str, tuple[str, ...]] = {}
    base = 0
    for name, width in SIGNAL_FIELDS:
        arrays[name] = tuple(_text(block, base + index * width, width) for index in range(signal_count))
        base += width * signal_count
    return arrays


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def decode_header(handle: BinaryIO, *, strict: bool = False) -> EdfHeader:
    """Decode the EDF header starting at the current stream position.

    On return the stream sits ``header_bytes`` past where the header began,
    i.e. on the first byte of the data records.

    With ``strict`` unset, numeric fields that fail to parse are read as zero
    and a warning is logged. With ``strict`` set they raise
    :class:`MalformedFieldError`, as does a ``header_bytes`` value that does
    not match the signal count.
    """

    start = _tell(handle)
    block = _read_exact(handle, GLOBAL_HEADER_BYTES, "global header")
    fields = {name: _text(block, offset, width) for name, offset, width in GLOBAL_FIELDS}

    if fields["version"] != VERSION_MARKER:
        raise InvalidFormatError(f"Not an EDF file: version marker is {fields['version']!r}, expected '0'")

    header_bytes = _parse_int("header_bytes", fields["header_bytes"], strict)
    record_count = _parse_int("record_count", fields["record_count"], strict)
    record_duration = _parse_float("record_duration", fields["record_duration"], strict)
    signal_count = _parse_int("signal_count", fields["signal_count"], strict)
    if signal_count < 0:
        raise MalformedFieldError("signal_count", fields["signal_count"], reason="must not be negative")
    if header_bytes < 0:
        raise MalformedFieldError("header_bytes", fields["header_bytes"], reason="must not be negative")

    signal_block = _read_exact(handle, signal_count * SIGNAL_HEADER_BYTES, "signal headers")
    arrays = _split_signal_block(signal_block, signal_count)
    samples_per_record = tuple(
        _parse_int(f"samples_per_record[{index}]", raw, strict)
        for index, raw in enumerate(arrays.pop("samples_per_record"))
    )

    expected_bytes = GLOBAL_HEADER_BYTES + signal_count * SIGNAL_HEADER_BYTES
    if header_bytes != expected_bytes:
        if strict:
            raise MalformedFieldError(
                "header_bytes",
                fields["header_bytes"],
                reason=f"does not match {signal_count} signals ({expected_bytes} bytes)",
            )
        logger.warning(
            "Header declares %d bytes but %d signals need %d; data is read from byte %d",
            header_bytes,
            signal_count,
            expected_bytes,
            header_bytes,
        )
    _seek(handle, start + header_bytes)

    header = EdfHeader(
        version=fields["version"],
        patient_id=fields["patient_id"],
        recording_id=fields["recording_id"],
        start_date=fields["start_date"],
        start_time=fields["start_time"],
        header_bytes=header_bytes,
        reserved=fields["reserved"],
        record_count=record_count,
        record_duration=record_duration,
        signal_count=signal_count,
        samples_per_record=samples_per_record,
        **arrays,
    )
    logger.debug(
        "Decoded EDF header: %d signals, %d records of %gs",
        header.signal_count,
        header.record_count,
        header.record_duration,
    )
    return header


def read_edf_header(path: str | Path, *, strict: bool = False) -> EdfHeader:
    """Read the header of the EDF file at ``path``."""

    with Path(path).open("rb") as handle:
        return decode_header(handle, strict=strict)
