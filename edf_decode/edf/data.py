from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO

import numpy as np

from .errors import MalformedFieldError, TruncatedDataError
from .header import _read_exact, _remaining, _seek, decode_header
from .types import EdfHeader, SampleMatrix

logger = logging.getLogger(__name__)


def _check_geometry(header: EdfHeader) -> None:
    if header.record_count < 0:
        raise MalformedFieldError(
            "record_count",
            str(header.record_count),
            reason="is negative; recordings of unknown length are not supported",
        )
    for index, count in enumerate(header.samples_per_record):
        if count < 0:
            raise MalformedFieldError(f"samples_per_record[{index}]", str(count), reason="must not be negative")


def demultiplex(handle: BinaryIO, header: EdfHeader, *, include_labels: bool = False) -> SampleMatrix:
    """Split the interleaved data records into one int16 array per signal.

    Each record holds ``samples_per_record[0]`` samples of signal 0, then
    ``samples_per_record[1]`` samples of signal 1 and so on. The stream is
    first positioned at ``header.header_bytes`` (absolute), so a handle that
    was read past the header or rewound is handled the same way.
    """

    _check_geometry(header)
    _seek(handle, header.header_bytes)
    what = f"{header.record_count} data records"
    # Declared sizes come from the file; check them before allocating a read buffer.
    available = _remaining(handle)
    if available < header.data_size:
        raise TruncatedDataError(what, header.data_size, available)
    raw = _read_exact(handle, header.data_size, what)

    # Rows are records, columns are the concatenated per-signal runs of one record.
    records = np.frombuffer(raw, dtype="<i2").reshape(header.record_count, header.record_samples)
    bounds = np.concatenate(([0], np.cumsum(header.samples_per_record, dtype=np.int64)))
    signals = [
        records[:, bounds[index] : bounds[index + 1]].reshape(-1).astype(np.int16)
        for index in range(header.signal_count)
    ]
    logger.debug(
        "Demultiplexed %d records into %d signals (%d bytes)",
        header.record_count,
        header.signal_count,
        len(raw),
    )
    return SampleMatrix(labels=header.labels, signals=signals, include_labels=include_labels)


def read_edf_data(
    path: str | Path,
    header: EdfHeader | None = None,
    *,
    include_labels: bool = False,
    strict: bool = False,
) -> SampleMatrix:
    """Read all samples of an EDF recording, decoding its header when not supplied."""

    with Path(path).open("rb") as handle:
        if header is None:
            header = decode_header(handle, strict=strict)
        return demultiplex(handle, header, include_labels=include_labels)


def _calibration(header: EdfHeader, index: int) -> tuple[float, float]:
    try:
        physical_min = float(header.physical_minimums[index])
        physical_max = float(header.physical_maximums[index])
        digital_min = float(header.digital_minimums[index])
        digital_max = float(header.digital_maximums[index])
    except ValueError:
        logger.warning("Signal %d (%s) has no usable calibration; keeping digital values", index, header.labels[index])
        return 1.0, 0.0
    digital_range = digital_max - digital_min
    if np.isclose(digital_range, 0.0):
        return 1.0, 0.0
    gain = (physical_max - physical_min) / digital_range
    return gain, physical_min - digital_min * gain


def digital_to_physical(header: EdfHeader, matrix: SampleMatrix) -> list[np.ndarray]:
    """Convert each signal from digital units to the header's physical units."""

    physical: list[np.ndarray] = []
    for index, samples in enumerate(matrix.signals):
        gain, offset = _calibration(header, index)
        physical.append(samples.astype(np.float64) * gain + offset)
    return physical
