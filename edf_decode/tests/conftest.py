from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import pytest


def _pad(text: object, length: int) -> bytes:
    return str(text).encode("ascii")[:length].ljust(length, b" ")


def build_edf_header(
    labels: Sequence[str],
    samples_per_record: Sequence[object],
    *,
    record_count: object = 1,
    record_duration: object = 1,
    version: str = "0",
    patient_id: str = "X M 01-JAN-1970 Patient",
    recording_id: str = "Startdate 02-MAR-2004 PSG",
    start_date: str = "02.03.04",
    start_time: str = "05.06.07",
    header_bytes: object | None = None,
) -> bytes:
    """Assemble an EDF header with predictable per-signal metadata."""

    ns = len(labels)
    if header_bytes is None:
        header_bytes = 256 + 256 * ns
    header = bytearray()
    header += _pad(version, 8)
    header += _pad(patient_id, 80)
    header += _pad(recording_id, 80)
    header += _pad(start_date, 8)
    header += _pad(start_time, 8)
    header += _pad(header_bytes, 8)
    header += _pad("", 44)
    header += _pad(record_count, 8)
    header += _pad(record_duration, 8)
    header += _pad(ns, 4)
    sections = [
        ([label for label in labels], 16),
        ([f"AgAgCl electrode {i}" for i in range(ns)], 80),
        (["uV"] * ns, 8),
        ([f"-{100 + i}" for i in range(ns)], 8),
        ([f"{100 + i}" for i in range(ns)], 8),
        (["-32768"] * ns, 8),
        (["32767"] * ns, 8),
        ([f"HP:0.{i}Hz LP:70Hz" for i in range(ns)], 80),
        (list(samples_per_record), 8),
        ([""] * ns, 32),
    ]
    for values, width in sections:
        for value in values:
            header += _pad(value, width)
    return bytes(header)


def build_edf(
    labels: Sequence[str],
    samples_per_record: Sequence[int],
    data: Sequence[int],
    **kwargs,
) -> bytes:
    return build_edf_header(labels, samples_per_record, **kwargs) + np.asarray(data, dtype="<i2").tobytes()


@pytest.fixture
def edf_header_bytes():
    return build_edf_header


@pytest.fixture
def edf_bytes():
    return build_edf
