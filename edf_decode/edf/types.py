from __future__ import annotations

import sys
from collections.abc import Iterator
from dataclasses import dataclass, field

import numpy as np

DATACLASS_KWARGS = {"slots": True} if sys.version_info >= (3, 10) else {}

GLOBAL_HEADER_BYTES = 256
SIGNAL_HEADER_BYTES = 256
SAMPLE_BYTES = 2


@dataclass(frozen=True, **DATACLASS_KWARGS)
class EdfHeader:
    """Decoded EDF header: global fields plus one entry per signal in each tuple."""

    version: str
    patient_id: str
    recording_id: str
    start_date: str
    start_time: str
    header_bytes: int
    reserved: str
    record_count: int
    record_duration: float
    signal_count: int
    labels: tuple[str, ...] = ()
    transducer_types: tuple[str, ...] = ()
    physical_dimensions: tuple[str, ...] = ()
    physical_minimums: tuple[str, ...] = ()
    physical_maximums: tuple[str, ...] = ()
    digital_minimums: tuple[str, ...] = ()
    digital_maximums: tuple[str, ...] = ()
    prefiltering: tuple[str, ...] = ()
    samples_per_record: tuple[int, ...] = ()
    signal_reserved: tuple[str, ...] = ()

    @property
    def record_samples(self) -> int:
        return sum(self.samples_per_record)

    @property
    def record_size(self) -> int:
        """Size in bytes of one data record."""
        return self.record_samples * SAMPLE_BYTES

    @property
    def data_size(self) -> int:
        if self.record_count < 0:
            return 0
        return self.record_count * self.record_size

    def sampling_rates(self) -> np.ndarray:
        samples = np.asarray(self.samples_per_record, dtype=np.float64)
        if self.record_duration <= 0:
            return np.zeros_like(samples)
        return samples / self.record_duration


@dataclass(**DATACLASS_KWARGS)
class SampleMatrix:
    """Demultiplexed samples, one int16 array per signal."""

    labels: tuple[str, ...]
    signals: list[np.ndarray] = field(default_factory=list)
    include_labels: bool = False

    def __len__(self) -> int:
        return len(self.signals)

    def sample_count(self, index: int) -> int:
        return int(self.signals[index].size)

    def row(self, index: int) -> list:
        values = self.signals[index].tolist()
        if self.include_labels:
            return [self.labels[index], *values]
        return values

    def rows(self) -> Iterator[list]:
        for index in range(len(self.signals)):
            yield self.row(index)


@dataclass(**DATACLASS_KWARGS)
class DecodeOptions:
    """Caller-selected decoding stages and output flags."""

    include_labels: bool = True
    header_only: bool = False
    data_only: bool = False
    strict: bool = False
    physical: bool = False

    def validate(self) -> None:
        if self.header_only and self.data_only:
            raise ValueError("header-only and data-only are mutually exclusive; at least one stage must run")

    @property
    def emit_header(self) -> bool:
        return not self.data_only

    @property
    def emit_data(self) -> bool:
        return not self.header_only
