from __future__ import annotations

import csv
import json
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import numpy as np

from .types import EdfHeader, SampleMatrix

_UNSAFE_NAME_CHARS = re.compile(r"[^0-9A-Za-z._-]")


def _duration(seconds: float) -> int | float:
    return int(seconds) if float(seconds).is_integer() else seconds


def header_payload(header: EdfHeader) -> dict[str, Any]:
    """Return the JSON-ready metadata document for ``header``."""

    return {
        "PatientID": header.patient_id,
        "RecordID": header.recording_id,
        "StartDate": header.start_date,
        "StartTime": header.start_time,
        "Records": header.record_count,
        "Duration": _duration(header.record_duration),
        "Signals": header.signal_count,
        "Samples": list(header.samples_per_record),
        "Labels": list(header.labels),
        "Transducer": list(header.transducer_types),
        "PhDim": list(header.physical_dimensions),
        "PhMin": list(header.physical_minimums),
        "PhMax": list(header.physical_maximums),
        "DigMin": list(header.digital_minimums),
        "DigMax": list(header.digital_maximums),
        "Prefiltering": list(header.prefiltering),
    }


def default_output_names(header: EdfHeader) -> tuple[str, str]:
    # Date and time come from the file; keep them from forming path components.
    suffix = _UNSAFE_NAME_CHARS.sub("_", f"{header.start_date}_{header.start_time}")
    return f"header_{suffix}.json", f"data_{suffix}.csv"


def write_header_json(header: EdfHeader, output_path: str | Path) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(header_payload(header), indent=4))
    return output_path


def write_samples_csv(
    matrix: SampleMatrix,
    output_path: str | Path,
    *,
    physical: Sequence[np.ndarray] | None = None,
) -> Path:
    """Write one CSV row per signal.

    When ``physical`` is given its arrays replace the digital samples. The
    label column is present only when the matrix was built with labels.
    """

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", newline="") as handle:
        writer = csv.writer(handle)
        if physical is None:
            writer.writerows(matrix.rows())
        else:
            for label, values in zip(matrix.labels, physical):
                row = values.tolist()
                writer.writerow([label, *row] if matrix.include_labels else row)
    return output_path
