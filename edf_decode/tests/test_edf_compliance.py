"""Cross-check the decoder against files written by PyEDFlib.

PyEDFlib writes standards-compliant EDF files, so decoding its output is a
good check that offsets and the record interleaving match what other tools
produce.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from edf_decode.edf.data import read_edf_data
from edf_decode.edf.header import read_edf_header

# PyEDFlib is an optional dev dependency - skip tests if not available
pyedflib = pytest.importorskip("pyedflib", reason="pyedflib required for compliance tests")
highlevel = pytest.importorskip("pyedflib.highlevel")


@pytest.fixture
def pyedflib_recording(tmp_path: Path) -> tuple[Path, list[np.ndarray]]:
    output_path = tmp_path / "reference.edf"
    rng = np.random.default_rng(1234)
    # Two records of one second each, signals at different rates.
    signals = [
        rng.integers(-2000, 2000, size=512).astype(np.int32),
        rng.integers(-2000, 2000, size=128).astype(np.int32),
    ]
    headers = [
        highlevel.make_signal_header("EEG Fpz-Cz", dimension="uV", sample_frequency=256),
        highlevel.make_signal_header("EMG chin", dimension="uV", sample_frequency=64),
    ]
    highlevel.write_edf(str(output_path), signals, headers, digital=True, file_type=pyedflib.FILETYPE_EDF)
    return output_path, signals


def test_header_matches_pyedflib(pyedflib_recording) -> None:
    path, _ = pyedflib_recording

    header = read_edf_header(path, strict=True)
    reader = pyedflib.EdfReader(str(path))
    try:
        assert header.signal_count == reader.signals_in_file
        assert list(header.labels) == reader.getSignalLabels()
        assert header.record_count == reader.datarecords_in_file
        assert header.header_bytes == 256 * (header.signal_count + 1)
        assert header.sampling_rates().tolist() == pytest.approx(list(reader.getSampleFrequencies()))
    finally:
        reader.close()


def test_samples_match_pyedflib(pyedflib_recording) -> None:
    path, signals = pyedflib_recording

    matrix = read_edf_data(path)

    for decoded, expected in zip(matrix.signals, signals):
        np.testing.assert_array_equal(decoded, expected)
