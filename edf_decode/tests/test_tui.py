from __future__ import annotations

import io
from pathlib import Path

import pytest

from edf_decode.edf import tui
from edf_decode.edf.header import decode_header, read_edf_header
from edf_decode.edf.types import DecodeOptions

rich_console = pytest.importorskip("rich.console", reason="rich required for the terminal UI")


def test_rich_available() -> None:
    assert tui.rich_available()


def test_render_header_lists_signals(edf_header_bytes) -> None:
    header = decode_header(io.BytesIO(edf_header_bytes(["EEG Fpz-Cz", "Resp oro-nasal"], [100, 1], record_duration=1)))
    console = rich_console.Console(record=True, width=120)

    tui.render_header(header, console)
    text = console.export_text()

    assert "EEG Fpz-Cz" in text
    assert "Resp oro-nasal" in text
    assert "100" in text


def test_run_tui_reports_failures(tmp_path: Path, edf_bytes) -> None:
    good = tmp_path / "good.edf"
    good.write_bytes(edf_bytes(["A"], [1], [3]))
    bad = tmp_path / "bad.edf"
    bad.write_bytes(b"9" * 300)
    seen: list[Path] = []

    def _decode_one(*, source_path: Path, status_cb):
        status_cb("read header")
        seen.append(source_path)
        header = read_edf_header(source_path)
        return header, [tmp_path / f"{source_path.stem}.json"]

    exit_code = tui.run_tui(inputs=[good, bad], options=DecodeOptions(), decode_one=_decode_one)

    assert exit_code == 1
    assert seen == [good, bad]


def test_run_tui_uses_header_from_decoder(tmp_path: Path, edf_header_bytes) -> None:
    # The input never exists on disk, so any second header read would fail.
    missing = tmp_path / "streamed.edf"
    calls: list[Path] = []

    def _decode_one(*, source_path: Path, status_cb):
        calls.append(source_path)
        return decode_header(io.BytesIO(edf_header_bytes(["A"], [1]))), []

    assert tui.run_tui(inputs=[missing], options=DecodeOptions(), decode_one=_decode_one) == 0
    assert calls == [missing]
