"""Tests for output name allocation."""
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path

import pytest

from models.image_file import CaptureTimestamp
from utils.errors import NamingExhausted, WriteFailure
from utils.naming import candidate_names, format_base_name, reserve_output

_TS = CaptureTimestamp(
    instant=datetime(2024, 3, 5, 7, 8, 9, tzinfo=timezone.utc),
    source="exif",
)
_BASE = "2024年03月05日 07-08-09"
_SOURCE = Path("/photos/IMG_0042.jpg")


class TestFormatBaseName:
    def test_zero_padded_24h(self):
        assert format_base_name(_TS) == _BASE

    def test_afternoon_hour(self):
        ts = CaptureTimestamp(
            instant=datetime(2023, 12, 31, 23, 59, 0, tzinfo=timezone.utc), source="filesystem"
        )
        assert format_base_name(ts) == "2023年12月31日 23-59-00"


class TestCandidateNames:
    def test_order(self):
        names = candidate_names("x", "avif")
        assert [next(names) for _ in range(3)] == ["x.avif", "x(1).avif", "x(2).avif"]

    def test_capped(self):
        names = list(candidate_names("x"))
        assert len(names) == 10_000
        assert names[-1] == "x(9999).avif"


class TestReserveOutput:
    def test_creates_empty_file(self, tmp_path):
        path = reserve_output(tmp_path, _TS, _SOURCE)
        assert path == tmp_path / f"{_BASE}.avif"
        assert path.exists()
        assert path.stat().st_size == 0

    def test_sequential_reservations_increment(self, tmp_path):
        names = [reserve_output(tmp_path, _TS, _SOURCE).name for _ in range(3)]
        assert names == [f"{_BASE}.avif", f"{_BASE}(1).avif", f"{_BASE}(2).avif"]

    def test_existing_file_is_not_touched(self, tmp_path):
        existing = tmp_path / f"{_BASE}.avif"
        existing.write_bytes(b"keep me")
        reserve_output(tmp_path, _TS, _SOURCE)
        assert existing.read_bytes() == b"keep me"

    def test_exhaustion_raises(self, tmp_path, monkeypatch):
        monkeypatch.setattr("utils.naming.MAX_CANDIDATES", 3)
        for name in (f"{_BASE}.avif", f"{_BASE}(1).avif", f"{_BASE}(2).avif"):
            (tmp_path / name).touch()
        with pytest.raises(NamingExhausted) as exc_info:
            reserve_output(tmp_path, _TS, _SOURCE)
        assert exc_info.value.path == _SOURCE
        assert "IMG_0042.jpg" in str(exc_info.value)

    def test_uncreatable_directory_names_source(self, tmp_path):
        with pytest.raises(WriteFailure) as exc_info:
            reserve_output(tmp_path / "missing-dir", _TS, _SOURCE)
        assert exc_info.value.path == _SOURCE

    def test_concurrent_reservations_are_distinct(self, tmp_path):
        count = 16
        with ThreadPoolExecutor(max_workers=8) as executor:
            paths = list(executor.map(lambda _: reserve_output(tmp_path, _TS, _SOURCE), range(count)))

        expected = {f"{_BASE}.avif"} | {f"{_BASE}({i}).avif" for i in range(1, count)}
        assert {p.name for p in paths} == expected
        assert len(list(tmp_path.iterdir())) == count
