import os
from datetime import datetime
from pathlib import Path

import piexif
import pytest
from PIL import Image

from settings import Settings


def write_photo(
    path: Path,
    size: tuple[int, int] = (32, 24),
    date_time_original: str | None = None,
    mtime: datetime | None = None,
) -> Path:
    """Write a small test image, optionally with EXIF DateTimeOriginal and a fixed mtime."""
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.new("RGB", size, (200, 80, 40))
    if date_time_original is not None:
        exif_bytes = piexif.dump({
            "0th": {},
            "Exif": {piexif.ExifIFD.DateTimeOriginal: date_time_original.encode("ascii")},
        })
        img.save(path, exif=exif_bytes)
    else:
        img.save(path)
    if mtime is not None:
        ts = mtime.timestamp()
        os.utime(path, (ts, ts))
    return path


@pytest.fixture
def no_birth_time(monkeypatch):
    """Force the modification-time fallback on platforms that expose st_birthtime."""
    monkeypatch.setattr("utils.timestamps._birth_time", lambda stat: None)


@pytest.fixture
def tmp_settings(tmp_path: Path) -> Settings:
    """Settings pointing at a fresh temp directory as the conversion root."""
    return Settings(root_dir=tmp_path, max_workers=4)
