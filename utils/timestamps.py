"""Capture-time resolution.

Priority: EXIF DateTimeOriginal (local wall-clock), then the file's creation
time, then its modification time. The first source that yields an
unambiguous instant wins.
"""
import logging
import os
from datetime import datetime, timezone

from PIL import ExifTags, Image

from models.image_file import CaptureTimestamp, ImageFile
from utils.errors import TimestampUnavailable

logger = logging.getLogger(__name__)

_EXIF_DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"


def resolve_capture_time(image: ImageFile) -> CaptureTimestamp:
    """Return the capture time of `image`, falling back to filesystem times."""
    instant = _exif_capture_time(image)
    if instant is not None:
        return CaptureTimestamp(instant=instant, source="exif")
    return CaptureTimestamp(instant=_filesystem_capture_time(image), source="filesystem")


# ---------------------------------------------------------------------------
# EXIF
# ---------------------------------------------------------------------------

def _exif_capture_time(image: ImageFile) -> datetime | None:
    try:
        raw = _read_date_time_original(image)
    except Exception as exc:
        logger.debug("No readable EXIF in %s: %s", image.name, exc)
        return None

    if raw is None:
        logger.debug("No DateTimeOriginal in %s", image.name)
        return None

    naive = parse_exif_datetime(raw)
    if naive is None:
        logger.debug("Malformed DateTimeOriginal %r in %s", raw, image.name)
        return None

    instant = localize(naive)
    if instant is None:
        logger.debug("DateTimeOriginal %s in %s is ambiguous in local time", naive, image.name)
    return instant


def _read_date_time_original(image: ImageFile) -> str | bytes | None:
    with Image.open(image.path) as img:
        exif = img.getexif()
        # The tag normally lives in the Exif sub-IFD; some writers put it in IFD0.
        value = exif.get_ifd(ExifTags.IFD.Exif).get(ExifTags.Base.DateTimeOriginal)
        if value is None:
            value = exif.get(ExifTags.Base.DateTimeOriginal)
    return value


def parse_exif_datetime(value: str | bytes) -> datetime | None:
    """Parse an EXIF `YYYY:MM:DD HH:MM:SS` string into a naive datetime."""
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="replace")
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip("\x00 \t\r\n"), _EXIF_DATETIME_FORMAT)
    except ValueError:
        return None


def localize(naive: datetime) -> datetime | None:
    """Zone a naive wall-clock time in the system timezone.

    Returns None when the wall-clock time is ambiguous or does not exist
    locally (both folds must map to the same instant).
    """
    early = naive.replace(fold=0).astimezone()
    late = naive.replace(fold=1).astimezone()
    if early != late:
        return None
    return early


# ---------------------------------------------------------------------------
# Filesystem
# ---------------------------------------------------------------------------

def _filesystem_capture_time(image: ImageFile) -> datetime:
    """Creation time if the platform records it, else modification time."""
    try:
        stat = os.stat(image.path)
    except OSError as exc:
        raise TimestampUnavailable(image.path, "no EXIF date and no file times") from exc

    seconds = _birth_time(stat)
    if seconds is None:
        seconds = stat.st_mtime
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc).astimezone()
    except (OverflowError, ValueError, OSError) as exc:
        raise TimestampUnavailable(image.path, f"file time {seconds} is out of range") from exc


def _birth_time(stat: os.stat_result) -> float | None:
    # st_birthtime is absent on most Linux builds.
    return getattr(stat, "st_birthtime", None)
