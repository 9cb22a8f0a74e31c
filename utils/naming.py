"""Output file naming from capture timestamps.

Names look like `2024年03月15日 14-22-10.avif`; collisions get `(1)`, `(2)`,
... inserted before the extension.
"""
import logging
from collections.abc import Iterator
from pathlib import Path

from models.image_file import CaptureTimestamp
from utils.errors import NamingExhausted, WriteFailure

logger = logging.getLogger(__name__)

OUTPUT_EXTENSION = "avif"
MAX_CANDIDATES = 10_000


def format_base_name(timestamp: CaptureTimestamp) -> str:
    t = timestamp.instant
    return (
        f"{t.year:04d}年{t.month:02d}月{t.day:02d}日 "
        f"{t.hour:02d}-{t.minute:02d}-{t.second:02d}"
    )


def candidate_names(base: str, extension: str = OUTPUT_EXTENSION) -> Iterator[str]:
    """Yield `base.ext`, then `base(1).ext`, `base(2).ext`, ... up to the cap."""
    yield f"{base}.{extension}"
    for counter in range(1, MAX_CANDIDATES):
        yield f"{base}({counter}).{extension}"


def reserve_output(
    directory: Path,
    timestamp: CaptureTimestamp,
    source: Path,
    extension: str = OUTPUT_EXTENSION,
) -> Path:
    """Atomically claim a free output path in `directory` for `source`.

    Each candidate is created with exclusive-create semantics, so two workers
    racing for the same timestamp can never end up with the same file. The
    returned path exists as an empty file owned by the caller. Errors carry
    `source`, the image the name was requested for.
    """
    for name in candidate_names(format_base_name(timestamp), extension):
        path = directory / name
        try:
            with open(path, "xb"):
                pass
        except FileExistsError:
            logger.debug("Name taken: %s", name)
            continue
        except OSError as exc:
            raise WriteFailure(source, f"cannot create {path}") from exc
        return path
    raise NamingExhausted(source, f"no free name in {directory} after {MAX_CANDIDATES} candidates")
