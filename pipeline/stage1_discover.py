"""Stage 1: Discover — list convertible images below the root directory.

Reads:  settings.root_dir (recursively)
Writes: nothing
"""
import logging
from pathlib import Path

from models.image_file import IMAGE_EXTENSIONS, ImageFile
from settings import Settings

logger = logging.getLogger(__name__)


def run(settings: Settings) -> list[ImageFile]:
    """Return every regular file under the root whose extension is allowed.

    Extensions are compared case-insensitively; symlinks are ignored. The
    list is sorted by path.
    """
    root = settings.resolved_root
    if not root.is_dir():
        logger.warning("Root directory not found: %s", root)
        return []

    images = [
        ImageFile.from_path(path)
        for path in sorted(root.rglob("*"))
        if _is_candidate(path)
    ]

    logger.info("Stage 1 complete → %d image(s) under %s", len(images), root)
    return images


def _is_candidate(path: Path) -> bool:
    # Links are never followed; only regular files below the root qualify.
    if path.is_symlink() or not path.is_file():
        return False
    return path.suffix.lower().lstrip(".") in IMAGE_EXTENSIONS
