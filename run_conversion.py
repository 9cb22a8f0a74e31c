#!/usr/bin/env python3
"""Convert every photo below a directory to AVIF, named by capture time.

Originals are deleted once their AVIF replacement has been written.

Usage:
    python run_conversion.py                 # convert the current directory tree
    python run_conversion.py --root ~/Fotos  # convert another tree
    python run_conversion.py --strict        # exit 1 if any file failed
"""
import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from pipeline import stage1_discover, stage2_convert
from settings import Settings

logger = logging.getLogger("run_conversion")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--root", type=Path, default=None,
                        help="Directory to convert recursively (default: current directory)")
    parser.add_argument("--strict", action="store_true",
                        help="Exit with status 1 when any file fails")
    args = parser.parse_args(argv)

    settings = Settings() if args.root is None else Settings(root_dir=args.root)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )

    logger.info("Converting images under %s", settings.resolved_root)
    logger.warning("Converted files are written next to the originals; originals are deleted.")

    logger.info("=== Stage 1: Discover ===")
    images = stage1_discover.run(settings)
    if not images:
        return 0

    logger.info("=== Stage 2: Convert ===")
    report = stage2_convert.run(settings, images)

    logger.info("=== Done: %d/%d converted ===", report.succeeded, report.discovered)
    if args.strict and report.failed:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
