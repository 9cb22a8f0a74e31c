"""Stage 2: Convert — turn every discovered image into a dated AVIF file.

Each file runs end-to-end in one worker thread:

    resolve capture time → reserve output name → transcode → delete original

A failure at any step is recorded for that file only; the batch always runs
to completion. Outcomes are collected in the calling thread, which also owns
the progress counter, so workers share no mutable state.

Reads:  the discovered source images
Writes: <parent>/<YYYY>年<MM>月<DD>日 <HH>-<MM>-<SS>[(n)].avif next to each source
Deletes: each source image whose AVIF output was fully written
"""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from models.image_file import ImageFile
from models.outcome import ConversionOutcome, RunReport
from settings import Settings
from utils.errors import ConversionError, DeleteFailure
from utils.naming import reserve_output
from utils.timestamps import resolve_capture_time
from utils.transcoder import transcode

logger = logging.getLogger(__name__)


def run(settings: Settings, images: list[ImageFile]) -> RunReport:
    """Convert all `images` on a pool of `settings.max_workers` threads.

    Returns the RunReport; never raises for an individual file.
    """
    report = RunReport(discovered=len(images))
    if not images:
        logger.warning("No images found; nothing to do.")
        return report

    total = len(images)
    with ThreadPoolExecutor(max_workers=settings.max_workers) as executor:
        futures = {executor.submit(convert_one, image): image for image in images}
        for future in as_completed(futures):
            outcome = future.result()
            report.outcomes.append(outcome)
            if outcome.ok:
                logger.info(
                    "[%d/%d] %s -> %s",
                    len(report.outcomes), total, outcome.source.name, outcome.output_name,
                )
            else:
                logger.debug("[%d/%d] %s failed at %s", len(report.outcomes), total,
                             outcome.source.name, outcome.stage)

    _log_summary(report)
    return report


# ---------------------------------------------------------------------------
# Per-file pipeline
# ---------------------------------------------------------------------------

def convert_one(image: ImageFile) -> ConversionOutcome:
    """Run the full pipeline for one image and report how it ended."""
    try:
        output_path = _convert(image)
    except ConversionError as exc:
        return ConversionOutcome.failed(image.path, exc.stage, str(exc))
    except Exception as exc:
        # Unexpected errors stay local to this file as well.
        logger.exception("Unexpected error while converting %s", image.path)
        return ConversionOutcome.failed(image.path, "convert", f"convert: {image.path}: {exc}")
    return ConversionOutcome.succeeded(image.path, output_path.name)


def _convert(image: ImageFile) -> Path:
    timestamp = resolve_capture_time(image)
    output_path = reserve_output(image.parent, timestamp, image.path)

    try:
        transcode(image.path, output_path)
    except BaseException:
        _discard(output_path)
        raise

    try:
        image.path.unlink()
    except OSError as exc:
        raise DeleteFailure(image.path, f"converted to {output_path.name} but original not deleted") from exc

    return output_path


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove partial output %s: %s", path, exc)


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------

def _log_summary(report: RunReport) -> None:
    if report.failed:
        logger.error("%d error(s) during conversion:", report.failed)
        for error in report.errors:
            logger.error("  - %s", error)

    logger.info("Stage 2 complete")
    logger.info("  Discovered:        %d", report.discovered)
    logger.info("  Converted:         %d", report.succeeded)
    logger.info("  Originals deleted: %d", report.deleted)
