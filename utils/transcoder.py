"""Decode a still image and re-encode it as AVIF.

Quality and speed are fixed: quality 80 of 100, speed 6 on libavif's 0-10
scale (higher is faster). The source EXIF block, if any, is carried over.
"""
import io
import logging
from pathlib import Path

from PIL import Image

from utils.errors import DecodeFailure, EncodeFailure, WriteFailure

logger = logging.getLogger(__name__)

AVIF_QUALITY = 80
AVIF_SPEED = 6

_BYTES_PER_PIXEL = 4  # RGBA, one byte per channel

_DECODE_ERRORS = (OSError, SyntaxError, ValueError, Image.DecompressionBombError)


def transcode(source: Path, target: Path) -> tuple[int, int]:
    """Convert `source` into an AVIF file at `target`.

    Returns the (width, height) of the encoded image. `target` is written
    with a plain sequential write; on failure it may hold partial data and
    cleanup is left to the caller.
    """
    frame, exif_bytes = _decode(source)
    data = _encode(source, frame, exif_bytes)
    try:
        target.write_bytes(data)
    except OSError as exc:
        raise WriteFailure(source, f"cannot write {target}") from exc
    logger.debug("Wrote %s (%d bytes, %dx%d)", target.name, len(data), *frame.size)
    return frame.size


def _decode(source: Path) -> tuple[Image.Image, bytes | None]:
    try:
        with Image.open(source) as img:
            img.load()
            exif_bytes = img.info.get("exif")
            rgba = img.convert("RGBA")
    except _DECODE_ERRORS as exc:
        raise DecodeFailure(source, "cannot decode image") from exc
    return rgba, exif_bytes


def packed_rgba(frame: Image.Image) -> Image.Image:
    """Rebuild `frame` from its packed RGBA buffer after checking its layout.

    The buffer must hold exactly width * height * 4 bytes: no row padding,
    no trailing data. Anything else is rejected instead of being
    reinterpreted.
    """
    if frame.mode != "RGBA":
        raise ValueError(f"expected RGBA frame, got {frame.mode}")
    width, height = frame.size
    buffer = frame.tobytes()
    expected = width * height * _BYTES_PER_PIXEL
    if len(buffer) != expected:
        raise ValueError(
            f"pixel buffer is {len(buffer)} bytes, expected {expected} for {width}x{height}"
        )
    return Image.frombuffer("RGBA", (width, height), buffer, "raw", "RGBA", 0, 1)


def _encode(source: Path, frame: Image.Image, exif_bytes: bytes | None) -> bytes:
    save_kwargs = {"quality": AVIF_QUALITY, "speed": AVIF_SPEED}
    if exif_bytes:
        save_kwargs["exif"] = exif_bytes

    buf = io.BytesIO()
    try:
        packed_rgba(frame).save(buf, format="AVIF", **save_kwargs)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodeFailure(source, "AVIF encoding failed") from exc
    return buf.getvalue()
