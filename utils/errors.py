"""Per-file conversion errors.

Every error carries the offending path and the pipeline stage it was raised
in. The orchestrator catches `ConversionError` at the per-file boundary.
"""
from pathlib import Path


class ConversionError(Exception):
    stage = "convert"

    def __init__(self, path: Path, message: str):
        super().__init__(message)
        self.path = path
        self.message = message

    def __str__(self) -> str:
        text = f"{self.stage}: {self.path}: {self.message}"
        if self.__cause__ is not None:
            text += f" ({self.__cause__})"
        return text


class TimestampUnavailable(ConversionError):
    stage = "timestamp"


class NamingExhausted(ConversionError):
    stage = "naming"


class DecodeFailure(ConversionError):
    stage = "decode"


class EncodeFailure(ConversionError):
    stage = "encode"


class WriteFailure(ConversionError):
    stage = "write"


class DeleteFailure(ConversionError):
    stage = "delete"
