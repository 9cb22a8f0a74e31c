from datetime import datetime
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "tiff"})


class ImageFile(BaseModel):
    """A source image picked up by discovery.

    `path` is absolute. `extension` is lower-case and stored without the dot.
    Instances are frozen: a worker owns one for the length of its pipeline.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    extension: str

    @field_validator("path")
    @classmethod
    def must_be_absolute(cls, v: Path) -> Path:
        if not v.is_absolute():
            raise ValueError("path must be absolute")
        return v

    @field_validator("extension", mode="before")
    @classmethod
    def normalise_extension(cls, v: str) -> str:
        ext = str(v).lower().lstrip(".")
        if ext not in IMAGE_EXTENSIONS:
            raise ValueError(f"unsupported extension: {v}")
        return ext

    @classmethod
    def from_path(cls, path: Path) -> "ImageFile":
        # absolute(), not resolve(): keep the path of the entry itself.
        return cls(path=path.absolute(), extension=path.suffix)

    @property
    def parent(self) -> Path:
        return self.path.parent

    @property
    def name(self) -> str:
        return self.path.name


class CaptureTimestamp(BaseModel):
    """Authoritative capture time of an image.

    `instant` is always timezone-aware; `source` records whether it came from
    embedded EXIF data or from the file's own attributes.
    """

    model_config = ConfigDict(frozen=True)

    instant: datetime
    source: Literal["exif", "filesystem"]

    @field_validator("instant")
    @classmethod
    def must_be_aware(cls, v: datetime) -> datetime:
        if v.tzinfo is None or v.utcoffset() is None:
            raise ValueError("instant must be timezone-aware")
        return v
