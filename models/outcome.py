from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class ConversionOutcome(BaseModel):
    """Result of one file's pipeline.

    A failure carries the stage it stopped at and the rendered error chain.
    `original_deleted` is only ever True for successes.
    """

    source: Path
    status: Literal["success", "failure"]
    output_name: str | None = None
    stage: str | None = None
    error: str | None = None
    original_deleted: bool = False

    @classmethod
    def succeeded(cls, source: Path, output_name: str) -> "ConversionOutcome":
        return cls(
            source=source,
            status="success",
            output_name=output_name,
            original_deleted=True,
        )

    @classmethod
    def failed(cls, source: Path, stage: str, error: str) -> "ConversionOutcome":
        return cls(source=source, status="failure", stage=stage, error=error)

    @property
    def ok(self) -> bool:
        return self.status == "success"


class RunReport(BaseModel):
    discovered: int = Field(default=0, ge=0)
    outcomes: list[ConversionOutcome] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def deleted(self) -> int:
        return sum(1 for o in self.outcomes if o.original_deleted)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.ok)

    @property
    def errors(self) -> list[str]:
        return [o.error for o in self.outcomes if not o.ok and o.error]
