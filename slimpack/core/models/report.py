"""
Package report — what happened to one archive during a packaging run.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class PackageReport(BaseModel):
    """Per-package outcome, filled in step by step by the pipeline."""

    name: str
    status: Literal["pending", "ok", "failed"] = "pending"
    step: str = ""                      # last step reached

    size_before: int | None = None      # bytes, original archive
    size_after: int | None = None       # bytes, rezipped archive

    removed_folders: list[str] = Field(default_factory=list)
    removed_sections: list[str] = Field(default_factory=list)
    removed_dependencies: list[str] = Field(default_factory=list)
    removed_links: list[str] = Field(default_factory=list)

    duration_ms: int = 0
    error: str | None = None

    @property
    def saved_bytes(self) -> int | None:
        if self.size_before is None or self.size_after is None:
            return None
        return self.size_before - self.size_after

    def to_dict(self) -> dict[str, Any]:
        data = self.model_dump(mode="json")
        data["saved_bytes"] = self.saved_bytes
        return data
