"""
Action and Receipt models — the contract between services and adapters.

A service asks an adapter to run a tool by handing it an Action; the
adapter answers with a Receipt. Adapters never raise: a missing binary,
a timeout or a nonzero exit all come back as a failed Receipt.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Action(BaseModel):
    """A tool invocation requested from an adapter."""

    id: str                             # e.g. "install:authorizer"
    adapter: str                        # which adapter handles this
    operation: str = ""                 # adapter-specific verb ("install", "version")
    params: dict[str, Any] = Field(default_factory=dict)
    for_package: str | None = None      # package being trimmed, if any


class Receipt(BaseModel):
    """Outcome of running an Action."""

    adapter: str
    action_id: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    command: str = ""
    return_code: int | None = None
    output: str = ""
    stderr: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        """Create a success receipt."""
        return cls(adapter=adapter, action_id=action_id, status="ok", output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        """Create a failure receipt."""
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, adapter: str, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        """Create a skip receipt."""
        return cls(adapter=adapter, action_id=action_id, status="skipped", output=reason, **kwargs)
