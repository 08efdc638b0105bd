"""
Adapter base — the contract between the packaging services and tools.

Services never shell out directly; they build an Action, wrap it in an
ExecutionContext and hand it to an adapter, which returns a Receipt.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel

from slimpack.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """Everything an adapter needs to run an action."""

    action: Action
    cwd: str = "."
    timeout: int = 600

    @property
    def package(self) -> str:
        """Package the action belongs to, for log and error messages."""
        return self.action.for_package or "-"


class Adapter(ABC):
    """Abstract base class for tool adapters.

    Adapters run external tools and return receipts. They NEVER raise;
    failures are captured in the Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'node', 'mock')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying tool can be found. Fast, never raises."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check the action can run.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Run the action and return a receipt. MUST never raise."""

    def run(self, context: ExecutionContext) -> Receipt:
        """Validate, then execute."""
        valid, message = self.validate(context)
        if not valid:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=message,
            )
        return self.execute(context)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
