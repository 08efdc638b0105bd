"""Adapters — bindings to the external tools the packager drives."""

from slimpack.adapters.base import Adapter, ExecutionContext
from slimpack.adapters.languages.node import NodeAdapter
from slimpack.adapters.mock import MockAdapter

__all__ = [
    "Adapter",
    "ExecutionContext",
    "MockAdapter",
    "NodeAdapter",
]
