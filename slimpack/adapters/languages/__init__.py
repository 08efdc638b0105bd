"""Language adapters — node."""

from slimpack.adapters.languages.node import NodeAdapter

__all__ = ["NodeAdapter"]
