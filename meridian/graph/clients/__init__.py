"""High-level clients."""

from .graph_client import GraphClient

__all__ = ["GraphClient"]
