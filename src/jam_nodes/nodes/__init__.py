"""Reference node library."""

from __future__ import annotations

from ..core.registry import NodeRegistry, create_registry
from ..core.types import NodeDefinition
from .integration import http_request_node
from .logic import conditional_node, delay_node, end_node


def builtin_nodes() -> list[NodeDefinition]:
    """Every node definition shipped with the package."""
    return [conditional_node, delay_node, end_node, http_request_node]


def create_default_registry() -> NodeRegistry:
    """A fresh registry pre-loaded with the built-in nodes."""
    return create_registry().register_all(builtin_nodes())


__all__ = [
    "builtin_nodes",
    "conditional_node",
    "create_default_registry",
    "delay_node",
    "end_node",
    "http_request_node",
]
