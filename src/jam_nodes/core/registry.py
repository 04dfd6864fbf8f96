"""Node registry: maps node type ids to definitions and client-safe metadata."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Optional

from .errors import NodeRegistrationError, UnknownNodeTypeError
from .types import NodeCategory, NodeDefinition, NodeExecutor, NodeMetadata

logger = logging.getLogger(__name__)


class NodeRegistry:
    """Catalog of node definitions for one host.

    Registration is strict: a type can only be registered once until it is
    unregistered. Lookups never raise; validation does. The registry is meant
    to be filled at startup and read afterwards; it does no locking of its own.

    Example::

        registry = create_registry()
        registry.register(conditional_node).register(end_node)
        executor = registry.get_executor("conditional")
    """

    def __init__(self) -> None:
        self._definitions: dict[str, NodeDefinition] = {}
        self._metadata: dict[str, NodeMetadata] = {}

    def register(self, definition: NodeDefinition) -> NodeRegistry:
        """Add ``definition`` under its type. Raises NodeRegistrationError on duplicates."""
        node_type = definition.type
        if node_type in self._definitions:
            raise NodeRegistrationError(node_type)

        self._definitions[node_type] = definition
        self._metadata[node_type] = definition.metadata()
        logger.debug("Registered node type %s (%s)", node_type, definition.category)
        return self

    def register_all(self, definitions: Iterable[NodeDefinition]) -> NodeRegistry:
        """Register in order; stops at the first failure and keeps earlier registrations."""
        for definition in definitions:
            self.register(definition)
        return self

    def unregister(self, node_type: str) -> bool:
        """Remove a type. Returns False if it was not registered."""
        removed = self._definitions.pop(node_type, None)
        self._metadata.pop(node_type, None)
        if removed is not None:
            logger.debug("Unregistered node type %s", node_type)
        return removed is not None

    def has(self, node_type: str) -> bool:
        return node_type in self._definitions

    def get_definition(self, node_type: str) -> Optional[NodeDefinition]:
        return self._definitions.get(node_type)

    def get_metadata(self, node_type: str) -> Optional[NodeMetadata]:
        return self._metadata.get(node_type)

    def get_executor(self, node_type: str) -> Optional[NodeExecutor]:
        definition = self._definitions.get(node_type)
        return definition.executor if definition is not None else None

    def get_node_types(self) -> list[str]:
        return list(self._definitions)

    def get_all_definitions(self) -> list[NodeDefinition]:
        return list(self._definitions.values())

    def get_all_metadata(self) -> list[NodeMetadata]:
        return list(self._metadata.values())

    def get_by_category(self, category: NodeCategory) -> list[NodeDefinition]:
        return [d for d in self._definitions.values() if d.category == category]

    def get_metadata_by_category(self, category: NodeCategory) -> list[NodeMetadata]:
        return [m for m in self._metadata.values() if m.category == category]

    def validate_input(self, node_type: str, raw_input: Any) -> Any:
        """Run the node's input contract. Raises UnknownNodeTypeError or NodeValidationError."""
        return self._require(node_type).validate_input(raw_input)

    def validate_output(self, node_type: str, raw_output: Any) -> Any:
        """Run the node's output contract. Raises UnknownNodeTypeError or NodeValidationError."""
        return self._require(node_type).validate_output(raw_output)

    @property
    def size(self) -> int:
        return len(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, node_type: object) -> bool:
        return node_type in self._definitions

    def _require(self, node_type: str) -> NodeDefinition:
        definition = self._definitions.get(node_type)
        if definition is None:
            raise UnknownNodeTypeError(node_type)
        return definition


def create_registry() -> NodeRegistry:
    """Create an empty registry. There is no shared global instance."""
    return NodeRegistry()
