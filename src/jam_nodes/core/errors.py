"""Exception taxonomy shared by the registry, the nodes and the runner."""

from __future__ import annotations

from typing import Any


class NodeError(Exception):
    """Base for every node framework error."""

    def __init__(self, message: str, error_type: str = "node_error"):
        self.error_type = error_type
        super().__init__(message)


class NodeRegistrationError(NodeError):
    """Raised when a node type is registered twice on the same registry."""

    def __init__(self, node_type: str):
        self.node_type = node_type
        super().__init__(f'Node type "{node_type}" is already registered', "duplicate_node_type")


class UnknownNodeTypeError(NodeError):
    """Raised when a lookup that must succeed names an unregistered type."""

    def __init__(self, node_type: str):
        self.node_type = node_type
        super().__init__(f"Unknown node type: {node_type}", "unknown_node_type")


class NodeValidationError(NodeError):
    """Raised when data is rejected by a node's input or output contract."""

    def __init__(self, node_type: str, direction: str, errors: list[dict[str, Any]]):
        self.node_type = node_type
        self.direction = direction
        self.errors = errors
        details = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ())) or '<root>'}: {err.get('msg', 'invalid')}"
            for err in errors
        )
        super().__init__(
            f"Invalid {direction} for node type {node_type}: {details}",
            "validation_failed",
        )


class ServiceUnavailableError(NodeError):
    """Raised when a node needs a service the execution context does not supply."""

    def __init__(self, service_name: str):
        self.service_name = service_name
        super().__init__(f"Service not available in execution context: {service_name}", "service_unavailable")


class NodeCancelledError(NodeError):
    """Raised when a cancellable wait observes its cancellation token."""

    def __init__(self, message: str = "Execution cancelled"):
        super().__init__(message, "cancelled")
