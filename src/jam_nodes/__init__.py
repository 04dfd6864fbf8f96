"""Typed workflow nodes: registry, execution context and reference node library."""

from .core import (
    MISSING,
    BaseNodeConfig,
    CancellationToken,
    ExecutionContext,
    NodeApprovalConfig,
    NodeApprovalRequest,
    NodeCancelledError,
    NodeCapabilities,
    NodeCategory,
    NodeDefinition,
    NodeError,
    NodeExecutionContext,
    NodeExecutionResult,
    NodeExecutor,
    NodeMetadata,
    NodeModel,
    NodeNotificationConfig,
    NodeRegistrationError,
    NodeRegistry,
    NodeServices,
    NodeValidationError,
    ServiceUnavailableError,
    UnknownNodeTypeError,
    create_execution_context,
    create_registry,
    define_node,
    prepare_node_input,
    run_cancellable,
)
from .nodes import (
    builtin_nodes,
    conditional_node,
    create_default_registry,
    delay_node,
    end_node,
    http_request_node,
)

__version__ = "0.1.0"

__all__ = [
    "BaseNodeConfig",
    "CancellationToken",
    "ExecutionContext",
    "MISSING",
    "NodeApprovalConfig",
    "NodeApprovalRequest",
    "NodeCancelledError",
    "NodeCapabilities",
    "NodeCategory",
    "NodeDefinition",
    "NodeError",
    "NodeExecutionContext",
    "NodeExecutionResult",
    "NodeExecutor",
    "NodeMetadata",
    "NodeModel",
    "NodeNotificationConfig",
    "NodeRegistrationError",
    "NodeRegistry",
    "NodeServices",
    "NodeValidationError",
    "ServiceUnavailableError",
    "UnknownNodeTypeError",
    "builtin_nodes",
    "conditional_node",
    "create_default_registry",
    "create_execution_context",
    "create_registry",
    "define_node",
    "delay_node",
    "end_node",
    "http_request_node",
    "prepare_node_input",
    "run_cancellable",
]
