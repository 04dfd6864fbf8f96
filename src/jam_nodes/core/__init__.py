from .config import (
    BaseNodeConfig,
    NodeApprovalConfig,
    NodeApprovalRequest,
    NodeNotificationConfig,
)
from .context import (
    MISSING,
    CancellationToken,
    ExecutionContext,
    NodeExecutionContext,
    create_execution_context,
    prepare_node_input,
    run_cancellable,
)
from .errors import (
    NodeCancelledError,
    NodeError,
    NodeRegistrationError,
    NodeValidationError,
    ServiceUnavailableError,
    UnknownNodeTypeError,
)
from .registry import NodeRegistry, create_registry
from .services import NodeServices
from .types import (
    NodeCapabilities,
    NodeCategory,
    NodeDefinition,
    NodeExecutionResult,
    NodeExecutor,
    NodeMetadata,
    NodeModel,
    define_node,
)

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
    "create_execution_context",
    "create_registry",
    "define_node",
    "prepare_node_input",
    "run_cancellable",
]
