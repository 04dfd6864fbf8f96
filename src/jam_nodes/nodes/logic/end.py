"""End node: terminal marker for a workflow branch."""

from __future__ import annotations

from typing import Optional

from ...core.context import NodeExecutionContext
from ...core.types import NodeExecutionResult, NodeModel, define_node


class EndInput(NodeModel):
    message: Optional[str] = None


class EndOutput(NodeModel):
    completed: bool
    message: Optional[str] = None


async def execute_end(node_input: EndInput, context: NodeExecutionContext) -> NodeExecutionResult:
    return NodeExecutionResult.ok(EndOutput(completed=True, message=node_input.message))


end_node = define_node(
    type="end",
    name="End",
    description="Mark the end of a workflow branch",
    category="logic",
    input_schema=EndInput,
    output_schema=EndOutput,
    executor=execute_end,
    estimated_duration=0,
)
