"""Pydantic models describing a runnable workflow graph."""

from typing import Any, Optional

from pydantic import BaseModel, model_validator

from ..core.config import NodeApprovalConfig, NodeNotificationConfig


class WorkflowNode(BaseModel):
    """One node placement in a workflow graph."""

    id: str
    type: str  # registry key, e.g. "conditional" | "http_request"
    name: Optional[str] = None
    settings: dict[str, Any] = {}
    next: Optional[str] = None  # default successor when the result has no next_node_id
    approval: Optional[NodeApprovalConfig] = None
    notification: Optional[NodeNotificationConfig] = None


class Workflow(BaseModel):
    """A graph of nodes walked one node at a time from ``start``."""

    id: str
    name: str
    description: str = ""
    start: Optional[str] = None
    nodes: list[WorkflowNode]
    parameters: dict[str, Any] = {}
    version: int = 1

    @model_validator(mode="after")
    def _check_graph(self) -> "Workflow":
        if not self.nodes:
            raise ValueError("workflow must contain at least one node")
        ids = [node.id for node in self.nodes]
        duplicates = sorted({nid for nid in ids if ids.count(nid) > 1})
        if duplicates:
            raise ValueError(f"duplicate node ids: {', '.join(duplicates)}")
        if self.start is not None and self.start not in ids:
            raise ValueError(f"start node {self.start!r} is not in the workflow")
        return self

    def node_map(self) -> dict[str, WorkflowNode]:
        return {node.id: node for node in self.nodes}

    def start_node_id(self) -> str:
        return self.start or self.nodes[0].id
