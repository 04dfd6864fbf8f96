"""Execution trace and report models with markdown rendering."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from ..core.config import NodeApprovalRequest

RunStatus = Literal["running", "completed", "failed", "paused", "cancelled"]

# How a node invocation failed; None on success
FailureKind = Literal[
    "unknown_node_type",
    "validation_failed",
    "executor_failed",
    "exception",
    "cancelled",
]


class TraceStep(BaseModel):
    """A single node invocation recorded during a run."""

    node_id: str
    node_type: str
    status: Literal["success", "failed"]
    failure_kind: Optional[FailureKind] = None
    input: Optional[dict[str, Any]] = None
    output: Optional[dict[str, Any]] = None
    error: Optional[str] = None
    next_node_id: Optional[str] = None
    duration_ms: int = 0
    timestamp: datetime = Field(default_factory=datetime.now)


class ExecutionReport(BaseModel):
    """Summary of one workflow run."""

    workflow_id: str
    workflow_name: str
    execution_id: str
    status: RunStatus = "running"
    steps: list[TraceStep] = []
    pending_approvals: list[NodeApprovalRequest] = []
    variables: dict[str, Any] = {}
    error: Optional[str] = None
    started_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    @property
    def successful(self) -> int:
        return sum(1 for step in self.steps if step.status == "success")

    @property
    def failed(self) -> int:
        return sum(1 for step in self.steps if step.status == "failed")

    @property
    def path(self) -> list[str]:
        """Node ids in the order they ran."""
        return [step.node_id for step in self.steps]

    def to_markdown(self) -> str:
        lines = [
            f"# Execution Report: {self.workflow_name}",
            "",
            f"**Workflow ID:** `{self.workflow_id}`",
            f"**Execution ID:** `{self.execution_id}`",
            f"**Status:** {self.status}",
            f"**Steps run:** {len(self.steps)}",
            f"**Successful:** {self.successful}",
            f"**Failed:** {self.failed}",
            "",
        ]

        if self.error:
            lines.append(f"**Error:** {self.error}")
            lines.append("")

        if self.pending_approvals:
            lines.append("## Pending Approvals")
            for req in self.pending_approvals:
                detail = f" - {req.message}" if req.message else ""
                lines.append(f"- `{req.node_id}` ({req.node_type}){detail}")
            lines.append("")

        lines.append("## Execution Trace")
        lines.append("")
        lines.append("| # | Node | Type | Status | Next | Detail |")
        lines.append("|---|------|------|--------|------|--------|")

        for i, step in enumerate(self.steps, 1):
            detail = ""
            if step.status == "success" and step.output:
                detail = ", ".join(f"{k}={v}" for k, v in step.output.items())
            elif step.error:
                detail = f"[{step.failure_kind}] {step.error}"

            status_icon = {"success": "OK", "failed": "FAIL"}.get(step.status, step.status)
            lines.append(
                f"| {i} | `{step.node_id}` | {step.node_type} | {status_icon} | {step.next_node_id or ''} | {detail} |"
            )

        lines.append("")
        if self.started_at and self.completed_at:
            duration = (self.completed_at - self.started_at).total_seconds()
            lines.append(f"**Duration:** {duration:.2f}s")

        return "\n".join(lines)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")
