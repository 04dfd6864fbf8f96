"""Sequential workflow runner built on the node registry."""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Iterable
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from ..config import get_settings
from ..core.config import NodeApprovalRequest
from ..core.context import CancellationToken, ExecutionContext, create_execution_context, prepare_node_input
from ..core.errors import NodeValidationError, UnknownNodeTypeError
from ..core.registry import NodeRegistry
from ..core.services import NodeServices, Notification
from .report import ExecutionReport, FailureKind, TraceStep
from .schema import Workflow, WorkflowNode

logger = logging.getLogger(__name__)


class _StepFailure(Exception):
    def __init__(self, kind: FailureKind, message: str):
        self.kind = kind
        super().__init__(message)


class WorkflowRunner:
    """Walks a workflow one node at a time, following each result's branch target.

    For every node: approval gate, variable interpolation, input validation,
    execution, output validation, output storage, notification. A node's output
    is stored before the next node starts.
    """

    def __init__(
        self,
        registry: NodeRegistry,
        services: Optional[NodeServices] = None,
        *,
        max_steps: Optional[int] = None,
        user_id: Optional[str] = None,
    ):
        settings = get_settings()
        self.registry = registry
        self.services = services or NodeServices()
        self.max_steps = max_steps if max_steps is not None else settings.max_workflow_steps
        self.user_id = user_id or settings.default_user_id

    async def run(
        self,
        workflow: Workflow,
        *,
        approved: Iterable[str] = (),
        cancellation: Optional[CancellationToken] = None,
        execution_id: Optional[str] = None,
        campaign_id: Optional[str] = None,
    ) -> ExecutionReport:
        """Run ``workflow`` until a node has no successor, a node fails, or a gate pauses it.

        ``approved`` lists node ids whose approval gate has already been granted.
        """
        execution_id = execution_id or f"run-{uuid.uuid4().hex[:12]}"
        approved_ids = set(approved)
        report = ExecutionReport(
            workflow_id=workflow.id,
            workflow_name=workflow.name,
            execution_id=execution_id,
        )
        context = create_execution_context(workflow.parameters)
        node_map = workflow.node_map()
        node_id: Optional[str] = workflow.start_node_id()
        logger.info("Starting workflow %s (%s)", workflow.id, execution_id)

        while node_id is not None:
            if cancellation is not None and cancellation.cancelled:
                report.status = "cancelled"
                report.error = cancellation.reason or "Execution cancelled"
                break

            node = node_map.get(node_id)
            if node is None:
                report.status = "failed"
                report.error = f"Unknown node id: {node_id}"
                break

            if len(report.steps) >= self.max_steps:
                report.status = "failed"
                report.error = f"Step limit of {self.max_steps} reached at node {node_id}"
                break

            if node.approval is not None and node.approval.is_active and node.id not in approved_ids:
                request = NodeApprovalRequest.from_config(node.id, node.type, node.approval)
                report.pending_approvals.append(request)
                if node.approval.pause_workflow:
                    logger.info("Workflow %s paused for approval at %s", workflow.id, node.id)
                    report.status = "paused"
                    break

            step = await self._run_node(node, context, execution_id, campaign_id, cancellation)
            report.steps.append(step)
            await self._notify(node, step, context, execution_id)

            if step.status == "failed":
                cancelled = cancellation is not None and cancellation.cancelled
                report.status = "cancelled" if cancelled else "failed"
                report.error = step.error
                break

            node_id = step.next_node_id or node.next

        if report.status == "running":
            report.status = "completed"
        report.variables = context.to_json()
        report.completed_at = datetime.now()
        logger.info("Workflow %s finished with status %s", workflow.id, report.status)
        return report

    async def _run_node(
        self,
        node: WorkflowNode,
        context: ExecutionContext,
        execution_id: str,
        campaign_id: Optional[str],
        cancellation: Optional[CancellationToken],
    ) -> TraceStep:
        start = time.monotonic()
        raw_input = prepare_node_input(node.settings, context)
        try:
            output, next_node_id = await self._execute(node, raw_input, context, execution_id, campaign_id, cancellation)
        except _StepFailure as failure:
            if failure.kind != "exception":
                logger.warning("Node %s failed (%s): %s", node.id, failure.kind, failure)
            return TraceStep(
                node_id=node.id,
                node_type=node.type,
                status="failed",
                failure_kind=failure.kind,
                input=raw_input,
                error=str(failure),
                duration_ms=int((time.monotonic() - start) * 1000),
            )

        context.store_node_output(node.id, output)
        return TraceStep(
            node_id=node.id,
            node_type=node.type,
            status="success",
            input=raw_input,
            output=output,
            next_node_id=next_node_id,
            duration_ms=int((time.monotonic() - start) * 1000),
        )

    async def _execute(
        self,
        node: WorkflowNode,
        raw_input: dict[str, Any],
        context: ExecutionContext,
        execution_id: str,
        campaign_id: Optional[str],
        cancellation: Optional[CancellationToken],
    ) -> tuple[dict[str, Any], Optional[str]]:
        try:
            node_input = self.registry.validate_input(node.type, raw_input)
        except UnknownNodeTypeError as exc:
            raise _StepFailure("unknown_node_type", str(exc)) from exc
        except NodeValidationError as exc:
            raise _StepFailure("validation_failed", str(exc)) from exc

        definition = self.registry.get_definition(node.type)
        node_context = context.to_node_context(
            self.user_id,
            execution_id,
            campaign_id,
            node_id=node.id,
            services=self.services,
            cancellation=cancellation,
        )
        try:
            result = await definition.execute(node_input, node_context)
        except Exception as exc:
            logger.exception("Unhandled error in %s executor for node %s", node.type, node.id)
            raise _StepFailure("exception", f"{type(exc).__name__}: {exc}") from exc

        if not result.success:
            kind: FailureKind = "cancelled" if cancellation is not None and cancellation.cancelled else "executor_failed"
            raise _StepFailure(kind, result.error or "Node failed")

        try:
            output = definition.validate_output(result.output)
        except NodeValidationError as exc:
            raise _StepFailure("validation_failed", str(exc)) from exc

        if isinstance(output, BaseModel):
            output = output.model_dump(by_alias=True)
        return output, result.next_node_id

    async def _notify(
        self,
        node: WorkflowNode,
        step: TraceStep,
        context: ExecutionContext,
        execution_id: str,
    ) -> None:
        config = node.notification
        success = step.status == "success"
        if config is None or not config.should_notify(success):
            return

        service = self.services.notifications
        if service is None:
            logger.warning("Node %s asks for notifications but no notification service is configured", node.id)
            return

        label = node.name or node.type
        if config.message:
            rendered = context.interpolate(config.message)
            message = "" if rendered is None else str(rendered)
        elif success:
            message = f"{label} completed"
        else:
            message = f"{label} failed: {step.error}"

        notification = Notification(
            user_id=self.user_id,
            title=f"{label} {'completed' if success else 'failed'}",
            message=message,
            channels=config.channels,
            priority=config.priority,
            data={
                "workflowExecutionId": execution_id,
                "nodeId": node.id,
                "status": step.status,
            },
        )
        try:
            await service.send(notification)
        except Exception as exc:
            logger.warning("Notification for node %s was not delivered: %s", node.id, exc)
