"""Delay node: pause the current branch for a fixed duration."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional

from pydantic import Field

from ...core.context import NodeExecutionContext, run_cancellable
from ...core.errors import NodeCancelledError
from ...core.types import NodeCapabilities, NodeExecutionResult, NodeModel, define_node

logger = logging.getLogger(__name__)

MAX_DELAY_MS = 3_600_000  # one hour


class DelayInput(NodeModel):
    duration_ms: int = Field(..., ge=0, le=MAX_DELAY_MS)
    message: Optional[str] = None


class DelayOutput(NodeModel):
    waited: bool
    actual_duration_ms: int
    message: Optional[str] = None


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


async def execute_delay(node_input: DelayInput, context: NodeExecutionContext) -> NodeExecutionResult:
    if node_input.message:
        logger.info("Delay %sms: %s", node_input.duration_ms, node_input.message)

    start = time.monotonic()
    try:
        await run_cancellable(asyncio.sleep(node_input.duration_ms / 1000), context.cancellation)
    except NodeCancelledError as exc:
        elapsed = _elapsed_ms(start)
        return NodeExecutionResult.fail(
            f"Delay cancelled after {elapsed}ms of {node_input.duration_ms}ms: {exc}"
        )

    return NodeExecutionResult.ok(
        DelayOutput(
            waited=True,
            actual_duration_ms=_elapsed_ms(start),
            message=node_input.message,
        )
    )


delay_node = define_node(
    type="delay",
    name="Delay",
    description="Wait for a specified duration before continuing",
    category="logic",
    input_schema=DelayInput,
    output_schema=DelayOutput,
    executor=execute_delay,
    capabilities=NodeCapabilities(supports_cancel=True),
)
