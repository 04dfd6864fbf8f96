"""Conditional branching node."""

from __future__ import annotations

import logging
from collections.abc import Set
from typing import Any, Literal, Optional

from ...core.context import MISSING, NodeExecutionContext
from ...core.types import NodeCapabilities, NodeExecutionResult, NodeModel, define_node

logger = logging.getLogger(__name__)

ConditionType = Literal["equals", "not_equals", "greater_than", "less_than", "contains", "exists"]


class Condition(NodeModel):
    type: ConditionType
    variable_name: str
    value: Optional[Any] = None

    @property
    def operand(self) -> Any:
        """The comparison value, or MISSING when the condition leaves it out."""
        return self.value if "value" in self.model_fields_set else MISSING


class ConditionalInput(NodeModel):
    condition: Condition
    true_node_id: str
    false_node_id: str


class ConditionalOutput(NodeModel):
    condition_met: bool
    selected_branch: Literal["true", "false"]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _strict_equals(actual: Any, expected: Any) -> bool:
    # bools never equal numbers, and a missing value only equals itself
    if actual is MISSING or expected is MISSING:
        return actual is expected
    if isinstance(actual, bool) != isinstance(expected, bool):
        return False
    if _is_number(actual) != _is_number(expected):
        return False
    return actual == expected


def evaluate_condition(condition_type: ConditionType, actual: Any, expected: Any) -> bool:
    """Compare a resolved variable against the condition operand. Never raises on type mismatch."""
    if condition_type == "equals":
        return _strict_equals(actual, expected)

    if condition_type == "not_equals":
        return not _strict_equals(actual, expected)

    if condition_type == "greater_than":
        return _is_number(actual) and _is_number(expected) and actual > expected

    if condition_type == "less_than":
        return _is_number(actual) and _is_number(expected) and actual < expected

    if condition_type == "contains":
        if isinstance(actual, str) and isinstance(expected, str):
            return expected in actual
        if isinstance(actual, (list, tuple, Set)):
            return any(_strict_equals(item, expected) for item in actual)
        return False

    if condition_type == "exists":
        return actual is not None and actual is not MISSING

    return False


async def execute_conditional(node_input: ConditionalInput, context: NodeExecutionContext) -> NodeExecutionResult:
    condition = node_input.condition
    try:
        actual = context.resolve_nested_path(condition.variable_name)
        condition_met = evaluate_condition(condition.type, actual, condition.operand)
    except Exception as exc:
        logger.warning("Condition on %s could not be evaluated: %s", condition.variable_name, exc)
        return NodeExecutionResult.fail(str(exc) or "Failed to evaluate condition")

    return NodeExecutionResult.ok(
        ConditionalOutput(
            condition_met=condition_met,
            selected_branch="true" if condition_met else "false",
        ),
        next_node_id=node_input.true_node_id if condition_met else node_input.false_node_id,
    )


conditional_node = define_node(
    type="conditional",
    name="Conditional",
    description="Branch workflow based on a condition",
    category="logic",
    input_schema=ConditionalInput,
    output_schema=ConditionalOutput,
    executor=execute_conditional,
    estimated_duration=0,
    capabilities=NodeCapabilities(supports_rerun=True),
)
