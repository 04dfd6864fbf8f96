from .conditional import (
    Condition,
    ConditionalInput,
    ConditionalOutput,
    ConditionType,
    conditional_node,
    evaluate_condition,
)
from .delay import DelayInput, DelayOutput, delay_node
from .end import EndInput, EndOutput, end_node

__all__ = [
    "Condition",
    "ConditionType",
    "ConditionalInput",
    "ConditionalOutput",
    "DelayInput",
    "DelayOutput",
    "EndInput",
    "EndOutput",
    "conditional_node",
    "delay_node",
    "end_node",
    "evaluate_condition",
]
