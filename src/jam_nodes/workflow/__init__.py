from .report import ExecutionReport, TraceStep
from .runner import WorkflowRunner
from .schema import Workflow, WorkflowNode

__all__ = ["ExecutionReport", "TraceStep", "Workflow", "WorkflowNode", "WorkflowRunner"]
