"""API models for the node catalog service."""

from pydantic import BaseModel, Field

from .workflow.schema import Workflow


class RunWorkflowRequest(BaseModel):
    """Request to run a workflow graph once."""

    workflow: Workflow = Field(..., description="The graph to run")
    approved: list[str] = Field(
        [],
        description="Node ids whose approval gate has already been granted",
    )
    campaign_id: str | None = Field(None, description="Optional campaign the run belongs to")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str = "jam-nodes"
    node_types: int = 0
