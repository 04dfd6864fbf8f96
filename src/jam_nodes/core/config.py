"""Approval and notification settings that any node in a workflow can carry."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

NotificationChannel = Literal["chat", "email", "slack", "webhook"]
NotificationPriority = Literal["low", "medium", "high"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NodeApprovalConfig(_CamelModel):
    """Human-in-the-loop gate. Every field except ``required`` is ignored when it is False."""

    required: bool = False
    pause_workflow: bool = True
    timeout_minutes: int = Field(1440, gt=0)
    approval_type: Optional[str] = None
    message: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.required


class NodeNotificationConfig(_CamelModel):
    """Completion/error signalling. Every field except ``enabled`` is ignored when it is False."""

    enabled: bool = False
    channels: list[NotificationChannel] = []
    message: Optional[str] = None
    priority: NotificationPriority = "medium"
    notify_on_complete: bool = True
    notify_on_error: bool = True

    def should_notify(self, success: bool) -> bool:
        if not self.enabled:
            return False
        return self.notify_on_complete if success else self.notify_on_error


class BaseNodeConfig(_CamelModel):
    """Cross-cutting config block accepted by every node."""

    approval: Optional[NodeApprovalConfig] = None
    notification: Optional[NodeNotificationConfig] = None


class NodeApprovalRequest(_CamelModel):
    """A pending approval recorded by the runner when a gate fires."""

    node_id: str
    node_type: str
    approval_type: Optional[str] = None
    message: Optional[str] = None
    pause_workflow: bool = True
    requested_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    expires_at: datetime

    @classmethod
    def from_config(cls, node_id: str, node_type: str, config: NodeApprovalConfig) -> NodeApprovalRequest:
        now = datetime.now(timezone.utc)
        return cls(
            node_id=node_id,
            node_type=node_type,
            approval_type=config.approval_type,
            message=config.message,
            pause_workflow=config.pause_workflow,
            requested_at=now,
            expires_at=now + timedelta(minutes=config.timeout_minutes),
        )
