"""Bundled implementations of the node service interfaces."""

from .memory import InMemoryCache, InMemoryEmailDrafts, InMemoryStorage, RecordingNotificationService
from .webhook import WebhookNotificationService

__all__ = [
    "InMemoryCache",
    "InMemoryEmailDrafts",
    "InMemoryStorage",
    "RecordingNotificationService",
    "WebhookNotificationService",
]
