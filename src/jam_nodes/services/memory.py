"""In-memory service backends for local runs and tests."""

from __future__ import annotations

import asyncio
import time
import uuid
from typing import Any, Optional

from ..core.services import EmailDraft, Notification


class InMemoryStorage:
    """Key/value storage kept in a dict for the lifetime of the process."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    async def get(self, key: str) -> Any:
        return self._data.get(key)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None


class InMemoryCache:
    """Dict-backed cache with optional per-entry TTL."""

    def __init__(self, default_ttl_seconds: Optional[float] = None) -> None:
        self.default_ttl_seconds = default_ttl_seconds
        # key -> (value, expires_at or None)
        self._entries: dict[str, tuple[Any, Optional[float]]] = {}

    async def get(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and time.monotonic() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl_seconds
        expires_at = time.monotonic() + ttl if ttl is not None else None
        self._entries[key] = (value, expires_at)

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None


class InMemoryEmailDrafts:
    """Email drafts grouped by user."""

    def __init__(self) -> None:
        self._drafts: dict[str, list[EmailDraft]] = {}

    async def create_draft(self, user_id: str, draft: EmailDraft) -> str:
        draft_id = draft.id or f"draft-{uuid.uuid4().hex[:8]}"
        self._drafts.setdefault(user_id, []).append(draft.model_copy(update={"id": draft_id}))
        return draft_id

    async def list_drafts(self, user_id: str, campaign_id: Optional[str] = None) -> list[EmailDraft]:
        drafts = self._drafts.get(user_id, [])
        if campaign_id is None:
            return list(drafts)
        return [d for d in drafts if d.campaign_id == campaign_id]


class RecordingNotificationService:
    """Keeps every notification it is asked to send."""

    def __init__(self) -> None:
        self.sent: list[Notification] = []
        self._lock = asyncio.Lock()

    async def send(self, notification: Notification) -> None:
        async with self._lock:
            self.sent.append(notification)
