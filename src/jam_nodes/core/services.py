"""Capability interfaces for the external services a node may use.

Concrete clients (LLM vendors, people search, social listening, SEO) live
outside this package; anything matching these protocols can be handed to a
run through ``NodeServices``.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Any, Optional, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel, Field

from .config import NotificationChannel, NotificationPriority
from .errors import ServiceUnavailableError


class Contact(BaseModel):
    """A person returned by a people/company search."""

    id: str
    name: str
    first_name: Optional[str] = None
    title: Optional[str] = None
    company: Optional[str] = None
    company_size: Optional[int] = None
    industry: Optional[str] = None
    department: Optional[str] = None
    email: Optional[str] = None
    linkedin_url: Optional[str] = None


class SocialPost(BaseModel):
    """A post found by a social listening client."""

    id: str
    platform: str  # "twitter" | "linkedin" | "reddit" ...
    url: str
    text: str
    author_name: Optional[str] = None
    author_handle: Optional[str] = None
    likes: int = 0
    comments: int = 0
    posted_at: Optional[datetime] = None


class SeoKeyword(BaseModel):
    keyword: str
    search_volume: Optional[int] = None
    difficulty: Optional[float] = None
    cpc: Optional[float] = None


class SeoAuditResult(BaseModel):
    url: str
    score: Optional[float] = None
    issues: list[dict[str, Any]] = []


class EmailDraft(BaseModel):
    """An outbound email waiting for review."""

    id: Optional[str] = None
    to_email: str
    to_name: Optional[str] = None
    subject: str
    body: str
    contact_id: Optional[str] = None
    campaign_id: Optional[str] = None
    status: str = "draft"


class Notification(BaseModel):
    """A message sent on a node's completion or failure."""

    user_id: str
    title: str
    message: str
    channels: list[NotificationChannel] = []
    priority: NotificationPriority = "medium"
    data: dict[str, Any] = {}
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


@runtime_checkable
class LLMClient(Protocol):
    async def generate(
        self,
        prompt: str,
        *,
        system: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ) -> str: ...


@runtime_checkable
class PeopleSearchClient(Protocol):
    async def search_people(self, filters: dict[str, Any], limit: int = 25) -> list[Contact]: ...

    async def search_company(self, name_or_domain: str) -> Optional[dict[str, Any]]: ...


@runtime_checkable
class SocialPostClient(Protocol):
    async def search_posts(self, query: str, *, limit: int = 20) -> list[SocialPost]: ...


@runtime_checkable
class SeoClient(Protocol):
    async def audit_site(self, url: str) -> SeoAuditResult: ...

    async def keyword_ideas(self, seed: str, *, limit: int = 50) -> list[SeoKeyword]: ...


@runtime_checkable
class NotificationService(Protocol):
    async def send(self, notification: Notification) -> None: ...


@runtime_checkable
class StorageService(Protocol):
    async def get(self, key: str) -> Any: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def delete(self, key: str) -> bool: ...


@runtime_checkable
class CacheService(Protocol):
    async def get(self, key: str) -> Any: ...

    async def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None: ...

    async def delete(self, key: str) -> bool: ...


@runtime_checkable
class EmailDraftsService(Protocol):
    async def create_draft(self, user_id: str, draft: EmailDraft) -> str: ...

    async def list_drafts(self, user_id: str, campaign_id: Optional[str] = None) -> list[EmailDraft]: ...


@dataclass
class NodeServices:
    """Optional service handles supplied to a run. Any of them may be absent."""

    llm: Optional[LLMClient] = None
    people_search: Optional[PeopleSearchClient] = None
    social_posts: Optional[SocialPostClient] = None
    seo: Optional[SeoClient] = None
    notifications: Optional[NotificationService] = None
    storage: Optional[StorageService] = None
    cache: Optional[CacheService] = None
    email_drafts: Optional[EmailDraftsService] = None
    http: Optional[httpx.AsyncClient] = None

    def require(self, name: str) -> Any:
        """Return the named service or raise ServiceUnavailableError."""
        if name not in self.available_names():
            raise ServiceUnavailableError(name)
        return getattr(self, name)

    def available_names(self) -> list[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]
