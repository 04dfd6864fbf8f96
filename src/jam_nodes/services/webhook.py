"""Notification delivery over an HTTP webhook."""

from __future__ import annotations

import logging

import httpx

from ..core.errors import NodeError
from ..core.services import Notification

logger = logging.getLogger(__name__)


class WebhookNotificationService:
    """POSTs each notification as JSON to a fixed URL.

    The caller owns ``http_client`` and closes it.
    """

    def __init__(self, url: str, http_client: httpx.AsyncClient, headers: dict[str, str] | None = None) -> None:
        self.url = url
        self.http = http_client
        self._headers = {"Content-Type": "application/json", **(headers or {})}

    async def send(self, notification: Notification) -> None:
        try:
            resp = await self.http.post(
                self.url,
                headers=self._headers,
                content=notification.model_dump_json(),
            )
        except httpx.HTTPError as exc:
            raise NodeError(f"Notification webhook unreachable: {exc}", "notification_failed") from exc

        if resp.is_error:
            raise NodeError(
                f"Notification webhook returned {resp.status_code}",
                "notification_failed",
            )
        logger.debug("Delivered notification %r to %s", notification.title, self.url)
