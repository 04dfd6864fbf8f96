"""HTTP request node: call an external API and hand back the response."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Literal, Optional

import httpx
from pydantic import AnyHttpUrl, Field

from ...core.context import NodeExecutionContext, run_cancellable
from ...core.errors import NodeCancelledError
from ...core.types import NodeCapabilities, NodeExecutionResult, NodeModel, define_node

logger = logging.getLogger(__name__)

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

MIN_TIMEOUT_MS = 1_000
MAX_TIMEOUT_MS = 60_000
DEFAULT_TIMEOUT_MS = 30_000


class HttpRequestInput(NodeModel):
    """Request settings.

    Example::

        {
            "url": "https://api.example.com/submit",
            "method": "POST",
            "headers": {"Authorization": "Bearer {{apiKey}}"},
            "body": {"name": "{{userName}}"},
        }
    """

    url: AnyHttpUrl
    method: HttpMethod = "GET"
    headers: Optional[dict[str, str]] = None
    body: Optional[Any] = None
    timeout: int = Field(DEFAULT_TIMEOUT_MS, ge=MIN_TIMEOUT_MS, le=MAX_TIMEOUT_MS)


class HttpRequestOutput(NodeModel):
    status: int
    status_text: str
    headers: dict[str, str]
    body: Optional[Any] = None
    ok: bool
    duration_ms: int


def _parse_body(response: httpx.Response) -> Any:
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        return response.json()
    return response.text


async def _send(client: httpx.AsyncClient, node_input: HttpRequestInput) -> httpx.Response:
    return await client.request(
        node_input.method,
        str(node_input.url),
        headers=node_input.headers,
        json=node_input.body,
        timeout=node_input.timeout / 1000,
    )


async def execute_http_request(node_input: HttpRequestInput, context: NodeExecutionContext) -> NodeExecutionResult:
    timeout_s = node_input.timeout / 1000
    start = time.monotonic()

    shared_client = context.services.http
    client = shared_client or httpx.AsyncClient()
    try:
        response = await run_cancellable(
            asyncio.wait_for(_send(client, node_input), timeout=timeout_s),
            context.cancellation,
        )
        body = _parse_body(response)
    except (asyncio.TimeoutError, httpx.TimeoutException):
        logger.warning("%s %s timed out after %sms", node_input.method, node_input.url, node_input.timeout)
        return NodeExecutionResult.fail(f"Request timed out after {node_input.timeout}ms")
    except NodeCancelledError as exc:
        return NodeExecutionResult.fail(f"Request cancelled: {exc}")
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("%s %s failed: %s", node_input.method, node_input.url, exc)
        return NodeExecutionResult.fail(f"Request failed: {exc}" if str(exc) else "Request failed")
    finally:
        if shared_client is None:
            await client.aclose()

    return NodeExecutionResult.ok(
        HttpRequestOutput(
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=dict(response.headers),
            body=body,
            ok=response.is_success,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
    )


http_request_node = define_node(
    type="http_request",
    name="HTTP Request",
    description="Make an HTTP request to an external API",
    category="integration",
    input_schema=HttpRequestInput,
    output_schema=HttpRequestOutput,
    executor=execute_http_request,
    estimated_duration=5,
    capabilities=NodeCapabilities(supports_rerun=True, supports_cancel=True),
)
