import asyncio
import json
import sys
import time
import unittest
from pathlib import Path

import httpx

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from jam_nodes.core.context import CancellationToken, create_execution_context
from jam_nodes.core.errors import NodeValidationError
from jam_nodes.core.services import NodeServices
from jam_nodes.nodes.integration import http_request_node


class HttpRequestNodeTests(unittest.IsolatedAsyncioTestCase):
    async def asyncTearDown(self) -> None:
        client = getattr(self, "client", None)
        if client is not None:
            await client.aclose()

    def _context(self, handler, cancellation=None):
        self.client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return create_execution_context().to_node_context(
            "user-1",
            "exec-1",
            services=NodeServices(http=self.client),
            cancellation=cancellation,
        )

    async def _run(self, settings, handler, cancellation=None):
        node_input = http_request_node.validate_input(settings)
        return await http_request_node.execute(node_input, self._context(handler, cancellation))

    async def test_error_status_is_a_successful_exchange(self):
        def handler(request):
            return httpx.Response(404, json={"error": "not found"})

        result = await self._run({"url": "https://api.example.com/missing"}, handler)

        self.assertTrue(result.success)
        self.assertFalse(result.output.ok)
        self.assertEqual(result.output.status, 404)
        self.assertEqual(result.output.status_text, "Not Found")
        self.assertEqual(result.output.body, {"error": "not found"})
        self.assertIn("application/json", result.output.headers["content-type"])

    async def test_text_body_and_plain_headers(self):
        def handler(request):
            return httpx.Response(200, text="pong", headers={"X-Trace": "abc"})

        result = await self._run({"url": "https://api.example.com/ping"}, handler)

        self.assertTrue(result.success)
        self.assertTrue(result.output.ok)
        self.assertEqual(result.output.body, "pong")
        self.assertEqual(result.output.headers["x-trace"], "abc")
        self.assertIsInstance(result.output.headers, dict)
        self.assertGreaterEqual(result.output.duration_ms, 0)

    async def test_sends_method_headers_and_json_body(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["auth"] = request.headers.get("authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"id": 42})

        result = await self._run(
            {
                "url": "https://api.example.com/submit",
                "method": "POST",
                "headers": {"Authorization": "Bearer token"},
                "body": {"name": "Ada"},
            },
            handler,
        )

        self.assertTrue(result.success)
        self.assertEqual(seen, {"method": "POST", "auth": "Bearer token", "body": {"name": "Ada"}})
        self.assertEqual(result.output.body, {"id": 42})

    async def test_get_without_body_sends_no_content(self):
        seen = {}

        def handler(request):
            seen["content"] = request.content
            return httpx.Response(200, json=[])

        result = await self._run({"url": "https://api.example.com/items"}, handler)
        self.assertTrue(result.success)
        self.assertEqual(seen["content"], b"")
        self.assertEqual(result.output.body, [])

    async def test_timeout_is_reported_with_its_duration(self):
        async def handler(request):
            await asyncio.sleep(5)
            return httpx.Response(200)

        result = await self._run({"url": "https://slow.example.com", "timeout": 1000}, handler)

        self.assertFalse(result.success)
        self.assertIsNone(result.output)
        self.assertEqual(result.error, "Request timed out after 1000ms")

    async def test_connection_errors_differ_from_timeouts(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        result = await self._run({"url": "https://down.example.com"}, handler)

        self.assertFalse(result.success)
        self.assertIn("Connection refused", result.error)
        self.assertNotIn("timed out", result.error)

    async def test_invalid_json_body_is_a_failure(self):
        def handler(request):
            return httpx.Response(200, content=b"{not json", headers={"Content-Type": "application/json"})

        result = await self._run({"url": "https://api.example.com/broken"}, handler)
        self.assertFalse(result.success)
        self.assertTrue(result.error.startswith("Request failed"))

    async def test_cancellation_aborts_in_flight_request(self):
        token = CancellationToken()

        async def handler(request):
            await asyncio.sleep(5)
            return httpx.Response(200)

        asyncio.get_running_loop().call_later(0.05, token.cancel, "run aborted")
        result = await self._run({"url": "https://slow.example.com", "timeout": 10_000}, handler, token)

        self.assertFalse(result.success)
        self.assertIn("Request cancelled", result.error)
        self.assertNotIn("timed out", result.error)

    def test_input_defaults_and_bounds(self):
        node_input = http_request_node.validate_input({"url": "https://api.example.com"})
        self.assertEqual(node_input.method, "GET")
        self.assertEqual(node_input.timeout, 30_000)

        for bad in (
            {"url": "https://api.example.com", "timeout": 999},
            {"url": "https://api.example.com", "timeout": 60_001},
            {"url": "not a url"},
            {"url": "https://api.example.com", "method": "TRACE"},
        ):
            with self.assertRaises(NodeValidationError):
                http_request_node.validate_input(bad)


class LocalServerTests(unittest.IsolatedAsyncioTestCase):
    """Requests against a real socket, so httpx's own timeouts apply."""

    async def asyncSetUp(self) -> None:
        self.delay = 0.0
        self.release = asyncio.Event()

        async def handle(reader, writer):
            await reader.readuntil(b"\r\n\r\n")
            try:
                await asyncio.wait_for(self.release.wait(), timeout=self.delay)
            except asyncio.TimeoutError:
                pass
            body = b'{"done": true}'
            try:
                writer.write(
                    b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n"
                    + f"Content-Length: {len(body)}\r\nConnection: close\r\n\r\n".encode()
                    + body
                )
                await writer.drain()
            except ConnectionError:
                pass
            finally:
                writer.close()

        self.server = await asyncio.start_server(handle, "127.0.0.1", 0)
        port = self.server.sockets[0].getsockname()[1]
        self.url = f"http://127.0.0.1:{port}/slow"

    async def asyncTearDown(self) -> None:
        self.release.set()
        self.server.close()
        await self.server.wait_closed()

    async def _run(self, settings, services=None):
        node_input = http_request_node.validate_input(settings)
        context = create_execution_context().to_node_context("user-1", "exec-1", services=services)
        return await http_request_node.execute(node_input, context)

    async def test_node_timeout_overrides_client_default(self):
        self.delay = 5.5
        start = time.monotonic()
        async with httpx.AsyncClient() as client:
            result = await self._run({"url": self.url, "timeout": 10_000}, NodeServices(http=client))

        self.assertTrue(result.success, result.error)
        self.assertEqual(result.output.body, {"done": True})
        self.assertGreaterEqual(time.monotonic() - start, 5.0)

    async def test_aborts_at_configured_timeout(self):
        self.delay = 3.0
        start = time.monotonic()
        result = await self._run({"url": self.url, "timeout": 1000})
        elapsed = time.monotonic() - start

        self.assertFalse(result.success)
        self.assertEqual(result.error, "Request timed out after 1000ms")
        self.assertGreaterEqual(elapsed, 0.9)
        self.assertLess(elapsed, 2.5)


if __name__ == "__main__":
    unittest.main()
