import asyncio
import sys
import time
import unittest
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from jam_nodes.core.context import CancellationToken, create_execution_context
from jam_nodes.core.errors import NodeValidationError
from jam_nodes.nodes.logic import delay_node, end_node


def _node_context(cancellation=None):
    return create_execution_context().to_node_context("user-1", "exec-1", cancellation=cancellation)


class DelayNodeTests(unittest.IsolatedAsyncioTestCase):
    async def test_zero_duration_succeeds_immediately(self):
        node_input = delay_node.validate_input({"durationMs": 0})
        result = await delay_node.execute(node_input, _node_context())

        self.assertTrue(result.success)
        self.assertTrue(result.output.waited)
        self.assertGreaterEqual(result.output.actual_duration_ms, 0)
        self.assertIsNone(result.output.message)
        self.assertIsNone(result.next_node_id)

    async def test_waits_at_least_requested_duration_and_echoes_message(self):
        node_input = delay_node.validate_input({"durationMs": 50, "message": "rate limit"})
        start = time.monotonic()
        result = await delay_node.execute(node_input, _node_context())

        self.assertTrue(result.success)
        self.assertGreaterEqual(result.output.actual_duration_ms, 45)
        self.assertGreaterEqual(time.monotonic() - start, 0.045)
        self.assertEqual(result.output.message, "rate limit")

    async def test_wait_does_not_block_the_event_loop(self):
        node_input = delay_node.validate_input({"durationMs": 100})
        ticks = []

        async def ticker():
            for _ in range(3):
                ticks.append(time.monotonic())
                await asyncio.sleep(0.01)

        result, _ = await asyncio.gather(delay_node.execute(node_input, _node_context()), ticker())
        self.assertTrue(result.success)
        self.assertEqual(len(ticks), 3)

    async def test_cancellation_interrupts_the_wait(self):
        token = CancellationToken()
        node_input = delay_node.validate_input({"durationMs": 10_000})
        asyncio.get_running_loop().call_later(0.05, token.cancel, "stopped by user")

        start = time.monotonic()
        result = await delay_node.execute(node_input, _node_context(token))

        self.assertLess(time.monotonic() - start, 5)
        self.assertFalse(result.success)
        self.assertIn("Delay cancelled", result.error)
        self.assertIn("stopped by user", result.error)

    def test_duration_is_bounded_to_one_hour(self):
        delay_node.validate_input({"durationMs": 3_600_000})
        with self.assertRaises(NodeValidationError):
            delay_node.validate_input({"durationMs": 3_600_001})
        with self.assertRaises(NodeValidationError):
            delay_node.validate_input({"durationMs": -1})

    def test_declares_cancel_support(self):
        self.assertTrue(delay_node.capabilities.supports_cancel)
        self.assertFalse(delay_node.capabilities.supports_rerun)


class EndNodeTests(unittest.IsolatedAsyncioTestCase):
    async def test_always_completes_without_branching(self):
        result = await end_node.execute(end_node.validate_input({"message": "done"}), _node_context())
        self.assertTrue(result.success)
        self.assertTrue(result.output.completed)
        self.assertEqual(result.output.message, "done")
        self.assertIsNone(result.next_node_id)

    async def test_message_is_optional(self):
        result = await end_node.execute(end_node.validate_input({}), _node_context())
        self.assertTrue(result.success)
        self.assertIsNone(result.output.message)

    def test_zero_estimated_duration(self):
        self.assertEqual(end_node.estimated_duration, 0)
        self.assertIsNone(end_node.capabilities)


if __name__ == "__main__":
    unittest.main()
