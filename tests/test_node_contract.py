import sys
import unittest
from pathlib import Path

from pydantic import ValidationError

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from jam_nodes.core.config import (
    BaseNodeConfig,
    NodeApprovalConfig,
    NodeApprovalRequest,
    NodeNotificationConfig,
)
from jam_nodes.core.types import NodeCapabilities, NodeExecutionResult, NodeModel, define_node


class _In(NodeModel):
    campaign_name: str


class _Out(NodeModel):
    draft_count: int


async def _noop(node_input, context):
    return NodeExecutionResult.ok(_Out(draft_count=0))


class ExecutionResultTests(unittest.TestCase):
    def test_success_carries_output_only(self):
        result = NodeExecutionResult.ok({"a": 1}, next_node_id="next")
        self.assertTrue(result.success)
        self.assertIsNone(result.error)
        self.assertEqual(result.next_node_id, "next")

    def test_failure_carries_error_only(self):
        result = NodeExecutionResult.fail("nope")
        self.assertFalse(result.success)
        self.assertIsNone(result.output)
        self.assertEqual(result.error, "nope")

    def test_inconsistent_outcomes_are_rejected(self):
        with self.assertRaises(ValidationError):
            NodeExecutionResult(success=True)
        with self.assertRaises(ValidationError):
            NodeExecutionResult(success=True, output={}, error="both")
        with self.assertRaises(ValidationError):
            NodeExecutionResult(success=False)
        with self.assertRaises(ValidationError):
            NodeExecutionResult(success=False, output={}, error="both")

    def test_accepts_camel_case_fields(self):
        result = NodeExecutionResult.model_validate({"success": True, "output": 1, "nextNodeId": "b"})
        self.assertEqual(result.next_node_id, "b")


class DefineNodeTests(unittest.TestCase):
    def test_builds_uniform_definition(self):
        node = define_node(
            type="draft_emails",
            name="Draft Emails",
            description="Draft outreach emails",
            category="action",
            input_schema=_In,
            output_schema=_Out,
            executor=_noop,
            estimated_duration=30,
            capabilities=NodeCapabilities(supports_rerun=True),
        )
        parsed = node.validate_input({"campaignName": "Spring"})
        self.assertIsInstance(parsed, _In)
        self.assertEqual(parsed.campaign_name, "Spring")

        meta = node.metadata()
        self.assertEqual(meta.type, "draft_emails")
        self.assertEqual(meta.estimated_duration, 30)
        self.assertTrue(meta.capabilities.supports_rerun)
        self.assertFalse(meta.capabilities.supports_cancel)

    def test_schemas_must_be_models(self):
        with self.assertRaises(TypeError):
            define_node(
                type="bad",
                name="Bad",
                description="",
                category="action",
                input_schema=dict,
                output_schema=_Out,
                executor=_noop,
            )

    def test_to_variables_uses_camel_case(self):
        self.assertEqual(_Out(draft_count=3).to_variables(), {"draftCount": 3})


class ApprovalConfigTests(unittest.TestCase):
    def test_defaults(self):
        config = NodeApprovalConfig()
        self.assertFalse(config.required)
        self.assertFalse(config.is_active)
        self.assertTrue(config.pause_workflow)
        self.assertEqual(config.timeout_minutes, 1440)

    def test_camel_case_payload(self):
        config = NodeApprovalConfig.model_validate(
            {"required": True, "pauseWorkflow": False, "timeoutMinutes": 30, "approvalType": "legal"}
        )
        self.assertTrue(config.is_active)
        self.assertFalse(config.pause_workflow)
        self.assertEqual(config.approval_type, "legal")

    def test_timeout_must_be_positive(self):
        with self.assertRaises(ValidationError):
            NodeApprovalConfig(timeout_minutes=0)

    def test_request_expiry(self):
        config = NodeApprovalConfig(required=True, timeout_minutes=90, message="Sign off")
        request = NodeApprovalRequest.from_config("n1", "end", config)
        self.assertEqual(request.node_id, "n1")
        self.assertEqual(request.message, "Sign off")
        self.assertEqual((request.expires_at - request.requested_at).total_seconds(), 90 * 60)


class NotificationConfigTests(unittest.TestCase):
    def test_disabled_never_notifies(self):
        config = NodeNotificationConfig(notify_on_complete=True, notify_on_error=True)
        self.assertFalse(config.should_notify(True))
        self.assertFalse(config.should_notify(False))

    def test_enabled_follows_outcome_flags(self):
        config = NodeNotificationConfig.model_validate({"enabled": True, "notifyOnComplete": False})
        self.assertFalse(config.should_notify(True))
        self.assertTrue(config.should_notify(False))
        self.assertEqual(config.priority, "medium")

    def test_rejects_unknown_channel(self):
        with self.assertRaises(ValidationError):
            NodeNotificationConfig(enabled=True, channels=["pager"])

    def test_base_config_is_optional(self):
        config = BaseNodeConfig.model_validate({"notification": {"enabled": True, "channels": ["email"]}})
        self.assertIsNone(config.approval)
        self.assertEqual(config.notification.channels, ["email"])


if __name__ == "__main__":
    unittest.main()
