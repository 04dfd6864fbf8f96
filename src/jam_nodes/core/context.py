"""Run variables, path resolution, interpolation and the per-node context.

``ExecutionContext`` is owned by whoever walks the workflow graph: it stores
every node output produced so far. Executors never see it directly; they get a
``NodeExecutionContext`` built by ``ExecutionContext.to_node_context``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, TypeVar

from jsonpath_ng import parse as jsonpath_parse
from jsonpath_ng.exceptions import JsonPathLexerError, JsonPathParserError

from .errors import NodeCancelledError
from .services import NodeServices

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Missing:
    """Marker for a value that is not present in the run variables."""

    _instance: Optional[_Missing] = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

_INDEXED_SEGMENT = re.compile(r"^(\w+)\[(\d+)\]$")
_TEMPLATE_REF = re.compile(r"\{\{([^}]+)\}\}")
_SINGLE_REF = re.compile(r"^\{\{([^}]+)\}\}$")


def resolve_path(root: Any, path: str) -> Any:
    """Walk ``path`` (``a.b``, ``items[0].name``, ``contacts.length``) from ``root``.

    Returns ``MISSING`` as soon as a segment cannot be followed.
    """
    current = root
    for part in path.split("."):
        if current is None or current is MISSING:
            return MISSING

        indexed = _INDEXED_SEGMENT.match(part)
        if indexed:
            key, index = indexed.group(1), int(indexed.group(2))
            current = _child(current, key)
            if isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
                current = current[index] if index < len(current) else MISSING
            else:
                return MISSING
            continue

        current = _child(current, part)

    return current


def _child(current: Any, part: str) -> Any:
    if isinstance(current, Mapping):
        return current[part] if part in current else MISSING
    if isinstance(current, Sequence) and not isinstance(current, bytes):
        if part == "length":
            return len(current)
        if part.isdigit() and not isinstance(current, str):
            index = int(part)
            return current[index] if index < len(current) else MISSING
    return MISSING


def format_value(value: Any) -> str:
    """Render a variable for string interpolation."""
    if value is None or value is MISSING:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(format_value(v) for v in value)
    if isinstance(value, Mapping):
        return json.dumps(value, separators=(",", ":"), default=str)
    return str(value)


class CancellationToken:
    """One-shot cancellation signal shared between an orchestrator and its nodes."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: Optional[str] = None) -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


async def run_cancellable(work: Awaitable[T], token: Optional[CancellationToken]) -> T:
    """Await ``work`` unless ``token`` fires first, in which case raise NodeCancelledError."""
    if token is None:
        return await work
    if token.cancelled:
        if asyncio.iscoroutine(work):
            work.close()
        raise NodeCancelledError(token.reason or "Execution cancelled")

    work_task = asyncio.ensure_future(work)
    cancel_task = asyncio.ensure_future(token.wait())
    try:
        done, _ = await asyncio.wait({work_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work_task.cancel()
        raise
    finally:
        cancel_task.cancel()

    if work_task in done:
        return work_task.result()

    work_task.cancel()
    try:
        await work_task
    except asyncio.CancelledError:
        pass
    raise NodeCancelledError(token.reason or "Execution cancelled")


@dataclass
class NodeExecutionContext:
    """Everything an executor may observe about the current run."""

    user_id: str
    workflow_execution_id: str
    resolve_nested_path: Callable[[str], Any]
    variables: dict[str, Any] = field(default_factory=dict)
    campaign_id: Optional[str] = None
    node_id: Optional[str] = None
    services: NodeServices = field(default_factory=NodeServices)
    cancellation: Optional[CancellationToken] = None

    @property
    def cancelled(self) -> bool:
        return self.cancellation is not None and self.cancellation.cancelled


class ExecutionContext:
    """Variable store for one workflow run."""

    def __init__(self, initial_variables: Optional[Mapping[str, Any]] = None):
        self._variables: dict[str, Any] = dict(initial_variables or {})

    def set_variable(self, name: str, value: Any) -> None:
        self._variables[name] = value

    def get_variable(self, name: str) -> Any:
        return self._variables.get(name, MISSING)

    def get_all_variables(self) -> dict[str, Any]:
        return dict(self._variables)

    def has_variable(self, name: str) -> bool:
        return name in self._variables

    def delete_variable(self, name: str) -> None:
        self._variables.pop(name, None)

    def clear_all(self) -> None:
        self._variables = {}

    def merge_variables(self, values: Mapping[str, Any]) -> None:
        self._variables.update(values)

    def resolve_nested_path(self, path: str) -> Any:
        """Resolve a dot path against the variables; ``MISSING`` if any segment is absent."""
        return resolve_path(self._variables, path)

    def evaluate_json_path(self, expression: str) -> Any:
        """Evaluate a JSONPath expression such as ``$.contacts[0].email``.

        A single match is unwrapped, several matches come back as a list and no
        match (or an unparseable expression) yields ``MISSING``.
        """
        try:
            compiled = jsonpath_parse(expression)
        except (JsonPathParserError, JsonPathLexerError) as exc:
            logger.debug("Invalid JSONPath %r: %s", expression, exc)
            return MISSING

        matches = compiled.find(self._variables)
        if not matches:
            return MISSING
        if len(matches) == 1:
            return matches[0].value
        return [match.value for match in matches]

    def interpolate(self, template: Any) -> Any:
        """Substitute ``{{...}}`` references in ``template``.

        A template that is exactly one reference returns the referenced value
        itself (list, dict, number...); otherwise every reference is rendered
        into the string.
        """
        if not isinstance(template, str):
            return template

        single = _SINGLE_REF.match(template)
        if single:
            value = self._lookup(single.group(1).strip())
            return None if value is MISSING else value

        return _TEMPLATE_REF.sub(lambda m: format_value(self._lookup(m.group(1).strip())), template)

    def interpolate_object(self, obj: T) -> T:
        """Interpolate every string inside nested dicts and lists."""
        if isinstance(obj, str):
            return self.interpolate(obj)
        if isinstance(obj, list):
            return [self.interpolate_object(item) for item in obj]  # type: ignore[return-value]
        if isinstance(obj, tuple):
            return tuple(self.interpolate_object(item) for item in obj)  # type: ignore[return-value]
        if isinstance(obj, Mapping):
            return {key: self.interpolate_object(value) for key, value in obj.items()}  # type: ignore[return-value]
        return obj

    def _lookup(self, expression: str) -> Any:
        if expression.startswith("$"):
            return self.evaluate_json_path(expression)
        return self.resolve_nested_path(expression)

    def store_node_output(self, node_id: str, output: Any) -> None:
        """Record a node's output under its id and lift mapping keys to the root.

        A node ``search`` returning ``{"contacts": [...]}`` makes both
        ``search.contacts`` and ``contacts`` resolvable.
        """
        self.set_variable(node_id, output)
        if isinstance(output, Mapping):
            for key, value in output.items():
                self.set_variable(key, value)

    def get_node_output(self, node_id: str) -> Any:
        return self.get_variable(node_id)

    def to_node_context(
        self,
        user_id: str,
        workflow_execution_id: str,
        campaign_id: Optional[str] = None,
        *,
        node_id: Optional[str] = None,
        services: Optional[NodeServices] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> NodeExecutionContext:
        return NodeExecutionContext(
            user_id=user_id,
            workflow_execution_id=workflow_execution_id,
            campaign_id=campaign_id,
            node_id=node_id,
            variables=self.get_all_variables(),
            resolve_nested_path=self.resolve_nested_path,
            services=services or NodeServices(),
            cancellation=cancellation,
        )

    def to_json(self) -> dict[str, Any]:
        return self.get_all_variables()

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> ExecutionContext:
        return cls(data)


def create_execution_context(initial: Optional[Mapping[str, Any]] = None) -> ExecutionContext:
    """Start a run's variable store from the workflow's seed inputs."""
    return ExecutionContext(initial or {})


def prepare_node_input(node_settings: Mapping[str, Any], context: ExecutionContext) -> dict[str, Any]:
    """Interpolate run variables into a node's raw settings before validation."""
    return context.interpolate_object(dict(node_settings))
