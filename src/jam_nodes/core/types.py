"""Node contract: definitions, metadata, capabilities and execution results."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Generic, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from .errors import NodeValidationError

if TYPE_CHECKING:
    from .context import NodeExecutionContext

NodeCategory = Literal["logic", "integration", "action", "transform"]


class NodeModel(BaseModel):
    """Base for node input/output models.

    Fields are snake_case in Python and camelCase on the wire; both spellings
    are accepted on validation.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_variables(self) -> dict[str, Any]:
        """Dump in the camelCase shape stored in run variables."""
        return self.model_dump(by_alias=True)


class NodeCapabilities(BaseModel):
    """Optional behaviours a node advertises. Not enforced by the registry."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    supports_rerun: bool = False
    supports_cancel: bool = False


class NodeMetadata(BaseModel):
    """Client-safe view of a node definition. Holds no executable code."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    type: str
    name: str
    description: str
    category: NodeCategory
    estimated_duration: Optional[float] = None
    capabilities: Optional[NodeCapabilities] = None


class NodeExecutionResult(BaseModel):
    """Outcome of one executor call.

    ``output`` is set iff ``success``; ``error`` is set iff not. ``next_node_id``
    overrides the graph's default successor when present.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    output: Any = None
    error: Optional[str] = None
    next_node_id: Optional[str] = None

    @model_validator(mode="after")
    def _check_outcome(self) -> NodeExecutionResult:
        if self.success:
            if self.output is None:
                raise ValueError("successful result must carry an output")
            if self.error is not None:
                raise ValueError("successful result must not carry an error")
        else:
            if not self.error:
                raise ValueError("failed result must carry an error message")
            if self.output is not None:
                raise ValueError("failed result must not carry an output")
        return self

    @classmethod
    def ok(cls, output: Any, next_node_id: Optional[str] = None) -> NodeExecutionResult:
        return cls(success=True, output=output, next_node_id=next_node_id)

    @classmethod
    def fail(cls, error: str) -> NodeExecutionResult:
        return cls(success=False, error=error)


InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)

NodeExecutor = Callable[[Any, "NodeExecutionContext"], Awaitable[NodeExecutionResult]]


@dataclass(frozen=True)
class NodeDefinition(Generic[InputT, OutputT]):
    """A registered, executable unit of work.

    Each node module is typed against its own input/output models; the registry
    only relies on the uniform ``validate_input`` / ``validate_output`` /
    ``execute`` surface below.
    """

    type: str
    name: str
    description: str
    category: NodeCategory
    input_schema: Type[InputT]
    output_schema: Type[OutputT]
    executor: Callable[[InputT, NodeExecutionContext], Awaitable[NodeExecutionResult]]
    estimated_duration: Optional[float] = None
    capabilities: Optional[NodeCapabilities] = None

    def validate_input(self, raw: Any) -> InputT:
        return self._validate(self.input_schema, raw, "input")

    def validate_output(self, raw: Any) -> OutputT:
        return self._validate(self.output_schema, raw, "output")

    async def execute(self, node_input: InputT, context: NodeExecutionContext) -> NodeExecutionResult:
        return await self.executor(node_input, context)

    def metadata(self) -> NodeMetadata:
        return NodeMetadata(
            type=self.type,
            name=self.name,
            description=self.description,
            category=self.category,
            estimated_duration=self.estimated_duration,
            capabilities=self.capabilities,
        )

    def _validate(self, schema: Type[BaseModel], raw: Any, direction: str) -> Any:
        if isinstance(raw, schema):
            return raw
        if isinstance(raw, BaseModel):
            raw = raw.model_dump(by_alias=True)
        try:
            return schema.model_validate(raw)
        except ValidationError as exc:
            raise NodeValidationError(self.type, direction, exc.errors(include_url=False)) from exc


def define_node(
    *,
    type: str,
    name: str,
    description: str,
    category: NodeCategory,
    input_schema: Type[InputT],
    output_schema: Type[OutputT],
    executor: Callable[[InputT, NodeExecutionContext], Awaitable[NodeExecutionResult]],
    estimated_duration: Optional[float] = None,
    capabilities: Optional[NodeCapabilities] = None,
) -> NodeDefinition[InputT, OutputT]:
    """Build a node definition with its input/output models checked up front.

    Example::

        class GreetInput(NodeModel):
            name: str

        class GreetOutput(NodeModel):
            greeting: str

        async def greet(node_input: GreetInput, context) -> NodeExecutionResult:
            return NodeExecutionResult.ok(GreetOutput(greeting=f"Hello {node_input.name}"))

        greet_node = define_node(
            type="greet",
            name="Greet",
            description="Say hello",
            category="action",
            input_schema=GreetInput,
            output_schema=GreetOutput,
            executor=greet,
        )
    """
    for label, schema in (("input_schema", input_schema), ("output_schema", output_schema)):
        if not (inspect.isclass(schema) and issubclass(schema, BaseModel)):
            raise TypeError(f"{label} for node {type!r} must be a pydantic model class")

    return NodeDefinition(
        type=type,
        name=name,
        description=description,
        category=category,
        input_schema=input_schema,
        output_schema=output_schema,
        executor=executor,
        estimated_duration=estimated_duration,
        capabilities=capabilities,
    )
