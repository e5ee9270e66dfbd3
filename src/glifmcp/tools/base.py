"""
Base classes for the tool interface.

This module defines the core abstractions for glif-mcp tools:
- Tool: Abstract base class that every tool implements
- ToolArgs: Pydantic base for a tool's call arguments
- ToolContext: Per-request collaborators passed to tools
- ToolResult: Content blocks and optional structured content of one call

Design Principles:
    - Tools are stateless; everything request-scoped comes from ToolContext
    - Arguments are validated by the tool's args_model before execute()
    - The MCP input schema is generated from the same args_model
    - Tools return MCP content blocks and raise GlifMcpError subclasses
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

from mcp import types
from pydantic import BaseModel, ConfigDict, ValidationError

from glifmcp.errors import ToolInvalidArgsError, UpstreamError
from glifmcp.media.encoder import ContentBlock

if TYPE_CHECKING:
    from glifmcp.api import WorkflowApi
    from glifmcp.media.encoder import MediaEncoder
    from glifmcp.schema import Settings
    from glifmcp.store.saved import SavedToolStore


class ToolArgs(BaseModel):
    """Base for tool arguments; unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore")


class NoArgs(ToolArgs):
    """Arguments for tools that take none."""


@dataclass
class ToolContext:
    """
    Request-scoped collaborators passed to tools.

    A new context is built for every call from the same settings snapshot
    that resolved the tool.

    Attributes:
        settings: Settings snapshot for this request
        store: Saved tools store
        encoder: Media encoder for workflow outputs
        api: Workflow API client (None when running without one)
        reserved_names: Names owned by built-in tools
    """

    settings: "Settings"
    store: "SavedToolStore"
    encoder: "MediaEncoder"
    api: "WorkflowApi | None" = None
    reserved_names: frozenset[str] = field(default_factory=frozenset)

    def require_api(self) -> "WorkflowApi":
        """Return the workflow API, failing the call if none is configured."""
        if self.api is None:
            raise UpstreamError(
                operation="connect",
                underlying_error="No workflow API client configured",
            )
        return self.api


def text_content(text: str) -> list[ContentBlock]:
    """Wrap plain text as a single content block."""
    return [types.TextContent(type="text", text=text)]


@dataclass
class ToolResult:
    """
    What one tool call returns to the client.

    Attributes:
        content: Content blocks, always at least one
        structured: JSON object mirroring the content, for JSON outputs
    """

    content: list[ContentBlock]
    structured: dict[str, Any] | None = None


class Tool(ABC):
    """
    Abstract base class for all glif-mcp tools.

    Subclasses must implement:
    - name property: The tool's dispatch key
    - execute(): Performs the tool's action

    And usually set:
    - args_model: Pydantic model for the call arguments
    - description property: Shown to the client in tool listings

    Example:
        class EchoArgs(ToolArgs):
            message: str

        class EchoTool(Tool):
            args_model = EchoArgs

            @property
            def name(self) -> str:
                return "echo"

            async def execute(self, args: EchoArgs, context: ToolContext) -> list[ContentBlock]:
                return text_content(args.message)
    """

    args_model: ClassVar[type[ToolArgs]] = NoArgs

    @property
    @abstractmethod
    def name(self) -> str:
        """The unique dispatch key for this tool."""
        ...

    @property
    def description(self) -> str:
        """Human-readable description of what the tool does."""
        return f"Tool: {self.name}"

    def input_schema(self) -> dict[str, Any]:
        """JSON schema of the arguments, generated from args_model."""
        schema = self.args_model.model_json_schema()
        schema.pop("title", None)
        schema.setdefault("properties", {})
        return schema

    def definition(self) -> types.Tool:
        """The MCP tool definition for listings."""
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema(),
        )

    def parse_args(self, arguments: dict[str, Any] | None) -> ToolArgs:
        """
        Validate raw call arguments.

        Raises:
            ToolInvalidArgsError: If the arguments don't match args_model
        """
        try:
            return self.args_model.model_validate(arguments or {})
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
                for err in e.errors()
            )
            raise ToolInvalidArgsError(tool=self.name, validation_error=details) from e

    async def run(self, arguments: dict[str, Any] | None, context: ToolContext) -> ToolResult:
        """Validate arguments, then execute."""
        args = self.parse_args(arguments)
        result = await self.execute(args, context)
        if isinstance(result, ToolResult):
            return result
        return ToolResult(content=result)

    @abstractmethod
    async def execute(self, args: Any, context: ToolContext) -> list[ContentBlock] | ToolResult:
        """
        Execute the tool with validated arguments.

        Args:
            args: An instance of args_model
            context: Request-scoped collaborators

        Returns:
            Content blocks for the client, or a ToolResult when the call
            also carries structured content

        Raises:
            GlifMcpError: For failures the client should see
        """
        ...

    def __repr__(self) -> str:
        """String representation of the tool."""
        return f"<Tool: {self.name}>"
