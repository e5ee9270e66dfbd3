"""
Saved tool management ("metaskill") tools for glif-mcp.

- save_glif_as_tool: Bind a tool name to a workflow id
- remove_glif_tool: Delete one saved tool
- remove_all_glif_tools: Delete every saved tool
- list_saved_glif_tools: Show saved tools

Saved tools show up in the next listing as tools taking an inputs array.
Enabled unless IGNORE_METASKILL_TOOLS is set.
"""

from pydantic import Field

from glifmcp.api import call_upstream
from glifmcp.errors import ToolInvalidArgsError
from glifmcp.media.encoder import ContentBlock
from glifmcp.naming import ensure_tool_name
from glifmcp.schema import SavedBinding
from glifmcp.tools.base import NoArgs, Tool, ToolArgs, ToolContext, text_content
from glifmcp.tools.formatting import format_saved_binding


class SaveWorkflowArgs(ToolArgs):
    id: str = Field(..., description="The ID of the workflow (glif) to save")
    toolName: str = Field(..., description="The name to use for the tool (must be unique)")
    name: str | None = Field(
        default=None,
        description="Optional custom name for the tool (defaults to workflow name)",
    )
    description: str | None = Field(
        default=None,
        description="Optional custom description (defaults to workflow description)",
    )


class RemoveSavedToolArgs(ToolArgs):
    toolName: str = Field(..., description="The tool name of the saved workflow to remove")


class SaveWorkflowAsToolTool(Tool):
    """
    Save a workflow as a named tool.

    The requested name is sanitized into the tool name grammar. Names owned
    by built-in tools are refused so a saved tool can't shadow them.
    """

    args_model = SaveWorkflowArgs

    @property
    def name(self) -> str:
        return "save_glif_as_tool"

    @property
    def description(self) -> str:
        return (
            "Save a workflow (glif) as a custom tool for quick access. "
            "The workflow becomes callable by its tool name."
        )

    async def execute(self, args: SaveWorkflowArgs, context: ToolContext) -> list[ContentBlock]:
        tool_name = ensure_tool_name(args.toolName, args.id)
        if tool_name in context.reserved_names:
            raise ToolInvalidArgsError(
                tool=self.name,
                validation_error=f"toolName {tool_name!r} is reserved by a built-in tool",
            )

        display_name = args.name
        description = args.description
        if not display_name or description is None:
            api = context.require_api()
            details = await call_upstream("get_details", api.get_details(args.id))
            display_name = display_name or details.workflow.name
            description = description if description is not None else details.workflow.description

        binding = await context.store.save(
            SavedBinding(
                source_id=args.id,
                tool_name=tool_name,
                display_name=display_name or tool_name,
                description=description or "",
            )
        )
        return text_content(
            f'Successfully saved workflow "{binding.display_name}" as tool "{binding.tool_name}"'
        )


class RemoveSavedToolTool(Tool):
    args_model = RemoveSavedToolArgs

    @property
    def name(self) -> str:
        return "remove_glif_tool"

    @property
    def description(self) -> str:
        return (
            "Remove a saved workflow tool by its tool name. "
            "Use list_saved_glif_tools to see available tools."
        )

    async def execute(self, args: RemoveSavedToolArgs, context: ToolContext) -> list[ContentBlock]:
        removed = await context.store.remove(args.toolName)
        if removed:
            return text_content(f'Successfully removed tool "{args.toolName}"')
        return text_content(f'Tool "{args.toolName}" not found')


class RemoveAllSavedToolsTool(Tool):
    @property
    def name(self) -> str:
        return "remove_all_glif_tools"

    @property
    def description(self) -> str:
        return "Remove all saved glif tools and return to a pristine state"

    async def execute(self, args: NoArgs, context: ToolContext) -> list[ContentBlock]:
        count = await context.store.remove_all()
        return text_content(f"Successfully removed all {count} saved glif tools.")


class ListSavedToolsTool(Tool):
    @property
    def name(self) -> str:
        return "list_saved_glif_tools"

    @property
    def description(self) -> str:
        return "List all saved glif tools"

    async def execute(self, args: NoArgs, context: ToolContext) -> list[ContentBlock]:
        bindings = await context.store.get_all()
        if not bindings:
            return text_content("No saved glif tools found.")
        formatted = "\n".join(format_saved_binding(b) for b in bindings)
        return text_content(f"Saved glif tools:\n\n{formatted}")
