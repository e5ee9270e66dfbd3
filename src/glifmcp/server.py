"""
MCP server binding for glif-mcp.

Registers the composer's listing and dispatch as the tool handlers of an mcp
low-level Server, plus the glif resource templates and prompts.

Error mapping:
    - GlifMcpError leaves every handler as McpError, so the client receives a
      JSON-RPC error whose code matches the failure (unknown tool, invalid
      params, invalid request, internal)
    - Any other exception from a tool becomes a CallToolResult with isError
      set, carrying the exception message

The tools/call handler is installed directly rather than through the
call_tool() decorator, which would turn McpError into an isError result.

Transport setup (stdio, process startup) is left to the embedding program:

    server = build_server(RegistryComposer(build_default_registry(), api=client))
    async with stdio_server() as (read, write):
        await server.run(read, write, server.create_initialization_options())
"""

import logging
from collections.abc import Iterable

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from pydantic import AnyUrl

from glifmcp import __version__
from glifmcp.errors import GlifMcpError
from glifmcp.media.encoder import redact_inline_data
from glifmcp.prompts import PromptCatalog
from glifmcp.resources import JSON_MIME_TYPE, ResourceReader
from glifmcp.tools.composer import RegistryComposer

logger = logging.getLogger(__name__)

SERVER_NAME = "glif"


def build_server(composer: RegistryComposer, name: str = SERVER_NAME) -> Server:
    """
    Create an MCP server whose tools come from the composer.

    Args:
        composer: Resolves the tool namespace per request
        name: Server name announced to clients

    Returns:
        Server with tool, resource and prompt handlers registered
    """
    server: Server = Server(name, version=__version__)
    resources = ResourceReader(api=composer.api)
    prompts = PromptCatalog(composer.api, composer.media_encoder)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return await composer.list_tools()

    async def handle_call_tool(request: types.CallToolRequest) -> types.ServerResult:
        tool_name = request.params.name
        try:
            result = await composer.dispatch(tool_name, request.params.arguments)
        except GlifMcpError as e:
            logger.error("Tool %s failed: %r", tool_name, e)
            raise e.to_mcp_error() from e
        except Exception as e:
            logger.exception("Tool %s raised unexpectedly", tool_name)
            return types.ServerResult(
                types.CallToolResult(
                    content=[types.TextContent(type="text", text=f"Error running {tool_name}: {e}")],
                    isError=True,
                )
            )

        logger.debug("Tool %s returned %s", tool_name, redact_inline_data(result.content))
        return types.ServerResult(
            types.CallToolResult(
                content=result.content,
                structuredContent=result.structured,
                isError=False,
            )
        )

    server.request_handlers[types.CallToolRequest] = handle_call_tool

    @server.list_resource_templates()
    async def handle_list_resource_templates() -> list[types.ResourceTemplate]:
        return resources.templates()

    @server.read_resource()
    async def handle_read_resource(uri: AnyUrl) -> Iterable[ReadResourceContents]:
        try:
            text = await resources.read(str(uri))
        except GlifMcpError as e:
            logger.error("Reading %s failed: %r", uri, e)
            raise e.to_mcp_error() from e
        return [ReadResourceContents(content=text, mime_type=JSON_MIME_TYPE)]

    @server.list_prompts()
    async def handle_list_prompts() -> list[types.Prompt]:
        return prompts.list_prompts()

    @server.get_prompt()
    async def handle_get_prompt(name: str, arguments: dict[str, str] | None) -> types.GetPromptResult:
        try:
            return await prompts.get_prompt(name, arguments)
        except GlifMcpError as e:
            logger.error("Prompt %s failed: %r", name, e)
            raise e.to_mcp_error() from e

    return server
