"""
Discovery tools for glif-mcp.

- list_featured_glifs: Featured workflows
- search_glifs: Workflows matching a query
- my_glifs: Workflows owned by the token's user
- my_glif_user_info: The token's user profile

Enabled unless IGNORE_DISCOVERY_TOOLS is set.
"""

from pydantic import Field

from glifmcp.api import call_upstream
from glifmcp.media.encoder import ContentBlock
from glifmcp.tools.base import NoArgs, Tool, ToolArgs, ToolContext, text_content
from glifmcp.tools.formatting import format_user, format_workflow_list


class SearchArgs(ToolArgs):
    query: str = Field(..., description="Search query string")


class ListFeaturedWorkflowsTool(Tool):
    @property
    def name(self) -> str:
        return "list_featured_glifs"

    @property
    def description(self) -> str:
        return "Get a curated list of featured glifs"

    async def execute(self, args: NoArgs, context: ToolContext) -> list[ContentBlock]:
        api = context.require_api()
        workflows = await call_upstream("search", api.search(featured=True))
        return text_content(f"Featured glifs:\n\n{format_workflow_list(workflows)}")


class SearchWorkflowsTool(Tool):
    args_model = SearchArgs

    @property
    def name(self) -> str:
        return "search_glifs"

    @property
    def description(self) -> str:
        return "Search for glifs by query string"

    async def execute(self, args: SearchArgs, context: ToolContext) -> list[ContentBlock]:
        api = context.require_api()
        workflows = await call_upstream("search", api.search(query=args.query))
        return text_content(f'Search results for "{args.query}":\n\n{format_workflow_list(workflows)}')


class MyWorkflowsTool(Tool):
    @property
    def name(self) -> str:
        return "my_glifs"

    @property
    def description(self) -> str:
        return "Get a list of your glifs"

    async def execute(self, args: NoArgs, context: ToolContext) -> list[ContentBlock]:
        api = context.require_api()
        workflows = await call_upstream("get_my_workflows", api.get_my_workflows())
        return text_content(f"Your glifs:\n\n{format_workflow_list(workflows)}")


class MyUserInfoTool(Tool):
    @property
    def name(self) -> str:
        return "my_glif_user_info"

    @property
    def description(self) -> str:
        return "Get detailed information about your user account"

    async def execute(self, args: NoArgs, context: ToolContext) -> list[ContentBlock]:
        api = context.require_api()
        user = await call_upstream("get_me", api.get_me())
        return text_content(format_user(user))
