"""
Bot tools for glif-mcp.

A bot is a persona with a set of skills, each skill being a workflow.

- list_bots: Browse bots
- load_bot: Show one bot and its skills
- show_bot_info: Alias of load_bot
- save_bot_skills_as_tools: Save every skill of a bot as a saved tool

Disabled unless BOT_TOOLS is set.
"""

from typing import Literal

from pydantic import Field

from glifmcp.api import call_upstream
from glifmcp.media.encoder import ContentBlock
from glifmcp.naming import ensure_tool_name
from glifmcp.schema import Bot, SavedBinding
from glifmcp.tools.base import Tool, ToolArgs, ToolContext, text_content
from glifmcp.tools.formatting import format_bot


class ListBotsArgs(ToolArgs):
    sort: Literal["new", "popular", "featured"] | None = Field(
        default=None,
        description="Sort order for the bot list",
    )
    query: str | None = Field(default=None, description="Optional search query")


class BotIdArgs(ToolArgs):
    id: str = Field(..., description="The ID of the bot")


class SaveBotSkillsArgs(ToolArgs):
    id: str = Field(..., description="The ID of the bot whose skills to save")
    prefix: str = Field(
        default="",
        description="Optional prefix to add to tool names (e.g., 'tshirt_')",
    )


async def save_bot_skills(
    context: ToolContext,
    bot: Bot,
    prefix: str = "",
    kind: str = "bot",
) -> list[tuple[str, str]]:
    """
    Save each skill of a bot as a saved tool named after the skill.

    Names that collide with a built-in tool get a _skill suffix.

    Returns:
        (skill name, saved tool name) pairs in skill order
    """
    saved: list[tuple[str, str]] = []
    for skill in bot.skills:
        if not skill.workflow_id:
            continue
        skill_name = skill.workflow_name or "Unknown Skill"
        tool_name = ensure_tool_name(f"{prefix}{skill_name.lower()}", skill.workflow_id)
        if tool_name in context.reserved_names:
            tool_name = ensure_tool_name(f"{tool_name}_skill", skill.workflow_id)

        binding = await context.store.save(
            SavedBinding(
                source_id=skill.workflow_id,
                tool_name=tool_name,
                display_name=skill.custom_name or skill_name,
                description=skill.custom_description or f"Skill from {bot.name} {kind}",
            )
        )
        saved.append((skill_name, binding.tool_name))
    return saved


class ListBotsTool(Tool):
    args_model = ListBotsArgs

    @property
    def name(self) -> str:
        return "list_bots"

    @property
    def description(self) -> str:
        return "Get a list of bots and sim templates"

    async def execute(self, args: ListBotsArgs, context: ToolContext) -> list[ContentBlock]:
        api = context.require_api()
        bots = await call_upstream("list_bots", api.list_bots(sort=args.sort, query=args.query))
        if not bots:
            return text_content("No bots found.")
        formatted = "\n\n".join(format_bot(bot) for bot in bots)
        return text_content(f"Available bots:\n\n{formatted}")


class LoadBotTool(Tool):
    args_model = BotIdArgs

    @property
    def name(self) -> str:
        return "load_bot"

    @property
    def description(self) -> str:
        return "Get detailed information about a specific bot, including its skills"

    async def execute(self, args: BotIdArgs, context: ToolContext) -> list[ContentBlock]:
        api = context.require_api()
        bot = await call_upstream("load_bot", api.load_bot(args.id))
        return text_content(format_bot(bot))


class ShowBotInfoTool(LoadBotTool):
    @property
    def name(self) -> str:
        return "show_bot_info"

    @property
    def description(self) -> str:
        return "Get detailed information about a specific bot (alias for load_bot)"


class SaveBotSkillsTool(Tool):
    """Save each of a bot's skills as its own tool, named after the skill."""

    args_model = SaveBotSkillsArgs

    @property
    def name(self) -> str:
        return "save_bot_skills_as_tools"

    @property
    def description(self) -> str:
        return "Save all skills from a bot as individual tools"

    async def execute(self, args: SaveBotSkillsArgs, context: ToolContext) -> list[ContentBlock]:
        api = context.require_api()
        bot = await call_upstream("load_bot", api.load_bot(args.id))

        skills = [skill for skill in bot.skills if skill.workflow_id]
        if not skills:
            return text_content(f'Bot "{bot.name}" has no skills to save.')

        saved = await save_bot_skills(context, bot, prefix=args.prefix, kind="bot")
        formatted = "\n".join(f'- {name} → Tool: "{tool}"' for name, tool in saved)
        return text_content(
            f'Successfully saved {len(saved)} skills from bot "{bot.name}" as tools:\n\n'
            f"{formatted}\n\nYou can now use these tools directly."
        )
