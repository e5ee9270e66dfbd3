"""
Agent tools for glif-mcp.

Agents are bots presented as personas to adopt:

- list_agents: Browse agents, optionally by creator or search text
- load_agent: Show an agent's personality and save its skills as tools

Disabled unless AGENT_TOOLS is set.
"""

from typing import Literal

from pydantic import Field

from glifmcp.api import call_upstream
from glifmcp.media.encoder import ContentBlock
from glifmcp.schema import Bot
from glifmcp.tools.base import Tool, ToolArgs, ToolContext, text_content
from glifmcp.tools.bots import save_bot_skills


class ListAgentsArgs(ToolArgs):
    sort: Literal["new", "popular", "featured"] | None = Field(
        default=None,
        description="Optional sort order for agents (defaults to featured)",
    )
    username: str | None = Field(
        default=None,
        description="Optional filter for agents by creator username",
    )
    searchQuery: str | None = Field(
        default=None,
        description="Optional search query to filter agents by name or description",
    )


class AgentIdArgs(ToolArgs):
    id: str = Field(..., description="The ID of the agent to load")


def creator_of(bot: Bot) -> str:
    if bot.user is None:
        return "Unknown (@unknown)"
    return f"{bot.user.name or 'Unknown'} (@{bot.user.username or 'unknown'})"


def format_agent(bot: Bot) -> str:
    lines = [
        f"{bot.name} (@{bot.username or 'unknown'}) - ID: {bot.id}",
        f"Bio: {bot.bio or 'No bio'}",
        f"Created by: {creator_of(bot)}",
        f"Messages: {bot.message_count or 0}",
    ]
    if bot.skills:
        names = ", ".join(skill.workflow_name or "Unknown Skill" for skill in bot.skills)
        lines.append(f"Skills: {names}")
    return "\n".join(lines)


def format_agent_skills(bot: Bot) -> str:
    if not bot.skills:
        return "No skills available"
    entries = []
    for skill in bot.skills:
        title = skill.workflow_name or "Unknown Skill"
        if skill.custom_name:
            title += f" ({skill.custom_name})"
        entry = [
            f"- {title}",
            f"Description: {skill.custom_description or 'No description'}",
            f"Glif ID: {skill.workflow_id or 'unknown'}",
        ]
        if skill.usage_instructions:
            entry.append(f"Usage: {skill.usage_instructions}")
        entries.append("\n".join(entry))
    return "\n\n".join(entries)


class ListAgentsTool(Tool):
    args_model = ListAgentsArgs

    @property
    def name(self) -> str:
        return "list_agents"

    @property
    def description(self) -> str:
        return (
            "Get a list of agents (also known as bots or sim templates) with optional "
            "filtering and sorting. Supports sort={new,popular,featured} (defaults to "
            "featured), username filtering, and text search."
        )

    async def execute(self, args: ListAgentsArgs, context: ToolContext) -> list[ContentBlock]:
        api = context.require_api()
        agents = await call_upstream(
            "list_agents",
            api.list_bots(sort=args.sort, query=args.searchQuery, creator=args.username),
        )
        if not agents:
            return text_content("No agents found.")
        formatted = "\n\n".join(format_agent(agent) for agent in agents)
        return text_content(f"Available agents:\n\n{formatted}")


class LoadAgentTool(Tool):
    """
    Load an agent and save every one of its skills as a saved tool.

    The response carries the agent's personality with an instruction to
    adopt it, followed by the names the skills were saved under.
    """

    args_model = AgentIdArgs

    @property
    def name(self) -> str:
        return "load_agent"

    @property
    def description(self) -> str:
        return (
            "Load an agent (also known as a bot) and automatically save its skills as "
            "tools. Returns the agent's personality and details."
        )

    async def execute(self, args: AgentIdArgs, context: ToolContext) -> list[ContentBlock]:
        api = context.require_api()
        agent = await call_upstream("load_agent", api.load_bot(args.id))
        saved = await save_bot_skills(context, agent, kind="agent")

        if agent.personality:
            instruction = (
                f"Here is the agent info:\n\nName: {agent.name}\n"
                f"Bio: {agent.bio or 'No bio'}\n\nPersonality:\n{agent.personality}\n\n"
                "Now use this agent's personality as your new personality from now on, "
                "and I've loaded all of the agent's skills as new tools for you to use."
            )
        else:
            instruction = "I've loaded all of the agent's skills as new tools for you to use."

        lines = [
            f"Name: {agent.name} (@{agent.username or 'unknown'})",
            f"ID: {agent.id}",
            f"Bio: {agent.bio or 'No bio'}",
            f"Created by: {creator_of(agent)}",
            f"Message Count: {agent.message_count or 0}",
            "",
            "Skills:",
            format_agent_skills(agent),
            "",
            "Personality:",
            agent.personality or "No personality defined",
            "",
            instruction,
        ]
        if saved:
            lines += ["", "Loaded skills as tools:"]
            lines += [f'- {name} → Tool: "{tool}"' for name, tool in saved]
        return text_content("\n".join(lines))
