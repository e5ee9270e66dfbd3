"""Default tool groups shipped with glif-mcp."""

from glifmcp.schema import Settings
from glifmcp.tools.agents import ListAgentsTool, LoadAgentTool
from glifmcp.tools.bots import ListBotsTool, LoadBotTool, SaveBotSkillsTool, ShowBotInfoTool
from glifmcp.tools.discovery import (
    ListFeaturedWorkflowsTool,
    MyUserInfoTool,
    MyWorkflowsTool,
    SearchWorkflowsTool,
)
from glifmcp.tools.registry import ToolGroup, ToolGroupRegistry, always_on
from glifmcp.tools.saved import (
    ListSavedToolsTool,
    RemoveAllSavedToolsTool,
    RemoveSavedToolTool,
    SaveWorkflowAsToolTool,
)
from glifmcp.tools.workflow import RunWorkflowTool, WorkflowInfoTool


def discovery_enabled(settings: Settings) -> bool:
    return settings.discovery_enabled


def metaskill_enabled(settings: Settings) -> bool:
    return settings.metaskill_enabled


def bot_tools_enabled(settings: Settings) -> bool:
    return settings.bot_tools_enabled


def agent_tools_enabled(settings: Settings) -> bool:
    return settings.agent_tools_enabled


def build_default_registry() -> ToolGroupRegistry:
    """
    Create the registry with every built-in group.

    Groups are declared core first; the listing follows this order.
    """
    return ToolGroupRegistry(
        [
            ToolGroup.of("core", always_on, [RunWorkflowTool(), WorkflowInfoTool()]),
            ToolGroup.of(
                "discovery",
                discovery_enabled,
                [
                    ListFeaturedWorkflowsTool(),
                    SearchWorkflowsTool(),
                    MyWorkflowsTool(),
                    MyUserInfoTool(),
                ],
            ),
            ToolGroup.of(
                "metaskill",
                metaskill_enabled,
                [
                    SaveWorkflowAsToolTool(),
                    RemoveSavedToolTool(),
                    RemoveAllSavedToolsTool(),
                    ListSavedToolsTool(),
                ],
            ),
            ToolGroup.of(
                "bots",
                bot_tools_enabled,
                [ListBotsTool(), LoadBotTool(), ShowBotInfoTool(), SaveBotSkillsTool()],
            ),
            ToolGroup.of("agents", agent_tools_enabled, [ListAgentsTool(), LoadAgentTool()]),
        ]
    )
