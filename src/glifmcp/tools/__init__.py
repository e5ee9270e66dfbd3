"""
Tools module for glif-mcp.

Built-in groups:
    - core: run_glif, glif_info (always on)
    - discovery: list_featured_glifs, search_glifs, my_glifs, my_glif_user_info
    - metaskill: save_glif_as_tool, remove_glif_tool, remove_all_glif_tools,
      list_saved_glif_tools
    - bots: list_bots, load_bot, show_bot_info, save_bot_skills_as_tools
    - agents: list_agents, load_agent

Architecture:
    - Tool: Abstract base class defining the tool interface
    - ToolGroupRegistry: Ordered groups with settings-driven activation
    - RegistryComposer: Per-request namespace of groups, saved tools and
      configured ids
"""

from glifmcp.tools.base import Tool, ToolArgs, ToolContext, ToolResult, text_content
from glifmcp.tools.catalog import build_default_registry
from glifmcp.tools.composer import RegistryComposer
from glifmcp.tools.registry import ToolGroup, ToolGroupRegistry, always_on

__all__ = [
    "RegistryComposer",
    "Tool",
    "ToolArgs",
    "ToolContext",
    "ToolGroup",
    "ToolGroupRegistry",
    "ToolResult",
    "always_on",
    "build_default_registry",
    "text_content",
]
