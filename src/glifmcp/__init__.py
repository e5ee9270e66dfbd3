"""
glif-mcp - MCP server exposing glif workflows as tools.

It provides:
- A dynamic tool namespace merging built-in groups, saved tools and
  configured workflow ids
- A persisted, human-editable store of saved tools
- Safe encoding of workflow media outputs into MCP content blocks

Example usage:
    $ glifmcp list-tools
    $ glifmcp import-ids "abc123,def456"
"""

__version__ = "0.1.0"
__author__ = "glif-mcp Contributors"

__all__ = [
    "__version__",
    "__author__",
]
