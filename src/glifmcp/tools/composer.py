"""
Registry composer for glif-mcp.

The composer merges three tool sources into the single namespace an MCP
client sees:

1. Built-in groups from the ToolGroupRegistry, gated by settings flags
2. Saved bindings from the persisted store
3. Workflow ids configured through GLIF_IDS, exposed as glif_<id>

Every request takes one settings snapshot and builds its table from it, so
the listing and dispatch always agree for that request and flag changes
apply without a restart.

Ordering:
    Listing:  core group, active optional groups, saved, configured ids
    Dispatch: saved, configured ids, core group, active optional groups

Saved and configured entries never take a built-in tool's name; such entries
are skipped with a warning. Between saved and configured, a name present in
both is listed once, as the saved tool that dispatch resolves.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mcp import types

from glifmcp.api import WorkflowApi
from glifmcp.errors import ToolNotFoundError
from glifmcp.media.encoder import MediaEncoder
from glifmcp.media.fetcher import SecureFetcher
from glifmcp.naming import ensure_tool_name
from glifmcp.schema import SavedBinding, Settings, SettingsProvider, env_settings_provider
from glifmcp.store.saved import IMPORTED_TOOL_PREFIX, SavedToolStore
from glifmcp.tools.base import Tool, ToolContext, ToolResult
from glifmcp.tools.registry import ToolGroup, ToolGroupRegistry
from glifmcp.tools.workflow import WorkflowBindingTool

logger = logging.getLogger(__name__)


def binding_tool(binding: SavedBinding) -> WorkflowBindingTool:
    """Build the synthetic tool for a saved binding."""
    label = binding.display_name or binding.tool_name
    description = f"{label}: {binding.description}" if binding.description else label
    return WorkflowBindingTool(binding.tool_name, binding.source_id, description)


def configured_id_tool(workflow_id: str) -> WorkflowBindingTool:
    """Build the synthetic glif_<id> tool for a configured workflow id."""
    tool_name = ensure_tool_name(f"{IMPORTED_TOOL_PREFIX}{workflow_id}", workflow_id)
    return WorkflowBindingTool(tool_name, workflow_id, f"Run glif {workflow_id}")


@dataclass
class ToolTable:
    """
    The composed namespace for one request.

    Attributes:
        settings: Settings snapshot the table was built from
        store: Store for the snapshot's saved tools path
        groups: Active groups in declaration order
        saved: Saved binding tools by name, store order (first wins)
        configured: Configured id tools by name, configuration order
    """

    settings: Settings
    store: SavedToolStore
    groups: list[ToolGroup]
    saved: dict[str, Tool] = field(default_factory=dict)
    configured: dict[str, Tool] = field(default_factory=dict)

    def resolve(self, name: str) -> Tool | None:
        """Find the tool a call to name runs, by dispatch precedence."""
        tool = self.saved.get(name) or self.configured.get(name)
        if tool is not None:
            return tool
        for group in self.groups:
            tool = group.get(name)
            if tool is not None:
                return tool
        return None

    def candidates(self) -> Iterator[Tool]:
        """Every tool in listing order, shadowed entries included."""
        for group in self.groups:
            yield from group.tools.values()
        yield from self.saved.values()
        yield from self.configured.values()

    def listing(self) -> list[Tool]:
        """Tools in listing order, one per name, each the one dispatch resolves."""
        listed: list[Tool] = []
        seen: set[str] = set()
        for tool in self.candidates():
            if tool.name in seen:
                continue
            winner = self.resolve(tool.name)
            if winner is not tool:
                logger.debug("Tool %s is shadowed by %r, not listing it", tool.name, winner)
                continue
            seen.add(tool.name)
            listed.append(tool)
        return listed


class RegistryComposer:
    """
    Merges built-in groups, saved bindings and configured ids per request.

    Usage:
        composer = RegistryComposer(build_default_registry(), api=client)
        definitions = await composer.list_tools()
        result = await composer.dispatch("run_glif", {"id": "abc", "inputs": []})

    Attributes:
        registry: Built-in tool groups
        api: Workflow API passed to tools (may be None)
    """

    def __init__(
        self,
        registry: ToolGroupRegistry,
        settings_provider: SettingsProvider = env_settings_provider,
        api: WorkflowApi | None = None,
        store: SavedToolStore | None = None,
        encoder: MediaEncoder | None = None,
    ) -> None:
        """
        Initialize the composer.

        Args:
            registry: Built-in tool groups
            settings_provider: Called once per request for a settings snapshot
            api: Workflow API client
            store: Fixed store; by default one store per configured path
            encoder: Fixed media encoder; by default built from media settings
        """
        self.registry = registry
        self.api = api
        self._settings_provider = settings_provider
        self._store = store
        self._encoder = encoder
        self._stores: dict[Path, SavedToolStore] = {}

    def store_for(self, settings: Settings) -> SavedToolStore:
        """Return the store for the settings' path, reusing it across requests."""
        if self._store is not None:
            return self._store
        path = Path(settings.saved_tools_path).expanduser()
        store = self._stores.get(path)
        if store is None:
            store = self._stores[path] = SavedToolStore(path)
        return store

    def reserved_names(self) -> frozenset[str]:
        """Names owned by built-in tools, whether or not their group is active."""
        return frozenset(self.registry.static_names())

    def encoder_for(self, settings: Settings) -> MediaEncoder:
        if self._encoder is not None:
            return self._encoder
        return MediaEncoder(SecureFetcher.from_settings(settings.media))

    def media_encoder(self) -> MediaEncoder:
        """Media encoder for a fresh settings snapshot."""
        return self.encoder_for(self._settings_provider())

    async def snapshot(self) -> ToolTable:
        """Build the tool table for one request."""
        settings = self._settings_provider()
        store = self.store_for(settings)
        table = ToolTable(
            settings=settings,
            store=store,
            groups=self.registry.active_groups(settings),
        )

        reserved = self.reserved_names()
        if settings.saved_tools_enabled:
            for binding in await store.get_all():
                if binding.tool_name in reserved:
                    logger.warning(
                        "Saved tool %s in %s uses a built-in name, skipping it",
                        binding.tool_name,
                        store.path,
                    )
                    continue
                if binding.tool_name in table.saved:
                    logger.warning(
                        "Duplicate saved tool %s in %s, keeping the first",
                        binding.tool_name,
                        store.path,
                    )
                    continue
                table.saved[binding.tool_name] = binding_tool(binding)

        for workflow_id in settings.glif_ids:
            tool = configured_id_tool(workflow_id)
            if tool.name in reserved:
                logger.warning("Configured glif %s maps to built-in tool %s, skipping it", workflow_id, tool.name)
                continue
            table.configured.setdefault(tool.name, tool)

        return table

    async def list_tools(self) -> list[types.Tool]:
        """Definitions of every callable tool for the current settings."""
        table = await self.snapshot()
        tools = table.listing()
        logger.debug("Listing %d tools", len(tools))
        return [tool.definition() for tool in tools]

    async def dispatch(self, name: str, arguments: dict[str, Any] | None = None) -> ToolResult:
        """
        Resolve a tool by name and run it.

        Raises:
            ToolNotFoundError: If no source provides the name
            GlifMcpError: Whatever the tool raises
        """
        table = await self.snapshot()
        tool = table.resolve(name)
        if tool is None:
            raise ToolNotFoundError(tool=name)

        context = ToolContext(
            settings=table.settings,
            store=table.store,
            encoder=self.encoder_for(table.settings),
            api=self.api,
            reserved_names=self.reserved_names(),
        )
        logger.debug("Dispatching %s to %r", name, tool)
        return await tool.run(arguments, context)
