"""
Unit tests for the registry composer.

Tests cover:
- Listing order across groups, saved tools and configured ids
- Dispatch precedence and collision handling
- Settings re-read per request
- Unknown names
"""

import json
from pathlib import Path

import pytest

from glifmcp.errors import ToolInvalidArgsError, ToolNotFoundError
from glifmcp.schema import SavedBinding
from glifmcp.store.saved import SavedToolStore
from glifmcp.tools.catalog import build_default_registry
from glifmcp.tools.composer import RegistryComposer, binding_tool, configured_id_tool

CORE = ["run_glif", "glif_info"]
DISCOVERY = ["list_featured_glifs", "search_glifs", "my_glifs", "my_glif_user_info"]
METASKILL = [
    "save_glif_as_tool",
    "remove_glif_tool",
    "remove_all_glif_tools",
    "list_saved_glif_tools",
]
BOTS = ["list_bots", "load_bot", "show_bot_info", "save_bot_skills_as_tools"]


async def listed_names(composer: RegistryComposer) -> list[str]:
    return [tool.name for tool in await composer.list_tools()]


class TestSyntheticTools:
    """Tests for saved and configured id tools."""

    def test_binding_tool(self) -> None:
        tool = binding_tool(
            SavedBinding(source_id="wf", tool_name="memes", display_name="Meme Maker", description="Makes memes")
        )
        assert tool.name == "memes"
        assert tool.workflow_id == "wf"
        assert tool.description == "Meme Maker: Makes memes"

    def test_binding_tool_schema_only_takes_inputs(self) -> None:
        schema = binding_tool(SavedBinding(source_id="wf", tool_name="memes")).input_schema()
        assert list(schema["properties"]) == ["inputs"]
        assert schema["properties"]["inputs"]["type"] == "array"
        assert schema["properties"]["inputs"]["items"] == {"type": "string"}
        assert schema["required"] == ["inputs"]

    def test_configured_id_tool(self) -> None:
        tool = configured_id_tool("cm2abc")
        assert tool.name == "glif_cm2abc"
        assert tool.description == "Run glif cm2abc"

    def test_configured_id_sanitized(self) -> None:
        assert configured_id_tool("a b!").name == "glif_a_b"


class TestListing:
    """Tests for list_tools()."""

    @pytest.mark.asyncio
    async def test_default_listing(self, composer: RegistryComposer) -> None:
        assert await listed_names(composer) == CORE + DISCOVERY + METASKILL

    @pytest.mark.asyncio
    async def test_full_order(self, composer, settings_holder, store: SavedToolStore) -> None:
        """Core, optional groups, saved tools, then configured ids."""
        settings_holder.update(bot_tools_enabled=True, glif_ids=["id1", "id2"])
        await store.save(SavedBinding(source_id="s1", tool_name="saved_one"))
        await store.save(SavedBinding(source_id="s2", tool_name="saved_two"))

        assert await listed_names(composer) == (
            CORE + DISCOVERY + METASKILL + BOTS + ["saved_one", "saved_two", "glif_id1", "glif_id2"]
        )

    @pytest.mark.asyncio
    async def test_disabled_groups_hidden(self, composer, settings_holder) -> None:
        settings_holder.update(discovery_enabled=False, metaskill_enabled=False)
        assert await listed_names(composer) == CORE

    @pytest.mark.asyncio
    async def test_saved_tools_can_be_disabled(self, composer, settings_holder, store) -> None:
        await store.save(SavedBinding(source_id="s1", tool_name="saved_one"))
        settings_holder.update(saved_tools_enabled=False)
        assert "saved_one" not in await listed_names(composer)

    @pytest.mark.asyncio
    async def test_names_unique(self, composer, settings_holder, store) -> None:
        """A name in several sources is listed once."""
        settings_holder.update(glif_ids=["dup"])
        await store.save(SavedBinding(source_id="other", tool_name="glif_dup"))
        await store.save(SavedBinding(source_id="x", tool_name="run_glif"))

        names = await listed_names(composer)
        assert len(names) == len(set(names))

    @pytest.mark.asyncio
    async def test_listing_shows_dispatch_winner(self, composer, settings_holder, store) -> None:
        """A saved tool named like a configured id is listed as the saved tool."""
        settings_holder.update(glif_ids=["dup"])
        await store.save(SavedBinding(source_id="other", tool_name="glif_dup", description="saved one"))

        tools = {tool.name: tool for tool in await composer.list_tools()}
        assert tools["glif_dup"].description.endswith("saved one")

    @pytest.mark.asyncio
    async def test_saved_static_name_keeps_core_first(self, composer, store) -> None:
        await store.save(SavedBinding(source_id="x", tool_name="glif_info"))
        await store.import_ids("cm2abc")
        store_text = store.path.read_text().replace("glif_cm2abc", "run_glif")
        store.path.write_text(store_text)

        names = await listed_names(composer)
        assert names == CORE + DISCOVERY + METASKILL

    @pytest.mark.asyncio
    async def test_configured_id_with_static_name_skipped(self, composer, settings_holder) -> None:
        """GLIF_IDS=info would otherwise map onto glif_info."""
        settings_holder.update(glif_ids=["info", "cm2abc"])
        tools = {tool.name: tool for tool in await composer.list_tools()}
        assert tools["glif_info"].description == "Get detailed information about a glif including input fields"
        assert list(tools)[-1] == "glif_cm2abc"

    @pytest.mark.asyncio
    async def test_duplicate_records_in_hand_edited_file(self, composer, store: SavedToolStore) -> None:
        """The first record with a name wins, in listing and dispatch."""
        store.path.parent.mkdir(parents=True, exist_ok=True)
        store.path.write_text(
            json.dumps(
                [
                    {"id": "first", "toolName": "same"},
                    {"id": "second", "toolName": "same!"},
                ]
            )
        )
        assert (await listed_names(composer)).count("same") == 1

        await composer.dispatch("same", {"inputs": []})
        assert composer.api.calls[-1] == ("run", ("first", []))

    @pytest.mark.asyncio
    async def test_malformed_store_lists_static_tools(self, composer, store: SavedToolStore) -> None:
        store.path.parent.mkdir(parents=True, exist_ok=True)
        store.path.write_text("not json")
        assert await listed_names(composer) == CORE + DISCOVERY + METASKILL

    @pytest.mark.asyncio
    async def test_definitions_have_schemas(self, composer) -> None:
        for definition in await composer.list_tools():
            assert definition.inputSchema["type"] == "object"
            assert definition.description


class TestDispatch:
    """Tests for dispatch()."""

    @pytest.mark.asyncio
    async def test_unknown_tool(self, composer) -> None:
        with pytest.raises(ToolNotFoundError) as exc_info:
            await composer.dispatch("nope", {})
        assert exc_info.value.tool == "nope"
        assert "nope" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_core_tool(self, composer, fake_api) -> None:
        result = await composer.dispatch("run_glif", {"id": "wf-1", "inputs": ["cats"]})
        assert result.content[0].text == "Hello from glif"
        assert fake_api.calls == [("run", ("wf-1", ["cats"]))]

    @pytest.mark.asyncio
    async def test_saved_tool(self, composer, store, fake_api) -> None:
        await store.save(SavedBinding(source_id="wf-2", tool_name="haiku"))
        await composer.dispatch("haiku", {"inputs": ["autumn"]})
        assert fake_api.calls == [("run", ("wf-2", ["autumn"]))]

    @pytest.mark.asyncio
    async def test_configured_id_tool(self, composer, settings_holder, fake_api) -> None:
        settings_holder.update(glif_ids=["cm2abc"])
        await composer.dispatch("glif_cm2abc", {"inputs": []})
        assert fake_api.calls == [("run", ("cm2abc", []))]

    @pytest.mark.asyncio
    async def test_saved_wins_over_configured_id(self, composer, settings_holder, store, fake_api) -> None:
        settings_holder.update(glif_ids=["dup"])
        await store.save(SavedBinding(source_id="saved-target", tool_name="glif_dup"))
        await composer.dispatch("glif_dup", {"inputs": []})
        assert fake_api.calls == [("run", ("saved-target", []))]

    @pytest.mark.asyncio
    async def test_saved_never_shadows_static_tool(self, composer, store, fake_api) -> None:
        await store.save(SavedBinding(source_id="wf-2", tool_name="glif_info"))
        await composer.dispatch("glif_info", {"id": "wf-1"})
        assert fake_api.calls == [("get_details", ("wf-1",))]

    @pytest.mark.asyncio
    async def test_imported_core_name_reaches_core(self, composer, store, fake_api) -> None:
        """A hand-edited run_glif record leaves the core tool in charge."""
        store.path.parent.mkdir(parents=True, exist_ok=True)
        store.path.write_text(json.dumps([{"id": "hijack", "toolName": "run_glif"}]))

        await composer.dispatch("run_glif", {"id": "wf-1", "inputs": []})
        assert fake_api.calls == [("run", ("wf-1", []))]

    @pytest.mark.asyncio
    async def test_disabled_group_not_dispatchable(self, composer, settings_holder) -> None:
        """Hidden and non-dispatchable in the same request."""
        settings_holder.update(discovery_enabled=False)
        with pytest.raises(ToolNotFoundError):
            await composer.dispatch("search_glifs", {"query": "x"})

    @pytest.mark.asyncio
    async def test_bots_enabled_between_requests(self, composer, settings_holder) -> None:
        """Flag changes apply without rebuilding the composer."""
        with pytest.raises(ToolNotFoundError):
            await composer.dispatch("load_bot", {"id": "bot-1"})

        settings_holder.update(bot_tools_enabled=True)
        result = await composer.dispatch("load_bot", {"id": "bot-1"})
        assert "Tshirt Bot" in result.content[0].text

    @pytest.mark.asyncio
    async def test_disabled_saved_tools_not_dispatchable(self, composer, settings_holder, store) -> None:
        await store.save(SavedBinding(source_id="wf-2", tool_name="haiku"))
        settings_holder.update(saved_tools_enabled=False)
        with pytest.raises(ToolNotFoundError):
            await composer.dispatch("haiku", {"inputs": []})

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, composer) -> None:
        with pytest.raises(ToolInvalidArgsError) as exc_info:
            await composer.dispatch("run_glif", {"id": "wf-1"})
        assert "inputs" in exc_info.value.validation_error

    @pytest.mark.asyncio
    async def test_saved_tool_visible_after_save(self, composer) -> None:
        """A tool saved through the metaskill group is callable on the next request."""
        await composer.dispatch("save_glif_as_tool", {"id": "wf-1", "toolName": "memes"})
        assert "memes" in [tool.name for tool in await composer.list_tools()]
        await composer.dispatch("memes", {"inputs": ["dogs"]})
        assert composer.api.calls[-1] == ("run", ("wf-1", ["dogs"]))


class TestStoreSelection:
    """Tests for per-path store reuse."""

    def test_store_reused_per_path(self, make_settings, temp_dir: Path) -> None:
        composer = RegistryComposer(build_default_registry())
        first = make_settings(saved_tools_path=temp_dir / "a.json")
        second = make_settings(saved_tools_path=temp_dir / "b.json")

        assert composer.store_for(first) is composer.store_for(first)
        assert composer.store_for(first) is not composer.store_for(second)

    @pytest.mark.asyncio
    async def test_settings_path_used_without_fixed_store(self, make_settings, temp_dir: Path, fake_api) -> None:
        settings = make_settings(saved_tools_path=temp_dir / "tools.json")
        composer = RegistryComposer(build_default_registry(), settings_provider=lambda: settings, api=fake_api)

        await SavedToolStore(temp_dir / "tools.json").save(SavedBinding(source_id="x", tool_name="mine"))
        assert "mine" in [tool.name for tool in await composer.list_tools()]
