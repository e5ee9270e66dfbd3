"""
Integration tests for the glifmcp CLI.

Commands run through typer's CliRunner against a temporary saved tools
file selected with GLIF_SAVED_TOOLS_PATH.
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from glifmcp import __version__
from glifmcp.cli import app

runner = CliRunner()


@pytest.fixture
def cli_env(store_path: Path) -> dict[str, str]:
    """Environment isolating the CLI from the caller's glif settings."""
    return {
        "GLIF_SAVED_TOOLS_PATH": str(store_path),
        "GLIF_IDS": "",
        "GLIF_MCP_CONFIG": "",
        "IGNORE_DISCOVERY_TOOLS": "",
        "IGNORE_METASKILL_TOOLS": "",
        "IGNORE_SAVED_GLIFS": "",
        "BOT_TOOLS": "",
        "AGENT_TOOLS": "",
        "DEBUG": "",
        "COLUMNS": "200",
    }


def saved_names(store_path: Path) -> list[str]:
    return [record["toolName"] for record in json.loads(store_path.read_text())]


class TestVersion:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestListTools:
    """Tests for list-tools."""

    def test_json_listing(self, cli_env: dict[str, str]) -> None:
        result = runner.invoke(app, ["list-tools", "--json"], env=cli_env)
        assert result.exit_code == 0
        names = [tool["name"] for tool in json.loads(result.output)]
        assert names[:2] == ["run_glif", "glif_info"]
        assert "list_bots" not in names

    def test_flags_from_environment(self, cli_env: dict[str, str]) -> None:
        env = {**cli_env, "BOT_TOOLS": "true", "IGNORE_DISCOVERY_TOOLS": "1", "GLIF_IDS": "abc,def"}
        result = runner.invoke(app, ["list-tools", "--json"], env=env)
        assert result.exit_code == 0
        names = [tool["name"] for tool in json.loads(result.output)]
        assert "search_glifs" not in names
        assert "load_bot" in names
        assert names[-2:] == ["glif_abc", "glif_def"]

    def test_table_output(self, cli_env: dict[str, str]) -> None:
        result = runner.invoke(app, ["list-tools"], env=cli_env)
        assert result.exit_code == 0
        assert "run_glif" in result.output
        assert "Total: 10 tools" in result.output

    def test_yaml_config(self, cli_env: dict[str, str], temp_dir: Path) -> None:
        config = temp_dir / "glif.yaml"
        config.write_text("metaskill_enabled: false\ndiscovery_enabled: false\n")
        result = runner.invoke(app, ["list-tools", "--json", "--config", str(config)], env=cli_env)
        assert result.exit_code == 0
        assert [tool["name"] for tool in json.loads(result.output)] == ["run_glif", "glif_info"]

    def test_invalid_settings(self, cli_env: dict[str, str]) -> None:
        env = {**cli_env, "GLIF_MEDIA_MAX_BYTES": "-5"}
        result = runner.invoke(app, ["list-tools"], env=env)
        assert result.exit_code == 1
        assert "Error loading settings" in result.output


class TestSavedToolCommands:
    """Tests for import-ids, list-saved, remove and reset."""

    def test_import_and_list(self, cli_env: dict[str, str], store_path: Path) -> None:
        result = runner.invoke(app, ["import-ids", "abc, def,abc"], env=cli_env)
        assert result.exit_code == 0
        assert saved_names(store_path) == ["glif_abc", "glif_def"]

        listed = runner.invoke(app, ["list-saved", "--json"], env=cli_env)
        assert listed.exit_code == 0
        assert [record["id"] for record in json.loads(listed.output)] == ["abc", "def"]

    def test_import_nothing(self, cli_env: dict[str, str], store_path: Path) -> None:
        result = runner.invoke(app, ["import-ids", " , "], env=cli_env)
        assert result.exit_code == 1
        assert not store_path.exists()

    def test_imported_tools_are_listed(self, cli_env: dict[str, str]) -> None:
        runner.invoke(app, ["import-ids", "xyz"], env=cli_env)
        result = runner.invoke(app, ["list-tools", "--json"], env=cli_env)
        assert [tool["name"] for tool in json.loads(result.output)][-1] == "glif_xyz"

    def test_list_saved_empty(self, cli_env: dict[str, str]) -> None:
        result = runner.invoke(app, ["list-saved"], env=cli_env)
        assert result.exit_code == 0
        assert "No saved glif tools found." in result.output

    def test_remove(self, cli_env: dict[str, str], store_path: Path) -> None:
        runner.invoke(app, ["import-ids", "a,b"], env=cli_env)
        result = runner.invoke(app, ["remove", "glif_a"], env=cli_env)
        assert result.exit_code == 0
        assert saved_names(store_path) == ["glif_b"]

    def test_remove_missing(self, cli_env: dict[str, str]) -> None:
        result = runner.invoke(app, ["remove", "nope"], env=cli_env)
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_reset_with_confirmation(self, cli_env: dict[str, str], store_path: Path) -> None:
        runner.invoke(app, ["import-ids", "a,b"], env=cli_env)
        result = runner.invoke(app, ["reset"], input="y\n", env=cli_env)
        assert result.exit_code == 0
        assert "Removed all 2 saved glif tools" in result.output
        assert saved_names(store_path) == []

    def test_reset_aborted(self, cli_env: dict[str, str], store_path: Path) -> None:
        runner.invoke(app, ["import-ids", "a"], env=cli_env)
        result = runner.invoke(app, ["reset"], input="n\n", env=cli_env)
        assert result.exit_code == 1
        assert saved_names(store_path) == ["glif_a"]

    def test_reset_yes(self, cli_env: dict[str, str], store_path: Path) -> None:
        runner.invoke(app, ["import-ids", "a"], env=cli_env)
        result = runner.invoke(app, ["reset", "--yes"], env=cli_env)
        assert result.exit_code == 0
        assert saved_names(store_path) == []


class TestShowConfig:
    def test_show_config(self, cli_env: dict[str, str], store_path: Path) -> None:
        result = runner.invoke(app, ["show-config"], env={**cli_env, "BOT_TOOLS": "yes"})
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["bot_tools_enabled"] is True
        assert data["saved_tools_path"] == str(store_path)
        assert data["media"]["max_bytes"] == 10 * 1024 * 1024
