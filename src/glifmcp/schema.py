"""
Schema definitions for glif-mcp.

This module defines the Pydantic models used throughout glif-mcp:
- Settings/MediaSettings: Process configuration (flags, paths, fetch limits)
- SavedBinding: A user-saved shortcut from a tool name to a workflow id
- OutputPayload: The output value and type tag of a workflow run
- Workflow/WorkflowRun/Bot: Shapes returned by the workflow API

Design Decisions:
    - Settings are frozen and re-read per request through a provider
    - On-disk and upstream shapes keep their camelCase keys via aliases
    - Upstream models ignore unknown fields so API additions don't break us
"""

import os
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Callable

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from glifmcp.naming import ensure_tool_name


TRUTHY_VALUES = frozenset({"true", "1", "yes"})

DEFAULT_SAVED_TOOLS_PATH = Path.home() / ".config" / "glif-mcp" / "saved-glifs.json"


def is_truthy(value: str | None) -> bool:
    """Interpret a boolean-ish environment value ("true", "1", "yes")."""
    return value is not None and value.strip().lower() in TRUTHY_VALUES


def parse_id_list(raw: str | None) -> list[str]:
    """Split a comma-separated id list, trimming blanks and duplicates."""
    if not raw:
        return []
    ids: list[str] = []
    for part in raw.split(","):
        item = part.strip()
        if item and item not in ids:
            ids.append(item)
    return ids


# =============================================================================
# Configuration
# =============================================================================


class MediaSettings(BaseModel):
    """
    Limits applied when fetching remote media for inline encoding.

    Attributes:
        max_bytes: Ceiling for both declared and received body size
        timeout_seconds: Wall-clock limit for one fetch
        user_agent: User-Agent header sent with every fetch
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_bytes: int = Field(
        default=10 * 1024 * 1024,  # 10 MB
        description="Maximum media size in bytes",
        gt=0,
    )
    timeout_seconds: float = Field(
        default=30,
        description="Fetch timeout in seconds",
        gt=0,
        le=300,
    )
    user_agent: str = Field(
        default="glif-mcp-server/1.0",
        description="User-Agent header for media fetches",
    )


class Settings(BaseModel):
    """
    Complete process configuration.

    Settings gate the optional tool groups and locate the saved-tools store.
    A fresh snapshot is taken for every list/call request so flag changes
    apply without a restart.

    Attributes:
        saved_tools_path: JSON file holding saved bindings
        glif_ids: Workflow ids exposed as glif_<id> tools
        discovery_enabled: Whether discovery tools are listed
        metaskill_enabled: Whether saved-tool management tools are listed
        saved_tools_enabled: Whether saved bindings are listed/dispatched
        bot_tools_enabled: Whether bot tools are listed
        agent_tools_enabled: Whether agent tools are listed
        debug: Whether debug logging is on
        media: Media fetch limits
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    saved_tools_path: Path = Field(
        default=DEFAULT_SAVED_TOOLS_PATH,
        description="Path to the saved tools JSON file",
    )
    glif_ids: list[str] = Field(
        default_factory=list,
        description="Workflow ids exposed as glif_<id> tools",
    )
    discovery_enabled: bool = True
    metaskill_enabled: bool = True
    saved_tools_enabled: bool = True
    bot_tools_enabled: bool = False
    agent_tools_enabled: bool = False
    debug: bool = False
    media: MediaSettings = Field(default_factory=MediaSettings)

    @field_validator("glif_ids", mode="before")
    @classmethod
    def split_glif_ids(cls, v: Any) -> Any:
        """Accept the comma-separated form used in environment variables."""
        if isinstance(v, str):
            return parse_id_list(v)
        return v


def load_settings(
    environ: Mapping[str, str] | None = None,
    config_path: Path | str | None = None,
) -> Settings:
    """
    Build Settings from an optional YAML file overlaid by the environment.

    Args:
        environ: Environment mapping (defaults to os.environ)
        config_path: Optional YAML settings file; GLIF_MCP_CONFIG is used
            when not given

    Returns:
        Validated Settings object

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist
        ValidationError: If the merged values don't match the schema
    """
    env = os.environ if environ is None else environ
    data: dict[str, Any] = {}

    path = config_path or env.get("GLIF_MCP_CONFIG")
    if path:
        with Path(path).open() as f:
            data = yaml.safe_load(f) or {}

    # Blank variables leave the file's value in place
    def overlay(name: str) -> str | None:
        value = env.get(name)
        return value if value and value.strip() else None

    if (value := overlay("GLIF_SAVED_TOOLS_PATH")) is not None:
        data["saved_tools_path"] = value
    if (value := overlay("GLIF_IDS")) is not None:
        data["glif_ids"] = value
    if (value := overlay("IGNORE_DISCOVERY_TOOLS")) is not None:
        data["discovery_enabled"] = not is_truthy(value)
    if (value := overlay("IGNORE_METASKILL_TOOLS")) is not None:
        data["metaskill_enabled"] = not is_truthy(value)
    if (value := overlay("IGNORE_SAVED_GLIFS")) is not None:
        data["saved_tools_enabled"] = not is_truthy(value)
    if (value := overlay("BOT_TOOLS")) is not None:
        data["bot_tools_enabled"] = is_truthy(value)
    if (value := overlay("DEBUG")) is not None:
        data["debug"] = is_truthy(value)
    if (value := overlay("AGENT_TOOLS")) is not None:
        data["agent_tools_enabled"] = is_truthy(value)

    media = dict(data.get("media") or {})
    if (value := overlay("GLIF_MEDIA_MAX_BYTES")) is not None:
        media["max_bytes"] = value
    if (value := overlay("GLIF_MEDIA_TIMEOUT_SECONDS")) is not None:
        media["timeout_seconds"] = value
    if media:
        data["media"] = media

    return Settings.model_validate(data)


SettingsProvider = Callable[[], Settings]


def env_settings_provider() -> Settings:
    """Default provider: re-read the process environment on every call."""
    return load_settings()


# =============================================================================
# Saved Bindings
# =============================================================================


def _coerce_timestamp(value: Any) -> datetime:
    """Turn whatever an old file stored into an aware timestamp."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return datetime.now(UTC)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return datetime.now(UTC)


class SavedBinding(BaseModel):
    """
    A saved tool: a callable name bound to an upstream workflow id.

    Field aliases match the on-disk JSON keys. tool_name is sanitized and
    created_at coerced while validating, so records written by older
    releases still load.

    Attributes:
        source_id: Upstream workflow id used at dispatch time
        tool_name: Dispatch key, always within the identifier grammar
        display_name: Human-readable name
        description: Description shown in tool listings
        created_at: When the binding was saved
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    source_id: str = Field(..., alias="id", description="Upstream workflow id")
    tool_name: str = Field(
        default="",
        alias="toolName",
        validate_default=True,
        description="Tool name for invocation",
    )
    display_name: str = Field(default="", alias="name", description="Display name")
    description: str = Field(default="", description="Custom description")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        alias="createdAt",
        description="When the binding was saved",
    )

    @field_validator("created_at", mode="before")
    @classmethod
    def coerce_created_at(cls, v: Any) -> datetime:
        """Replace missing or unparsable timestamps with the current time."""
        return _coerce_timestamp(v)

    @field_validator("display_name", "description", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("tool_name")
    @classmethod
    def sanitize_tool_name(cls, v: str, info: ValidationInfo) -> str:
        """Force the tool name into the identifier grammar."""
        return ensure_tool_name(v, info.data.get("source_id", ""))

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with on-disk keys and an ISO-8601 timestamp."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Workflow Output
# =============================================================================


class OutputPayload(BaseModel):
    """
    The result of a workflow execution, consumed once by the media encoder.

    Attributes:
        value: Raw output (text, JSON, HTML, or a media URL)
        type_tag: Declared output type (IMAGE, AUDIO, VIDEO, JSON, HTML, TEXT)
    """

    model_config = ConfigDict(frozen=True)

    value: str | None = None
    type_tag: str | None = None


# =============================================================================
# Upstream Shapes
# =============================================================================


class _UpstreamModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class WorkflowUser(_UpstreamModel):
    id: str = ""
    name: str = ""
    username: str = ""
    bio: str | None = None


class WorkflowNode(_UpstreamModel):
    name: str
    type: str
    params: dict[str, Any] = Field(default_factory=dict)


class Workflow(_UpstreamModel):
    """A published workflow ("glif")."""

    id: str
    name: str = ""
    description: str | None = None
    user: WorkflowUser | None = None
    output_type: str | None = Field(default=None, alias="outputType")
    completed_run_count: int | None = Field(default=None, alias="completedSpellRunCount")
    average_duration: float | None = Field(default=None, alias="averageDuration")
    like_count: int | None = Field(default=None, alias="likeCount")
    featured_at: datetime | None = Field(default=None, alias="featuredAt")
    nodes: list[WorkflowNode] = Field(default_factory=list)

    @property
    def input_nodes(self) -> list[WorkflowNode]:
        """Nodes the caller fills through the run inputs array."""
        return [node for node in self.nodes if "input" in node.type]


class WorkflowRun(_UpstreamModel):
    """One execution of a workflow."""

    id: str = ""
    output: str | None = None
    output_type: str | None = Field(default=None, alias="outputType")
    total_duration: float | None = Field(default=None, alias="totalDuration")
    inputs: dict[str, Any] = Field(default_factory=dict)
    user: WorkflowUser | None = None

    def to_payload(self) -> OutputPayload:
        """Hand the output and its type tag to the media encoder."""
        return OutputPayload(value=self.output, type_tag=self.output_type)


class WorkflowDetails(_UpstreamModel):
    workflow: Workflow
    recent_runs: list[WorkflowRun] = Field(default_factory=list)


class BotSkill(_UpstreamModel):
    """A workflow attached to a bot, possibly renamed for that bot."""

    workflow_id: str = ""
    workflow_name: str = ""
    custom_name: str | None = Field(default=None, alias="customName")
    custom_description: str | None = Field(default=None, alias="customDescription")
    usage_instructions: str | None = Field(default=None, alias="usageInstructions")


class Bot(_UpstreamModel):
    """A persona ("agent") with workflows attached as skills."""

    id: str
    name: str = ""
    username: str | None = None
    bio: str | None = None
    personality: str | None = None
    message_count: int | None = Field(default=None, alias="messageCount")
    user: WorkflowUser | None = None
    skills: list[BotSkill] = Field(default_factory=list)
