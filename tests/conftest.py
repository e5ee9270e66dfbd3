"""
Pytest configuration and fixtures for glif-mcp tests.

This module provides shared fixtures used across unit, integration,
and security tests: temporary store paths, settings, an in-memory
workflow API and a fake media fetcher.
"""

import tempfile
from pathlib import Path
from typing import Any, Callable, Generator

import pytest

from glifmcp.errors import FetchError
from glifmcp.media.encoder import MediaEncoder
from glifmcp.schema import (
    Bot,
    BotSkill,
    Settings,
    Workflow,
    WorkflowDetails,
    WorkflowNode,
    WorkflowRun,
    WorkflowUser,
)
from glifmcp.store.saved import SavedToolStore
from glifmcp.tools.base import ToolContext
from glifmcp.tools.catalog import build_default_registry
from glifmcp.tools.composer import RegistryComposer


class FakeWorkflowApi:
    """In-memory WorkflowApi that records every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.error: Exception | None = None
        self.run_result = WorkflowRun(id="run-1", output="Hello from glif", outputType="TEXT")
        self.user = WorkflowUser(id="user-1", name="Ada", username="ada", bio="Makes glifs")
        self.workflows = {
            "wf-1": Workflow(
                id="wf-1",
                name="Meme Maker",
                description="Makes memes",
                user=self.user,
                outputType="IMAGE",
                completedSpellRunCount=42,
                nodes=[
                    WorkflowNode(name="topic", type="text-input"),
                    WorkflowNode(name="render", type="image-gen"),
                ],
            ),
            "wf-2": Workflow(id="wf-2", name="Haiku", description="Writes haiku", user=self.user),
        }
        self.bots = {
            "bot-1": Bot(
                id="bot-1",
                name="Tshirt Bot",
                username="tshirt",
                bio="Designs shirts",
                personality="Cheerful and pun-loving",
                user=self.user,
                skills=[
                    BotSkill(workflow_id="wf-1", workflow_name="Meme Maker"),
                    BotSkill(
                        workflow_id="wf-2",
                        workflow_name="Haiku",
                        customName="Poet",
                        customDescription="Writes a haiku",
                    ),
                ],
            ),
        }

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, args))
        if self.error is not None:
            raise self.error

    async def run(self, workflow_id: str, inputs: list[str]) -> WorkflowRun:
        self._record("run", workflow_id, inputs)
        return self.run_result

    async def search(self, query: str | None = None, featured: bool = False) -> list[Workflow]:
        self._record("search", query, featured)
        workflows = list(self.workflows.values())
        if featured:
            return workflows[:1]
        if query:
            return [w for w in workflows if query.lower() in w.name.lower()]
        return workflows

    async def get_details(self, workflow_id: str) -> WorkflowDetails:
        self._record("get_details", workflow_id)
        if workflow_id not in self.workflows:
            raise LookupError(f"Glif {workflow_id} not found")
        return WorkflowDetails(workflow=self.workflows[workflow_id], recent_runs=[self.run_result])

    async def get_me(self) -> WorkflowUser:
        self._record("get_me")
        return self.user

    async def get_my_workflows(self) -> list[Workflow]:
        self._record("get_my_workflows")
        return list(self.workflows.values())

    async def list_bots(
        self,
        sort: str | None = None,
        query: str | None = None,
        creator: str | None = None,
    ) -> list[Bot]:
        self._record("list_bots", sort, query, creator)
        bots = list(self.bots.values())
        if creator:
            return [b for b in bots if b.user is not None and b.user.username == creator]
        return bots

    async def load_bot(self, bot_id: str) -> Bot:
        self._record("load_bot", bot_id)
        if bot_id not in self.bots:
            raise LookupError(f"Bot {bot_id} not found")
        return self.bots[bot_id]

    async def get_run(self, run_id: str) -> WorkflowRun:
        self._record("get_run", run_id)
        if run_id != self.run_result.id:
            raise LookupError(f"Run {run_id} not found")
        return self.run_result

    async def get_user(self, user_id: str) -> WorkflowUser:
        self._record("get_user", user_id)
        if user_id not in (self.user.id, self.user.username):
            raise LookupError(f"User {user_id} not found")
        return self.user


class FakeFetcher:
    """MediaFetcher returning canned base64 data, or raising a FetchError."""

    def __init__(self, data: str = "aW1hZ2VieXRlcw==", error: FetchError | None = None) -> None:
        self.data = data
        self.error = error
        self.urls: list[str] = []

    async def fetch_base64(self, url: str) -> str:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.data


class SettingsHolder:
    """Mutable settings source, so tests can flip flags between requests."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def update(self, **changes: Any) -> None:
        self.settings = self.settings.model_copy(update=changes)

    def __call__(self) -> Settings:
        return self.settings


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store_path(temp_dir: Path) -> Path:
    """Location of the saved tools file (not created)."""
    return temp_dir / "glif-mcp" / "saved-glifs.json"


@pytest.fixture
def make_settings(store_path: Path) -> Callable[..., Settings]:
    """Factory for settings pointing at the temporary store."""

    def factory(**overrides: Any) -> Settings:
        overrides.setdefault("saved_tools_path", store_path)
        return Settings(**overrides)

    return factory


@pytest.fixture
def settings(make_settings: Callable[..., Settings]) -> Settings:
    return make_settings()


@pytest.fixture
def store(store_path: Path) -> SavedToolStore:
    return SavedToolStore(store_path)


@pytest.fixture
def fake_api() -> FakeWorkflowApi:
    return FakeWorkflowApi()


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def encoder(fake_fetcher: FakeFetcher) -> MediaEncoder:
    return MediaEncoder(fake_fetcher)


@pytest.fixture
def tool_context(
    settings: Settings,
    store: SavedToolStore,
    encoder: MediaEncoder,
    fake_api: FakeWorkflowApi,
) -> ToolContext:
    """Context for calling tools directly."""
    return ToolContext(
        settings=settings,
        store=store,
        encoder=encoder,
        api=fake_api,
        reserved_names=frozenset(build_default_registry().static_names()),
    )


@pytest.fixture
def settings_holder(settings: Settings) -> SettingsHolder:
    return SettingsHolder(settings)


@pytest.fixture
def composer(
    settings_holder: SettingsHolder,
    store: SavedToolStore,
    encoder: MediaEncoder,
    fake_api: FakeWorkflowApi,
) -> RegistryComposer:
    """Composer over the default registry, fake API and temporary store."""
    return RegistryComposer(
        build_default_registry(),
        settings_provider=settings_holder,
        api=fake_api,
        store=store,
        encoder=encoder,
    )
