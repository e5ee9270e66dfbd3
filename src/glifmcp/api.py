"""
Workflow API collaborator interface.

glif-mcp does not own the REST client for the workflow service. Tools talk to
anything that satisfies WorkflowApi and returns the validated models from
glifmcp.schema.

Every call goes through call_upstream(), which turns any failure into an
UpstreamError carrying the upstream message.
"""

import logging
from typing import Awaitable, Protocol, TypeVar

from glifmcp.errors import GlifMcpError, UpstreamError
from glifmcp.schema import Bot, Workflow, WorkflowDetails, WorkflowRun, WorkflowUser

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WorkflowApi(Protocol):
    """Operations the tools need from the workflow service."""

    async def run(self, workflow_id: str, inputs: list[str]) -> WorkflowRun:
        """Execute a workflow and wait for its output."""
        ...

    async def search(self, query: str | None = None, featured: bool = False) -> list[Workflow]:
        """Search published workflows, or list featured ones."""
        ...

    async def get_details(self, workflow_id: str) -> WorkflowDetails:
        """Fetch a workflow with its most recent runs."""
        ...

    async def get_me(self) -> WorkflowUser:
        """Fetch the user that owns the API token."""
        ...

    async def get_my_workflows(self) -> list[Workflow]:
        """List workflows created by the token's user."""
        ...

    async def list_bots(
        self,
        sort: str | None = None,
        query: str | None = None,
        creator: str | None = None,
    ) -> list[Bot]:
        """List bots, optionally sorted, searched or filtered by creator username."""
        ...

    async def load_bot(self, bot_id: str) -> Bot:
        """Fetch one bot with its skills."""
        ...

    async def get_run(self, run_id: str) -> WorkflowRun:
        """Fetch one past run by id."""
        ...

    async def get_user(self, user_id: str) -> WorkflowUser:
        """Fetch a public user profile by id or username."""
        ...


async def call_upstream(operation: str, call: Awaitable[T]) -> T:
    """
    Await an API call, wrapping failures as UpstreamError.

    Args:
        operation: Name of the API operation, for error context
        call: The pending API call

    Raises:
        UpstreamError: If the call fails for any reason other than an
            already-typed GlifMcpError
    """
    try:
        return await call
    except GlifMcpError:
        raise
    except Exception as e:
        logger.error("Upstream %s failed: %s", operation, e)
        raise UpstreamError(operation=operation, underlying_error=str(e)) from e
