"""
MCP prompts for glif-mcp.

- showcase_featured_glif: Run the most recently featured glif with playful
  inputs and describe what it made
"""

import logging
from typing import Callable

from mcp import types

from glifmcp.api import WorkflowApi, call_upstream
from glifmcp.errors import PromptNotFoundError, UpstreamError
from glifmcp.media.encoder import ContentBlock, MediaEncoder
from glifmcp.schema import WorkflowNode

logger = logging.getLogger(__name__)

SHOWCASE_PROMPT = types.Prompt(
    name="showcase_featured_glif",
    description="Show and run the most recent featured glif with fun inputs",
)

# First matching keyword in an input's label picks its value
FUN_INPUTS = [
    ("name", "Captain Awesome"),
    ("animal", "Flying Rainbow Unicorn"),
    ("color", "Sparkly Galaxy Purple"),
    ("food", "Magic Pizza with Stardust Toppings"),
    ("place", "Cloud Castle in the Sky"),
    ("story", "Once upon a time in a digital wonderland..."),
]
DEFAULT_FUN_INPUT = "Something Magical ✨"


def input_label(node: WorkflowNode) -> str:
    label = node.params.get("label")
    return label if isinstance(label, str) and label else node.name


def fun_input(node: WorkflowNode) -> str:
    """Pick a playful value for an input node based on its label."""
    label = input_label(node).lower()
    for keyword, value in FUN_INPUTS:
        if keyword in label:
            return value
    return DEFAULT_FUN_INPUT


def block_as_text(block: ContentBlock) -> str:
    if isinstance(block, types.TextContent):
        return block.text
    if isinstance(block, types.ImageContent):
        return f"🖼️ **Image Generated**\n*MIME Type: {block.mimeType}*\n*Data: {block.data[:50]}...*"
    if isinstance(block, types.AudioContent):
        return f"🎧 **Audio Generated**\n*MIME Type: {block.mimeType}*\n*Data: {block.data[:50]}...*"
    if isinstance(block, types.EmbeddedResource):
        return f"📎 Resource: {block.resource.uri}"
    return "[Unknown content type]"


def user_message(text: str) -> types.PromptMessage:
    return types.PromptMessage(role="user", content=types.TextContent(type="text", text=text))


class PromptCatalog:
    """
    The prompts offered to clients.

    Attributes:
        api: Workflow API client (may be None)
    """

    def __init__(
        self,
        api: WorkflowApi | None,
        encoder_provider: Callable[[], MediaEncoder],
    ) -> None:
        """
        Args:
            api: Workflow API client
            encoder_provider: Returns the media encoder for the current settings
        """
        self.api = api
        self._encoder_provider = encoder_provider

    def list_prompts(self) -> list[types.Prompt]:
        return [SHOWCASE_PROMPT]

    async def get_prompt(self, name: str, arguments: dict[str, str] | None = None) -> types.GetPromptResult:
        """
        Render a prompt by name.

        Raises:
            PromptNotFoundError: If no prompt has this name
            UpstreamError: If an API call fails
        """
        if name != SHOWCASE_PROMPT.name:
            raise PromptNotFoundError(prompt=name)
        return await self.showcase_featured_glif()

    async def showcase_featured_glif(self) -> types.GetPromptResult:
        if self.api is None:
            raise UpstreamError(
                operation="connect",
                underlying_error="No workflow API client configured",
            )
        api = self.api

        featured = await call_upstream("search", api.search(featured=True))
        dated = [w for w in featured if w.featured_at is not None]
        logger.debug("showcase_featured_glif: %d featured glifs, %d dated", len(featured), len(dated))
        if not dated:
            return types.GetPromptResult(
                description=SHOWCASE_PROMPT.description,
                messages=[user_message("No featured glifs found.")],
            )
        most_recent = max(dated, key=lambda w: w.featured_at)

        details = await call_upstream("get_details", api.get_details(most_recent.id))
        workflow = details.workflow
        nodes = workflow.input_nodes
        inputs = [fun_input(node) for node in nodes]

        run = await call_upstream("run", api.run(workflow.id, inputs))
        blocks = await self._encoder_provider().encode(run.to_payload())
        output = "\n\n".join(block_as_text(block) for block in blocks)

        author = f"{workflow.user.name} (@{workflow.user.username})" if workflow.user else "unknown"
        featured_at = workflow.featured_at or most_recent.featured_at
        fields = "\n".join(f'{input_label(node)}: "{value}"' for node, value in zip(nodes, inputs))
        text = (
            "I found this awesome featured glif!\n\n"
            f"Name: {workflow.name}\n"
            f"Description: {workflow.description or ''}\n"
            f"By: {author}\n"
            f"Featured: {featured_at:%Y-%m-%d %H:%M:%S %Z}\n\n"
            f"It takes these inputs:\n{fields}\n\n"
            f"Here's what it created:\n{output}"
        )
        return types.GetPromptResult(
            description=SHOWCASE_PROMPT.description,
            messages=[user_message(text)],
        )
