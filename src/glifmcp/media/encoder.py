"""
Media content encoding for workflow outputs.

A workflow run returns a single string plus a declared output type. The
encoder turns that pair into MCP content blocks:

    TEXT / unknown    -> text
    JSON / HTML       -> text, raw and unwrapped so structured data survives
    IMAGE             -> resource + inline image + markdown image
    AUDIO             -> resource + inline audio + "🔊 Audio: <url>"
    VIDEO             -> resource + "🎥 Video: <url>" (no inline video block)

Inline blocks need a fetch. Any fetch failure drops only the inline block;
any other failure degrades to a single text block with a warning marker.
encode() never raises. JSON outputs holding an object are also exposed as
structured content through structured_content().
"""

import json
import logging
import posixpath
from typing import Any, Protocol
from urllib.parse import urlparse

from mcp.types import (
    AudioContent,
    EmbeddedResource,
    ImageContent,
    TextContent,
    TextResourceContents,
)

from glifmcp.errors import FetchError
from glifmcp.schema import OutputPayload

logger = logging.getLogger(__name__)

ContentBlock = TextContent | ImageContent | AudioContent | EmbeddedResource

NO_OUTPUT_MESSAGE = "No output received"

GENERIC_MIME_TYPE = "application/octet-stream"

MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mov": "video/quicktime",
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "m4a": "audio/mp4",
}

MEDIA_TAGS = {"IMAGE": "image", "AUDIO": "audio", "VIDEO": "video"}

MEDIA_EMOJI = {"audio": "🔊", "video": "🎥"}

REDACTED_DATA = "[base64_encoded_data_hidden]"


class MediaFetcher(Protocol):
    async def fetch_base64(self, url: str) -> str: ...


def get_mime_type(url: str) -> str:
    """
    Map a URL's file extension to a MIME type.

    The extension comes from the URL path, so query strings and fragments
    don't hide it. Unknown extensions map to application/octet-stream.
    """
    path = urlparse(url).path or url
    extension = posixpath.splitext(path)[1].lstrip(".").lower()
    return MIME_TYPES.get(extension, GENERIC_MIME_TYPE)


def is_media_url(value: str, media_type: str) -> bool:
    """
    Check that a value is an http(s) URL whose extension has the given family.

    Args:
        value: Candidate URL
        media_type: "image", "audio" or "video"
    """
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return False
    return get_mime_type(value).startswith(f"{media_type}/")


def structured_content(output: OutputPayload) -> dict[str, Any] | None:
    """
    Parse a JSON output into an object for the structuredContent field.

    Only JSON-tagged outputs holding a JSON object qualify; anything else,
    including invalid JSON, returns None and stays text-only.
    """
    if not output.value or not output.type_tag or output.type_tag.upper() != "JSON":
        return None
    try:
        parsed = json.loads(output.value)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def redact_inline_data(blocks: list[ContentBlock]) -> list[ContentBlock]:
    """Copy blocks with base64 payloads replaced, for logging."""
    redacted: list[ContentBlock] = []
    for block in blocks:
        if isinstance(block, (ImageContent, AudioContent)) and block.data:
            block = block.model_copy(update={"data": REDACTED_DATA})
        redacted.append(block)
    return redacted


class MediaEncoder:
    """
    Classify workflow outputs and build MCP content blocks.

    Usage:
        encoder = MediaEncoder(SecureFetcher())
        blocks = await encoder.encode(OutputPayload(value=url, type_tag="IMAGE"))
    """

    def __init__(self, fetcher: MediaFetcher) -> None:
        self.fetcher = fetcher

    async def encode(self, output: OutputPayload) -> list[ContentBlock]:
        """
        Encode a workflow output into content blocks.

        Returns:
            At least one block; never raises
        """
        if not output.value or not output.type_tag:
            return [TextContent(type="text", text=NO_OUTPUT_MESSAGE)]

        value = output.value
        tag = output.type_tag.upper()

        try:
            media_type = MEDIA_TAGS.get(tag)
            if media_type is None:
                # TEXT, JSON, HTML and anything unrecognized pass through raw
                return [TextContent(type="text", text=value)]

            if not is_media_url(value, media_type):
                return [TextContent(type="text", text=f"[{media_type.capitalize()}] {value}")]

            blocks = await self._media_blocks(value.strip(), media_type)
        except Exception as e:
            logger.error("Error creating content blocks for %s: %s", tag, e)
            return [
                TextContent(
                    type="text",
                    text=f"[{tag}] {value}\n\n⚠️ Error processing multimedia content: {e}",
                )
            ]

        logger.debug("Encoded %s output as %s", tag, redact_inline_data(blocks))
        return blocks

    async def _media_blocks(self, url: str, media_type: str) -> list[ContentBlock]:
        mime_type = get_mime_type(url)
        label = media_type.capitalize()

        blocks: list[ContentBlock] = [
            EmbeddedResource(
                type="resource",
                resource=TextResourceContents(
                    uri=url,
                    mimeType=mime_type,
                    text=f"Generated {media_type}: {url}",
                ),
            )
        ]

        if media_type == "image":
            inline = await self._inline_block(url, media_type, mime_type)
            if inline is not None:
                blocks.append(inline)
            text = f"![Generated {label}]({url})"
        else:
            if media_type == "audio":
                inline = await self._inline_block(url, media_type, mime_type)
                if inline is not None:
                    blocks.append(inline)
            text = f"{MEDIA_EMOJI[media_type]} {label}: {url}"

        blocks.append(TextContent(type="text", text=text))
        return blocks

    async def _inline_block(
        self,
        url: str,
        media_type: str,
        mime_type: str,
    ) -> ImageContent | AudioContent | None:
        """Fetch and wrap media as base64; None when the fetch fails."""
        try:
            data = await self.fetcher.fetch_base64(url)
        except FetchError as e:
            logger.warning("Skipping inline %s for %s: %s", media_type, url, e.message)
            return None

        if media_type == "image":
            return ImageContent(type="image", data=data, mimeType=mime_type)
        return AudioContent(type="audio", data=data, mimeType=mime_type)
