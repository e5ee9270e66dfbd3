"""
Media module for glif-mcp.

Turns workflow outputs into MCP content blocks. Remote images and audio
are fetched and inlined as base64 through SecureFetcher, which refuses
non-http(s) schemes and private or local hosts and caps download size.
"""

from glifmcp.media.encoder import (
    ContentBlock,
    MediaEncoder,
    get_mime_type,
    redact_inline_data,
    structured_content,
)
from glifmcp.media.fetcher import SecureFetcher, check_url, is_private_ip

__all__ = [
    "ContentBlock",
    "MediaEncoder",
    "SecureFetcher",
    "check_url",
    "get_mime_type",
    "is_private_ip",
    "redact_inline_data",
    "structured_content",
]
