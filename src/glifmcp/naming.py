"""
Tool name sanitization.

Every tool name exposed to an MCP client must match ^[A-Za-z0-9_-]{1,64}$.
User-supplied names (saved tools, bot skills, imported ids) are coerced into
that grammar instead of being rejected.
"""

import hashlib
import re

MAX_TOOL_NAME_LENGTH = 64

TOOL_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

_WHITESPACE_RUN = re.compile(r"\s+")
_DISALLOWED_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_tool_name(raw: str) -> str:
    """
    Map arbitrary text into the tool name grammar.

    Whitespace runs become "_", everything outside [A-Za-z0-9_-] is dropped,
    the result is cut to 64 characters and trailing "_" removed. The function
    is total and idempotent; it returns "" when nothing usable remains.

    Args:
        raw: Any text

    Returns:
        A string matching ^[A-Za-z0-9_-]{0,64}$
    """
    name = _WHITESPACE_RUN.sub("_", raw)
    name = _DISALLOWED_CHARS.sub("", name)
    return name[:MAX_TOOL_NAME_LENGTH].rstrip("_")


def is_valid_tool_name(name: str) -> bool:
    """Check a name against the tool name grammar."""
    return bool(TOOL_NAME_PATTERN.match(name))


def ensure_tool_name(raw: str, source_id: str = "") -> str:
    """
    Sanitize a name and never return an empty one.

    Falls back to glif_<source id>, then to a name derived from a hash of the
    inputs, so an unnamed tool can't end up in the dispatch table.
    """
    name = sanitize_tool_name(raw)
    if name:
        return name

    name = sanitize_tool_name(f"glif_{source_id}") if source_id else ""
    if name and name != "glif":
        return name

    digest = hashlib.sha256(f"{raw}\x00{source_id}".encode()).hexdigest()[:12]
    return f"tool_{digest}"
