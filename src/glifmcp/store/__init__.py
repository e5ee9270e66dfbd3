"""
Storage module for glif-mcp.

Saved tools are kept in one human-editable JSON file. Reads never fail;
writes are atomic and serialized per store instance.
"""

from glifmcp.store.saved import (
    DecodeResult,
    SavedToolStore,
    decode_saved_tools,
    encode_saved_tools,
)

__all__ = [
    "DecodeResult",
    "SavedToolStore",
    "decode_saved_tools",
    "encode_saved_tools",
]
