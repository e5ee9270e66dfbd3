"""
Unit tests for the error hierarchy.

Tests cover:
- Base GlifMcpError formatting and serialization
- Default messages and codes per subclass
- Conversion to MCP protocol errors
"""

import pytest
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND

from glifmcp.errors import (
    ERROR_FETCH_TIMEOUT,
    ERROR_FETCH_TOO_LARGE,
    ERROR_STORE_WRITE,
    ERROR_TOOL_NOT_FOUND,
    FetchError,
    FetchTimeoutError,
    GlifMcpError,
    MediaTooLargeError,
    StoreWriteError,
    ToolInvalidArgsError,
    ToolNotFoundError,
    UnsafeUrlError,
    UpstreamError,
    format_mib,
)


class TestGlifMcpError:
    """Tests for the base error."""

    def test_basic_error(self) -> None:
        err = GlifMcpError(message="Something went wrong", code=9999)
        assert err.message == "Something went wrong"
        assert err.code == 9999
        assert err.suggestion is None
        assert err.context == {}

    def test_str_includes_code_and_suggestion(self) -> None:
        err = GlifMcpError(message="Failed", code=1, suggestion="Try again")
        assert str(err) == "[E1] Failed\nSuggestion: Try again"

    def test_to_dict(self) -> None:
        err = GlifMcpError(message="Failed", code=1, context={"k": "v"})
        assert err.to_dict() == {
            "error_type": "GlifMcpError",
            "message": "Failed",
            "code": 1,
            "suggestion": None,
            "context": {"k": "v"},
        }

    def test_is_exception(self) -> None:
        with pytest.raises(GlifMcpError):
            raise UpstreamError(operation="run", underlying_error="boom")


class TestSubclassDefaults:
    """Tests for default messages, codes and context."""

    def test_tool_not_found(self) -> None:
        err = ToolNotFoundError(tool="nope")
        assert err.message == "Unknown tool: nope"
        assert err.code == ERROR_TOOL_NOT_FOUND
        assert err.context["tool"] == "nope"

    def test_invalid_args(self) -> None:
        err = ToolInvalidArgsError(tool="run_glif", validation_error="inputs: Field required")
        assert err.message == "Invalid arguments for run_glif: inputs: Field required"
        assert err.context["validation_error"] == "inputs: Field required"

    def test_upstream(self) -> None:
        err = UpstreamError(operation="search", underlying_error="503 Service Unavailable")
        assert err.message == "API error: 503 Service Unavailable"
        assert err.context == {"operation": "search", "underlying_error": "503 Service Unavailable"}

    def test_store_write(self) -> None:
        err = StoreWriteError(path="/x/saved.json", operation="save", underlying_error="read-only")
        assert err.code == ERROR_STORE_WRITE
        assert "/x/saved.json" in err.message
        assert err.suggestion

    def test_fetch_default_message(self) -> None:
        err = FetchError(url="https://x.com/a.png")
        assert err.message == "URL conversion failed: https://x.com/a.png"

    def test_unsafe_url_is_fetch_error(self) -> None:
        err = UnsafeUrlError(url="http://127.0.0.1/", reason="private_host")
        assert isinstance(err, FetchError)
        assert err.context == {"url": "http://127.0.0.1/", "reason": "private_host"}

    def test_media_too_large(self) -> None:
        err = MediaTooLargeError(url="u", size_bytes=20 * 1024 * 1024, max_bytes=10 * 1024 * 1024)
        assert err.message == "File too large: 20971520 bytes (max 10MB)"
        assert err.code == ERROR_FETCH_TOO_LARGE

    def test_timeout(self) -> None:
        err = FetchTimeoutError(url="u", timeout_seconds=30)
        assert err.message == "Request timeout after 30 seconds"
        assert err.code == ERROR_FETCH_TIMEOUT

    @pytest.mark.parametrize(
        "num_bytes,expected",
        [(10 * 1024 * 1024, "10MB"), (512 * 1024, "0.5MB"), (1024 * 1024, "1MB")],
    )
    def test_format_mib(self, num_bytes: int, expected: str) -> None:
        assert format_mib(num_bytes) == expected


class TestToMcpError:
    """Tests for conversion to McpError."""

    @pytest.mark.parametrize(
        "err,rpc_code",
        [
            (ToolNotFoundError(tool="x"), METHOD_NOT_FOUND),
            (ToolInvalidArgsError(tool="x", validation_error="bad"), INVALID_PARAMS),
            (UpstreamError(operation="run", underlying_error="boom"), INTERNAL_ERROR),
            (StoreWriteError(path="p", operation="save", underlying_error="e"), INTERNAL_ERROR),
        ],
    )
    def test_rpc_codes(self, err: GlifMcpError, rpc_code: int) -> None:
        mcp_error = err.to_mcp_error()
        assert isinstance(mcp_error, McpError)
        assert mcp_error.error.code == rpc_code
        assert mcp_error.error.message == err.message
        assert mcp_error.error.data["code"] == err.code
