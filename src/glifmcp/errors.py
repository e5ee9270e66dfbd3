"""
Exception hierarchy for glif-mcp.

All glif-mcp exceptions inherit from GlifMcpError, allowing callers to catch
every project-specific failure with a single except clause.

Exception Categories:
    - ToolNotFoundError: No tool resolves to the requested name
    - ToolInvalidArgsError: Call arguments do not match the tool's schema
    - ResourceNotSupportedError: A resource URI has an unknown scheme
    - PromptNotFoundError: No prompt has the requested name
    - UpstreamError: The workflow API failed
    - StoreWriteError: The saved-tools file could not be written
    - FetchError: A media URL could not be fetched safely

Protocol Mapping:
    Errors that reach the MCP client are converted with to_mcp_error().
    Fetch errors never reach the client; the media encoder degrades instead.
"""

from dataclasses import dataclass, field
from typing import Any

from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST, METHOD_NOT_FOUND, ErrorData


# =============================================================================
# Error Codes
# =============================================================================

# Tool, resource and prompt errors: 2xxx
ERROR_TOOL_NOT_FOUND = 2001
ERROR_TOOL_INVALID_ARGS = 2002
ERROR_RESOURCE_UNSUPPORTED = 2003
ERROR_PROMPT_NOT_FOUND = 2004

# Upstream errors: 3xxx
ERROR_UPSTREAM_FAILED = 3001

# Store errors: 4xxx
ERROR_STORE_WRITE = 4001

# Fetch errors: 5xxx
ERROR_FETCH_FAILED = 5001
ERROR_FETCH_UNSAFE_URL = 5002
ERROR_FETCH_TOO_LARGE = 5003
ERROR_FETCH_TIMEOUT = 5004


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class GlifMcpError(Exception):
    """
    Base exception for all glif-mcp errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    # JSON-RPC error code used when this error is surfaced to an MCP client
    rpc_code = INTERNAL_ERROR

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }

    def to_mcp_error(self) -> McpError:
        """Convert to the MCP SDK's typed protocol error."""
        return McpError(
            ErrorData(code=self.rpc_code, message=self.message, data=self.to_dict())
        )


# =============================================================================
# Tool Errors
# =============================================================================


@dataclass
class ToolError(GlifMcpError):
    """
    Base class for tool resolution and argument errors.

    Attributes:
        tool: Name of the tool involved
    """

    tool: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context["tool"] = self.tool


@dataclass
class ToolNotFoundError(ToolError):
    """Raised when no source provides a tool with the requested name."""

    rpc_code = METHOD_NOT_FOUND

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Unknown tool: {self.tool}"
        if self.code == 0:
            self.code = ERROR_TOOL_NOT_FOUND
        if not self.suggestion:
            self.suggestion = "List the available tools; optional groups may be disabled"
        super().__post_init__()


@dataclass
class ToolInvalidArgsError(ToolError):
    """Raised when call arguments do not validate against the tool's schema."""

    validation_error: str = ""

    rpc_code = INVALID_PARAMS

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid arguments for {self.tool}: {self.validation_error}"
        if self.code == 0:
            self.code = ERROR_TOOL_INVALID_ARGS
        super().__post_init__()
        self.context["validation_error"] = self.validation_error


# =============================================================================
# Resource and Prompt Errors
# =============================================================================


@dataclass
class ResourceNotSupportedError(GlifMcpError):
    """
    Raised when a resource URI uses a scheme the server doesn't serve.

    Attributes:
        uri: The requested resource URI
    """

    uri: str = ""

    rpc_code = INVALID_REQUEST

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Unsupported resource URI: {self.uri}"
        if self.code == 0:
            self.code = ERROR_RESOURCE_UNSUPPORTED
        if not self.suggestion:
            self.suggestion = "Use glif://<id>, glifRun://<id> or glifUser://<id>"
        self.context["uri"] = self.uri


@dataclass
class PromptNotFoundError(GlifMcpError):
    """Raised when a prompt name isn't one the server offers."""

    prompt: str = ""

    rpc_code = INVALID_PARAMS

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Unknown prompt: {self.prompt}"
        if self.code == 0:
            self.code = ERROR_PROMPT_NOT_FOUND
        self.context["prompt"] = self.prompt


# =============================================================================
# Upstream Errors
# =============================================================================


@dataclass
class UpstreamError(GlifMcpError):
    """
    Raised when the workflow API call behind a tool fails.

    The upstream message is carried through so the client sees the real cause.
    """

    operation: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"API error: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_UPSTREAM_FAILED
        self.context.update({
            "operation": self.operation,
            "underlying_error": self.underlying_error,
        })


# =============================================================================
# Store Errors
# =============================================================================


@dataclass
class StoreWriteError(GlifMcpError):
    """Raised when the saved-tools file cannot be written."""

    path: str = ""
    operation: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to {self.operation} saved tools at {self.path}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_STORE_WRITE
        if not self.suggestion:
            self.suggestion = "Check that the directory exists and is writable"
        self.context.update({
            "path": self.path,
            "operation": self.operation,
            "underlying_error": self.underlying_error,
        })


# =============================================================================
# Fetch Errors
# =============================================================================


@dataclass
class FetchError(GlifMcpError):
    """
    Base class for media fetch failures.

    Attributes:
        url: The URL that was being fetched
    """

    url: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"URL conversion failed: {self.url}"
        if self.code == 0:
            self.code = ERROR_FETCH_FAILED
        self.context["url"] = self.url


@dataclass
class UnsafeUrlError(FetchError):
    """Raised before any network I/O when a URL fails the SSRF checks."""

    reason: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Unsafe URL {self.url}: {self.reason}"
        if self.code == 0:
            self.code = ERROR_FETCH_UNSAFE_URL
        super().__post_init__()
        self.context["reason"] = self.reason


@dataclass
class MediaTooLargeError(FetchError):
    """Raised when a declared or received body exceeds the size ceiling."""

    size_bytes: int = 0
    max_bytes: int = 0

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"File too large: {self.size_bytes} bytes (max {format_mib(self.max_bytes)})"
        if self.code == 0:
            self.code = ERROR_FETCH_TOO_LARGE
        super().__post_init__()
        self.context.update({"size_bytes": self.size_bytes, "max_bytes": self.max_bytes})


@dataclass
class FetchTimeoutError(FetchError):
    """Raised when a fetch exceeds its wall-clock timeout."""

    timeout_seconds: float = 0

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Request timeout after {self.timeout_seconds:g} seconds"
        if self.code == 0:
            self.code = ERROR_FETCH_TIMEOUT
        super().__post_init__()
        self.context["timeout_seconds"] = self.timeout_seconds


def format_mib(num_bytes: int) -> str:
    """Render a byte ceiling the way users configure it (e.g. 10MB)."""
    return f"{num_bytes / (1024 * 1024):g}MB"
