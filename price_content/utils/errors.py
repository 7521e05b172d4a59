"""
Custom exceptions for the price content MCP server.

Extraction failures are not exceptions: the transformer returns them as
plain ``{"error": ..., "message": ...}`` values. Everything defined here is
raised and caught once at the tool dispatch boundary.
"""

from typing import Any, Optional


class PriceContentException(Exception):
    """Base exception for all price-content errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message; details stay available on ``.details``."""
        return self.message


# =============================================================================
# Tool Dispatch Exceptions
# =============================================================================


class ValidationError(PriceContentException):
    """Tool arguments rejected by the declared argument model."""

    def __init__(self, tool_name: str, diagnostic: str) -> None:
        """Initialize with the tool name and the validator's diagnostic text."""
        message = f"Invalid arguments for {tool_name}: {diagnostic}"
        super().__init__(message, {"tool_name": tool_name})


class UnknownOperationError(PriceContentException):
    """Requested tool is not served."""

    def __init__(self, tool_name: str) -> None:
        """Initialize with tool name."""
        message = f"Unknown tool: {tool_name}"
        super().__init__(message, {"tool_name": tool_name})


# =============================================================================
# Fetch Exceptions
# =============================================================================


class FetchError(PriceContentException):
    """Base exception for outbound HTTP failures."""

    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(f"Failed to fetch API data: {reason}", details)
        self.reason = reason


class NetworkError(FetchError):
    """The transport could not complete the request."""

    pass


class HttpStatusError(FetchError):
    """The server answered with a non-2xx status."""

    def __init__(self, status: int, url: str) -> None:
        """Initialize with the response status."""
        super().__init__(f"API request failed with status: {status}", {"status": status, "url": url})
        self.status = status


class ResponseDecodeError(FetchError):
    """A response announced as JSON could not be decoded."""

    pass


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(PriceContentException):
    """Configuration error."""

    pass
