"""Exception types shared by the gateway, handlers and tool layer."""


class AdtError(Exception):
    """Base class for errors raised by abap-adt-mcp."""


class ConfigurationError(AdtError):
    """Connection settings are missing or invalid."""


class TransportError(AdtError):
    """An ADT request failed: network error, timeout or non-2xx status."""

    def __init__(self, message, status=None, body=None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.body = body

    def __repr__(self):
        return f"TransportError({self.message!r}, status={self.status!r})"


class UnknownToolError(AdtError):
    """A tool call named a tool that is not in the catalogue."""


class AdtToolError(AdtError):
    """Carries an error result's text back through the MCP server."""
