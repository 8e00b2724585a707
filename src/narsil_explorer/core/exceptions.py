"""
Exception hierarchy for narsil-explorer.

Only the backend client raises these. The explorer session catches them at
its boundary and turns them into view state, so nothing here ever escapes
into rendering code.
"""


class ExplorerError(Exception):
    """Base exception for all explorer errors."""


class BackendUnavailableError(ExplorerError):
    """The narsil-mcp server could not be reached."""

    def __init__(self, base_url: str, reason: str = ""):
        self.base_url = base_url
        self.reason = reason
        message = f"Could not connect to narsil-mcp at {base_url}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class GraphFetchError(ExplorerError):
    """A graph query failed in transport or returned a malformed body."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ConfigError(ExplorerError):
    """The explorer settings file is malformed."""
