"""
Custom exceptions for the VideoFlux package.

All VideoFlux-specific exceptions inherit from VideoFluxError to allow
catching all package exceptions with a single except clause.

These exceptions never cross the session boundary: every component that
talks to an external tool catches them and turns them into a status
variant or a result value.
"""

from typing import Optional, Sequence


class VideoFluxError(Exception):
    """Base exception for all VideoFlux errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


# Command channel errors
class BridgeError(VideoFluxError):
    """Base class for errors talking to an external tool."""

    pass


class ToolNotInstalledError(BridgeError):
    """The external executable could not be found."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(
            "Tool not installed",
            f"'{tool}' was not found on PATH"
        )


class TransportError(BridgeError):
    """A command could not be executed at all."""

    def __init__(self, command: Sequence[str], reason: Optional[str] = None):
        self.command = list(command)
        details = f"Command: {' '.join(self.command)}"
        if reason:
            details += f", Reason: {reason}"
        super().__init__("Command failed to run", details)


class CommandTimeoutError(TransportError):
    """A command did not finish within its timeout."""

    def __init__(self, command: Sequence[str], timeout: float):
        self.timeout = timeout
        super().__init__(command, f"timed out after {timeout} seconds")


# Settings errors
class SettingsError(VideoFluxError):
    """Failed to read or write the settings document."""

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        details = f"File: {path}"
        if reason:
            details += f", Reason: {reason}"
        super().__init__("Settings error", details)
