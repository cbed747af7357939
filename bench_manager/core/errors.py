"""Error types for bench operations.

Every error raised by the reconciliation engine derives from BenchError so
the CLI can map it to a non-zero exit code with a readable message. Messages
always name the bench, tool or bay concerned.
"""

from typing import Optional


class BenchError(Exception):
    """Base exception for all bench errors."""

    def __init__(self, message: str, subject: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.subject = subject

    def __str__(self) -> str:
        return self.message


class NotFoundError(BenchError):
    """A bench, tool or record declaration is missing."""


class ConflictError(BenchError):
    """A declaration already exists (bench, tool, tool-in-bay)."""


class ParseError(BenchError, ValueError):
    """A persisted record or window manager response is malformed."""


class BenchIOError(BenchError, OSError):
    """An external endpoint could not be reached."""


class SwayConnectionError(BenchIOError):
    """The sway/i3 IPC socket is unreachable or the query failed."""


class SwayCommandError(BenchError):
    """The window manager rejected a command.

    Attributes:
        command: Command string that was sent
        diagnostic: Error text reported by the window manager
    """

    def __init__(self, command: str, diagnostic: Optional[str] = None):
        self.command = command
        self.diagnostic = diagnostic or "unknown error"
        super().__init__(f"sway rejected '{command}': {self.diagnostic}")


class LaunchError(BenchError):
    """An application process could not be spawned."""


class LaunchTimeoutError(BenchError, TimeoutError):
    """No new window appeared before the launch deadline."""


class InvalidNameError(BenchError, ValueError):
    """A bench, bay or tool name was rejected by validation."""
