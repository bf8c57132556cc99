# folder_size_agent/core/exceptions.py

from typing import Any, Dict, Optional


class FolderSizeError(Exception):
    """Base class for everything that can end a folder size run."""

    def __init__(self, message: str, operation: str = "unknown"):
        self.operation = operation
        super().__init__(message)


class TransportError(FolderSizeError):
    """Network-level failure: timeout, refused connection, malformed response."""


class ApplianceError(FolderSizeError):
    """The appliance answered success=false; carries its error payload."""

    def __init__(
        self,
        message: str,
        operation: str = "unknown",
        error: Optional[Dict[str, Any]] = None,
        description: Optional[str] = None,
    ):
        self.error = error or {}
        self.description = description
        detail = f" (error={self.error}"
        detail += f", {description})" if description else ")"
        super().__init__(f"{message}{detail}", operation)


class DiscoveryError(ApplianceError):
    """API route table could not be fetched or is incomplete."""


class AuthenticationError(ApplianceError):
    """Credentials were rejected."""


class TaskStartError(ApplianceError):
    """The size task could not be started."""


class TaskPollApplicationError(ApplianceError):
    """A status poll returned success=false. Recoverable by restarting the run."""


class ProtocolError(FolderSizeError):
    """Response was well-formed but lacked an expected field."""


class UnexpectedError(FolderSizeError):
    """Anything else that escaped a run."""


class InvalidTransitionError(Exception):
    """Raised when a run state transition is not allowed."""

    def __init__(self, from_state: str, to_state: str):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid run state transition: Cannot move from '{from_state}' to '{to_state}'."
        )
