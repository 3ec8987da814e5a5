"""
Core domain exceptions.

These exceptions are transport-agnostic and should be caught by the server
layer to convert into response envelopes or HTTP status codes.
"""


class CoreError(Exception):
    """Base exception for all core errors."""

    pass


class NotFoundError(CoreError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class InvalidOperationError(CoreError):
    """Raised when an operation cannot be performed in the current state."""

    pass


class GuardViolationError(InvalidOperationError):
    """Raised when a lifecycle guard rejects an operation for the agent's status."""

    def __init__(self, operation: str, status: str):
        self.operation = operation
        self.status = status
        super().__init__(f"Cannot {operation} agent in status: {status}")


class SessionError(CoreError):
    """Raised when an agent session rejects a prompt or fails to start."""

    pass


class WorkspaceError(CoreError):
    """Raised when a version-control workspace command fails."""

    pass
