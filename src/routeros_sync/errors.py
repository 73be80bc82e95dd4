"""Exception hierarchy for the synchronization engine.

Transport and channel failures propagate to the caller as one of these
typed errors with the underlying message attached.
"""
from typing import Optional


class RouterOSSyncError(Exception):
    """Base class for all engine errors."""
    pass


class ConnectError(RouterOSSyncError):
    """Could not reach the device (dial failure, refused, timed out)."""
    pass


class AuthError(RouterOSSyncError):
    """The device rejected the supplied credentials."""
    pass


class ExecError(RouterOSSyncError):
    """A command on the command channel failed or could not be started."""
    pass


class ParseError(RouterOSSyncError):
    """A device version string does not match the expected grammar."""
    pass


class TransportError(RouterOSSyncError):
    """The device answered a structured API request with an error."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class NotFoundError(RouterOSSyncError):
    """The requested object does not exist on the device."""
    pass


class ValidationError(RouterOSSyncError):
    """One or more declared fields failed validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("Validation failed: " + "; ".join(errors))


class DataConsistencyError(RouterOSSyncError):
    """A filter expected to match one object matched several."""

    def __init__(self, path: str, filter: dict, count: int):
        self.path = path
        self.filter = filter
        self.count = count
        super().__init__(
            f"{count} items on {path} match filter {filter}, expected at most one"
        )


class IdentifierUnresolved(RouterOSSyncError):
    """Every candidate lookup failed to produce an identifier."""

    def __init__(self, path: str, message: str = ""):
        self.path = path
        super().__init__(message or f"Could not determine the identifier of {path}")
