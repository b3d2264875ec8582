"""AllMind exception hierarchy.

All AllMind-specific exceptions inherit from AllmindError. Inside the
reconciliation core they are caught at the probe boundary and turned into
data; only EntityNotFoundError reaches the query surface.
"""


class AllmindError(Exception):
    """Base exception for all AllMind errors."""

    def __init__(self, message: str = "", *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class ProbeError(AllmindError):
    """A live-state probe could not produce a result."""


class ProbeTimeoutError(ProbeError):
    """A probe exceeded its time budget."""

    def __init__(self, message: str = "", *, retryable: bool = True) -> None:
        super().__init__(message, retryable=retryable)


class CommandError(ProbeError):
    """An external command was missing or exited unsuccessfully."""


class UpstreamError(ProbeError):
    """Error talking to an HTTP upstream such as the chinvex API."""

    def __init__(self, message: str = "", *, retryable: bool = True) -> None:
        super().__init__(message, retryable=retryable)


class RegistryError(AllmindError):
    """The strap registry document exists but cannot be read or parsed."""


class ConfigError(AllmindError):
    """Invalid or missing configuration."""


class EntityNotFoundError(AllmindError):
    """No record with the requested name exists in the current snapshot."""
