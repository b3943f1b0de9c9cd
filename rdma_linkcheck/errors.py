"""Exception hierarchy for rdma_linkcheck.

Setup errors carry the process exit code; per-port errors never terminate
the run and are turned into degraded report rows instead.
"""


class LinkCheckError(Exception):
    """Base exception for all link check errors."""

    exit_code: int = 1

    def __init__(self, message: str, exit_code: int | None = None) -> None:
        if exit_code is not None:
            self.exit_code = exit_code
        super().__init__(message)


class ConfigurationError(LinkCheckError):
    """Invalid configuration value or command-line option."""

    exit_code = 2


class PrivilegeError(LinkCheckError):
    """Not running with the privileges the diagnostic command needs."""


class DiscoveryError(LinkCheckError):
    """Adapter ports could not be enumerated."""


class HostContextError(LinkCheckError):
    """Chassis serial or hostname could not be read."""


class PortError(LinkCheckError):
    """Failure confined to a single port's pipeline."""


class CollectionError(PortError):
    """The diagnostic command could not be run for a port."""


class CollectionTimeoutError(CollectionError):
    """The diagnostic command did not finish within its timeout."""


class InvalidOutputError(CollectionError):
    """The diagnostic command ran but did not emit a usable document."""


class ParseError(PortError):
    """A required telemetry field is missing or malformed."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")
