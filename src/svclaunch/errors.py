"""Launch error taxonomy.

Every error below is fatal to a launch: nothing in svclaunch retries or
degrades. The entry point logs the message and exits with status 1.
"""


class LaunchError(Exception):
    """Base exception for all launch failures."""
    pass


class MissingConfiguration(LaunchError):
    """Raised when a required environment value or indirection target is absent."""

    def __init__(self, variable: str, detail: str | None = None):
        self.variable = variable
        message = f"Required configuration '{variable}' is not set"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class InvalidPort(LaunchError):
    """Raised when a resolved port is not an integer in 1..65535."""

    def __init__(self, role: str, value: object, source: str | None = None):
        self.role = role
        self.value = value
        self.source = source
        where = f" from {source}" if source else ""
        super().__init__(f"Invalid port for '{role}'{where}: {value!r}")


class ExternalToolFailure(LaunchError):
    """Raised when a helper tool is missing, exits nonzero, or returns no value."""

    def __init__(self, tool: str, returncode: int | None = None, detail: str | None = None):
        self.tool = tool
        self.returncode = returncode
        message = f"Helper '{tool}' failed"
        if returncode is not None:
            message = f"{message} with exit code {returncode}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class LaunchFailure(LaunchError):
    """Raised when the target, its start helper or a file it needs cannot be set up."""
    pass
