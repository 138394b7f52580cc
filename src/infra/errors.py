"""Error taxonomy for operator workflows.

Infrastructure code raises these; the CLI layer renders them and maps
each one to its process exit code.
"""


class OperationError(Exception):
    """Raised when an operation cannot continue."""

    exit_code: int = 1

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class PreconditionMissing(OperationError):
    """A required file or directory is absent."""


class UserDeclined(OperationError):
    """The operator declined a confirmation. Not a failure."""

    exit_code = 0


class ExternalCommandFailed(OperationError):
    """A database, version-control or build command exited non-zero."""


class AmbiguousRecovery(OperationError):
    """A patch failed both strict and three-way application.

    Resolution is left to the operator; nothing is retried.
    """
