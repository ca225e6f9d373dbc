"""
Standard exit codes and error types for gitax commands.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
REPOSITORY_ERROR = 64    # Repository missing, malformed or unreadable
OBJECT_NOT_FOUND = 65    # Commit or blob id resolves to nothing
CHECKOUT_CONFLICT = 66   # Checkout refused because of local changes
CONFIG_ERROR = 67        # Configuration file error
PERMISSION_ERROR = 68    # Insufficient permissions
IO_ERROR = 74            # Input/output error (EX_IOERR)
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': IO_ERROR,
    'IsADirectoryError': IO_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'RepositoryIOError': IO_ERROR,
    'OSError': IO_ERROR,
    'UnicodeDecodeError': IO_ERROR,
    'NotGitRepository': REPOSITORY_ERROR,
    'ValueError': USAGE_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: Exception) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class RepositoryError(CommandError):
    """Raised when the repository backend fails (malformed repo, bad init)."""
    def __init__(self, message: str, exit_code: int = REPOSITORY_ERROR):
        super().__init__(message, exit_code)


class ObjectNotFoundError(RepositoryError):
    """Raised when a commit or content id cannot be resolved."""
    def __init__(self, object_id: str, message: Optional[str] = None):
        super().__init__(message or f"Object not found: {object_id}", OBJECT_NOT_FOUND)
        self.object_id = object_id


class CheckoutConflictError(RepositoryError):
    """Raised when a conservative checkout would overwrite local changes."""
    def __init__(self, paths, message: Optional[str] = None):
        self.paths = list(paths)
        super().__init__(
            message or f"Checkout would overwrite local changes: {', '.join(self.paths)}",
            CHECKOUT_CONFLICT,
        )


class ForcedCheckoutError(RepositoryError):
    """
    Raised when a forced checkout still reports a conflict.

    Forced checkouts overwrite the working tree, so this signals a broken
    contract in the backend rather than a condition callers can recover from.
    """
    def __init__(self, message: str):
        super().__init__(message, GENERAL_ERROR)


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class RepositoryIOError(OSError):
    """
    I/O failure while opening a repository or walking its history.

    Subclasses OSError so callers handling plain I/O errors still catch it,
    while history callers can tell it apart from backend errors.
    """
