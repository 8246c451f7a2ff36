"""Custom exceptions for dbctl."""
from typing import List, Optional, Sequence


class DbctlError(Exception):
    """Base exception for all dbctl errors."""
    pass


class ConfigError(DbctlError):
    """Raised when the environment holds an invalid setting."""
    pass


class ComposeFileNotFound(DbctlError):
    """Exception raised when compose file is not found."""
    def __init__(self, directory=None):
        self.directory = directory
        if directory:
            self.message = f"No compose file found in {directory}"
        else:
            self.message = "Compose file not found in current directory"
        super().__init__(self.message)


class ComposeParseError(DbctlError):
    """Raised when the compose file cannot be parsed."""
    pass


class RuntimeQueryError(DbctlError):
    """Raised when a call to the container runtime fails."""
    def __init__(self, command: Sequence[str], stderr: str = "", returncode: Optional[int] = None):
        self.command = list(command)
        self.stderr = stderr.strip()
        self.returncode = returncode
        message = f"Command failed: {' '.join(self.command)}"
        if self.stderr:
            message += f"\n{self.stderr}"
        super().__init__(message)


class ContainerNotFound(RuntimeQueryError):
    """Raised when the runtime reports that a container does not exist."""
    pass


class ResolutionError(DbctlError):
    """Raised when a port conflict could not be resolved"""
    def __init__(self, record, errors: List[Exception]):
        self.record = record
        self.errors = errors
        super().__init__(
            f"Could not free port {record.port.number} held by "
            f"container {record.container.name}"
        )


def handle_error(error: DbctlError) -> str:
    """
    Convert a dbctl error to a user-friendly message.

    Args:
        error: The error to handle

    Returns:
        A formatted error message
    """
    if isinstance(error, ResolutionError):
        lines = [str(error)]
        lines.extend(f"  • {e}" for e in error.errors)
        return "\n".join(lines)
    elif isinstance(error, ComposeFileNotFound):
        return (f"{error.message}\n"
                "Set DBCTL_COMPOSE_FILE or run dbctl from the project directory.")
    elif isinstance(error, RuntimeQueryError):
        return (f"{error}\n"
                "Is the container runtime installed and its daemon running?")
    else:
        return str(error)
