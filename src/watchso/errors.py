"""Errors raised by watchso."""

from pathlib import Path


class WatchError(Exception):
    """Base class for all watchso errors."""

    pass


class InvalidProjectDirectory(WatchError):
    """Raised when the directory does not contain a recognized Solana project."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Invalid program directory: `{path}`")


class ToolNotFound(WatchError):
    """Raised when a required command line tool is not installed."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Command not found: `{name}`")


class IdentityLookupFailed(WatchError):
    """Raised when the program id could not be derived from a keypair file."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Could not get keypair file: `{reason.strip()}`")


class ManifestError(WatchError):
    """Raised when a Cargo manifest cannot be read or parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not read manifest {path}: {reason}")


class CommandError(WatchError):
    """Raised when a command could not be started at all."""

    def __init__(self, command: str, reason: str):
        self.command = command
        self.reason = reason
        super().__init__(f"Failed to run `{command}`: {reason}")


class ProgramNotFound(WatchError):
    """Raised when a changed file cannot be traced back to its program."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Could not find the program of `{path}`")
