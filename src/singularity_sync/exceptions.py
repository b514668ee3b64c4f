"""Custom exceptions for singularity-sync."""

from typing import Optional, Sequence


class SyncError(Exception):
    """Base exception for all sync-related errors."""

    pass


class ManifestError(SyncError):
    """Raised when the image manifest cannot be read or parsed."""

    pass


class ReferenceParseError(SyncError):
    """Raised when an image reference is not of the form repository/image."""

    pass


class TargetDirectoryError(SyncError):
    """Raised when the sync target directory is missing or cannot be created."""

    pass


class RegistryError(SyncError):
    """Base exception for registry tag discovery errors."""

    pass


class RegistryConnectionError(RegistryError):
    """Raised when the registry cannot be reached."""

    pass


class RegistryResponseError(RegistryError):
    """Raised when a registry response cannot be deserialized."""

    pass


class JobExecutionError(SyncError):
    """Raised when a build or scheduler submission fails."""

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.command = list(command) if command is not None else None
        self.returncode = returncode
