"""singularity-sync - incremental Docker Hub to Singularity image mirroring."""

__version__ = "0.3.0"

from .core.dispatcher import JobDispatcher
from .core.registry_client import RegistryClient
from .core.types import ErrorPolicy, ImageReference, JobDescriptor, SyncOptions, Tag
from .exceptions import (
    JobExecutionError,
    ManifestError,
    ReferenceParseError,
    RegistryConnectionError,
    RegistryError,
    RegistryResponseError,
    SyncError,
    TargetDirectoryError,
)
from .manifest import load_manifest
from .sync import SyncReport, sync_image, sync_manifest

__all__ = [
    "ErrorPolicy",
    "ImageReference",
    "JobDescriptor",
    "JobDispatcher",
    "JobExecutionError",
    "ManifestError",
    "ReferenceParseError",
    "RegistryClient",
    "RegistryConnectionError",
    "RegistryError",
    "RegistryResponseError",
    "SyncError",
    "SyncOptions",
    "SyncReport",
    "Tag",
    "TargetDirectoryError",
    "load_manifest",
    "sync_image",
    "sync_manifest",
]
