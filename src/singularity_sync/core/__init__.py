"""Core sync engine components."""

from .dispatcher import JobDispatcher, run_process
from .filters import select_tags
from .registry_client import RegistryClient
from .scanner import scan_high_water_mark
from .types import (
    EPOCH,
    ErrorPolicy,
    ImageReference,
    JobDescriptor,
    SchedulerConfig,
    SyncOptions,
    Tag,
)

__all__ = [
    "EPOCH",
    "ErrorPolicy",
    "ImageReference",
    "JobDescriptor",
    "JobDispatcher",
    "RegistryClient",
    "SchedulerConfig",
    "SyncOptions",
    "Tag",
    "run_process",
    "scan_high_water_mark",
    "select_tags",
]
