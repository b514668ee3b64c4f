"""Data types shared across the sync engine."""

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import FrozenSet

# Earliest representable timestamp; marks an image that was never synced.
EPOCH = datetime.min.replace(tzinfo=timezone.utc)

ARTIFACT_EXTENSION = ".sif"
SOURCE_SCHEME = "docker"
DEFAULT_FIRST_SYNC = 5
DEFAULT_BANNED_SUBSTRINGS: FrozenSet[str] = frozenset(
    {"latest", "dev", "rc", "test", "unstable"}
)


class ErrorPolicy(str, enum.Enum):
    """What to do with the remaining images once one image fails."""

    ABORT = "abort"
    SKIP = "skip"


@dataclass(frozen=True)
class ImageReference:
    """A syncable repository/image pair."""

    repository: str
    image: str

    def __str__(self) -> str:
        return f"{self.repository}/{self.image}"


@dataclass(frozen=True)
class Tag:
    """A registry tag with its last update time."""

    name: str
    last_updated: datetime


@dataclass(frozen=True)
class JobDescriptor:
    """Everything needed to build one image tag."""

    local_artifact_path: Path
    source_uri: str
    job_label: str
    force: bool = False

    @classmethod
    def create(
        cls,
        target_directory: Path,
        reference: ImageReference,
        tag: str,
        force: bool = False,
    ) -> "JobDescriptor":
        """Derive a descriptor for a single tag.

        Args:
            target_directory: The repository's sync target
            reference: Image being synced
            tag: Tag name
            force: Overwrite an existing artifact

        Returns:
            JobDescriptor for the tag
        """
        return cls(
            local_artifact_path=Path(target_directory)
            / f"{reference.image}-{tag}{ARTIFACT_EXTENSION}",
            source_uri=(
                f"{SOURCE_SCHEME}://{reference.repository}/{reference.image}:{tag}"
            ),
            job_label=f"{reference.repository}-{reference.image}",
            force=force,
        )


@dataclass(frozen=True)
class SyncOptions:
    """Run-wide options."""

    dry_run: bool = False
    force: bool = False
    first_sync: int = DEFAULT_FIRST_SYNC
    parallelize: bool = False
    error_policy: ErrorPolicy = ErrorPolicy.ABORT
    banned_substrings: FrozenSet[str] = field(
        default_factory=lambda: DEFAULT_BANNED_SUBSTRINGS
    )


@dataclass(frozen=True)
class SchedulerConfig:
    """Executables and batch job settings, resolved once at startup."""

    memory: str = "8G"
    time_limit: str = "8:00:00"
    cache_dir: str = "${HOME}/scratch/singularity"
    tmp_dir: str = "${HOME}/scratch/tmp"
    output: str = "${HOME}/scratch/slurm-%u-%x-%j.out"
    builder: str = "singularity"
    submit: str = "sbatch"
