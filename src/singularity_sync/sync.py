"""Sync orchestration across the images of a manifest."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .core.dispatcher import JobDispatcher
from .core.filters import select_tags
from .core.registry_client import RegistryClient
from .core.scanner import scan_high_water_mark
from .core.types import EPOCH, ErrorPolicy, ImageReference, JobDescriptor, SyncOptions
from .exceptions import SyncError, TargetDirectoryError
from .utils.reference import parse_image_reference

logger = logging.getLogger(__name__)


@dataclass
class ImageResult:
    """Outcome of syncing one manifest entry."""

    reference: str
    jobs: List[JobDescriptor] = field(default_factory=list)
    error: Optional[SyncError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SyncReport:
    """Per-image outcomes of a sync run, in manifest order."""

    results: List[ImageResult] = field(default_factory=list)

    @property
    def failures(self) -> List[ImageResult]:
        return [result for result in self.results if not result.ok]

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def job_count(self) -> int:
        return sum(len(result.jobs) for result in self.results)


def ensure_target_directory(
    directory: Union[str, Path], reference: ImageReference, options: SyncOptions
) -> bool:
    """Make sure the repository's sync target exists.

    Args:
        directory: Base sync directory
        reference: Image being synced
        options: Sync options (force creates, dry-run only pretends to)

    Returns:
        True if the directory exists on disk afterwards

    Raises:
        TargetDirectoryError: If it is missing without force, or cannot be created
    """
    target = Path(directory) / reference.repository
    if target.is_dir():
        return True

    if not options.force:
        raise TargetDirectoryError(f"{target} is not a directory")

    if options.dry_run:
        logger.info(f"Would create directory {target}")
        return False

    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise TargetDirectoryError(f"Could not create directory {target}: {e}") from e

    logger.info(f"Created directory {target}")
    return True


async def sync_image(
    reference: ImageReference,
    directory: Union[str, Path],
    options: SyncOptions,
    client: RegistryClient,
    dispatcher: JobDispatcher,
    result: Optional[ImageResult] = None,
) -> List[JobDescriptor]:
    """Sync every new tag of a single image.

    Args:
        reference: Image to sync
        directory: Base sync directory
        options: Sync options
        client: Open registry client
        dispatcher: Job dispatcher
        result: Optional result that collects dispatched jobs as they succeed

    Returns:
        Jobs dispatched for this image, in order

    Raises:
        SyncError: On the first failure; later tags are not attempted
    """
    target = Path(directory) / reference.repository
    exists = ensure_target_directory(directory, reference, options)

    mark = scan_high_water_mark(target, reference.image) if exists else EPOCH

    tags = await client.list_tags(reference.repository, reference.image)
    selected = select_tags(tags, mark, options.banned_substrings, options.first_sync)
    logger.info(
        f"{reference}: {len(selected)} of {len(tags)} tags selected"
        + (" (first sync)" if mark == EPOCH else "")
    )

    jobs = result.jobs if result is not None else []
    for tag in selected:
        job = JobDescriptor.create(target, reference, tag.name, force=options.force)
        await dispatcher.dispatch(job)
        jobs.append(job)

    return jobs


async def sync_manifest(
    references: Iterable[str],
    directory: Union[str, Path],
    options: SyncOptions,
    client: RegistryClient,
    dispatcher: JobDispatcher,
) -> SyncReport:
    """Sync every image of a manifest, one at a time, in order.

    With the ``abort`` error policy the first failing image stops the run and
    its error is raised. With ``skip`` the failure is recorded in the report
    and the run continues with the next image.

    Args:
        references: Manifest entries (``repository/image``)
        directory: Base sync directory
        options: Sync options
        client: Open registry client
        dispatcher: Job dispatcher

    Returns:
        SyncReport with one result per manifest entry processed

    Raises:
        SyncError: First image failure, under the abort policy
    """
    report = SyncReport()
    for entry in references:
        result = ImageResult(reference=str(entry))
        report.results.append(result)
        try:
            reference = parse_image_reference(entry)
            await sync_image(reference, directory, options, client, dispatcher, result)
        except SyncError as e:
            result.error = e
            logger.error(f"Failed to sync {entry}: {e}")
            if options.error_policy is ErrorPolicy.ABORT:
                raise
            logger.info(f"Skipping {entry} and continuing")

    return report
