"""Local state scanning: derive the high-water mark from existing artifacts."""

import enum
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Protocol, Union

from ..exceptions import TargetDirectoryError
from .types import ARTIFACT_EXTENSION, EPOCH

logger = logging.getLogger(__name__)


class DirectoryEntry(Protocol):
    """The subset of ``os.DirEntry`` the scanner relies on."""

    name: str

    def is_file(self) -> bool: ...

    def stat(self) -> os.stat_result: ...


class EntryStatus(str, enum.Enum):
    """Outcome of classifying one directory entry."""

    MATCHED = "matched"
    NOT_A_FILE = "not a regular file"
    WRONG_EXTENSION = "wrong extension"
    OTHER_IMAGE = "belongs to another image"
    BAD_NAME = "unrepresentable file name"
    UNREADABLE = "unreadable"


@dataclass(frozen=True)
class EntryResult:
    """Classification of a single entry; ``mtime`` is set only when matched."""

    name: str
    status: EntryStatus
    mtime: Optional[datetime] = None
    error: Optional[str] = None


def classify_entry(entry: DirectoryEntry, image: str) -> EntryResult:
    """Classify a directory entry against an image name.

    Args:
        entry: Directory entry to classify
        image: Image name that must appear in the file name

    Returns:
        EntryResult describing whether the entry counts towards the mark
    """
    name = entry.name
    try:
        name.encode("utf-8")
    except UnicodeEncodeError as e:
        return EntryResult(name=repr(name), status=EntryStatus.BAD_NAME, error=str(e))

    try:
        if not entry.is_file():
            return EntryResult(name=name, status=EntryStatus.NOT_A_FILE)
    except OSError as e:
        return EntryResult(name=name, status=EntryStatus.UNREADABLE, error=str(e))

    if not name.endswith(ARTIFACT_EXTENSION):
        return EntryResult(name=name, status=EntryStatus.WRONG_EXTENSION)

    if image not in name:
        return EntryResult(name=name, status=EntryStatus.OTHER_IMAGE)

    try:
        mtime = datetime.fromtimestamp(entry.stat().st_mtime, tz=timezone.utc)
    except (OSError, OverflowError, ValueError) as e:
        return EntryResult(name=name, status=EntryStatus.UNREADABLE, error=str(e))

    return EntryResult(name=name, status=EntryStatus.MATCHED, mtime=mtime)


def high_water_mark(entries: Iterable[DirectoryEntry], image: str) -> datetime:
    """Compute the latest modification time among an image's artifacts.

    Args:
        entries: Directory listing to scan
        image: Image name

    Returns:
        Latest matching mtime, or EPOCH when nothing matched
    """
    latest = EPOCH
    for entry in entries:
        result = classify_entry(entry, image)
        if result.status is not EntryStatus.MATCHED:
            reason = result.status.value
            if result.error:
                reason = f"{reason} ({result.error})"
            logger.debug(f"Skipping {result.name}: {reason}")
            continue

        if result.mtime > latest:
            latest = result.mtime

    return latest


def iter_directory(directory: Union[str, Path]) -> Iterator[os.DirEntry]:
    """List a directory, ending the listing quietly on iteration errors.

    Args:
        directory: Directory to list

    Yields:
        Directory entries

    Raises:
        TargetDirectoryError: If the directory cannot be opened at all
    """
    try:
        iterator = os.scandir(directory)
    except OSError as e:
        raise TargetDirectoryError(f"Cannot list directory {directory}: {e}") from e

    with iterator:
        while True:
            try:
                entry = next(iterator)
            except StopIteration:
                return
            except OSError as e:
                logger.debug(f"Stopped listing {directory}: {e}")
                return
            yield entry


def scan_high_water_mark(
    directory: Union[str, Path],
    image: str,
    lister: Callable[[Union[str, Path]], Iterable[DirectoryEntry]] = iter_directory,
) -> datetime:
    """Derive the high-water mark for an image from a sync target.

    Args:
        directory: Sync target directory
        image: Image name
        lister: Directory listing function

    Returns:
        Latest matching mtime, or EPOCH when the image was never synced
    """
    mark = high_water_mark(lister(directory), image)
    if mark == EPOCH:
        logger.info(f"No synced artifacts for {image} in {directory}")
    else:
        logger.info(f"High-water mark for {image}: {mark.isoformat()}")
    return mark
