"""Tag relevance filtering and the first-sync bootstrap cap."""

from datetime import datetime
from typing import Iterable, List

from .types import EPOCH, Tag


def is_banned(name: str, banned_substrings: Iterable[str]) -> bool:
    """Check whether a tag name contains any banned substring (case-sensitive)."""
    return any(banned in name for banned in banned_substrings)


def filter_tags(
    tags: Iterable[Tag], mark: datetime, banned_substrings: Iterable[str]
) -> List[Tag]:
    """Keep tags newer than the high-water mark whose names are not banned.

    Args:
        tags: Tags in registry order
        mark: High-water mark
        banned_substrings: Disqualifying name fragments

    Returns:
        Remaining tags, order preserved
    """
    banned = tuple(banned_substrings)
    return [
        tag
        for tag in tags
        if tag.last_updated > mark and not is_banned(tag.name, banned)
    ]


def apply_bootstrap(tags: List[Tag], mark: datetime, first_sync: int) -> List[Tag]:
    """Cap the first sync of an image to ``first_sync`` tags.

    Only a never-synced image (mark is EPOCH) is capped. The first entries
    in registry order are kept, not the most recent ones.
    """
    if mark == EPOCH:
        return tags[: max(first_sync, 0)]
    return tags


def select_tags(
    tags: Iterable[Tag],
    mark: datetime,
    banned_substrings: Iterable[str],
    first_sync: int,
) -> List[Tag]:
    """Produce the ordered list of tags to build.

    Args:
        tags: Full, unfiltered registry listing
        mark: High-water mark for the image
        banned_substrings: Disqualifying name fragments
        first_sync: Bootstrap cap for never-synced images

    Returns:
        Tags to build, in registry order
    """
    return apply_bootstrap(filter_tags(tags, mark, banned_substrings), mark, first_sync)
