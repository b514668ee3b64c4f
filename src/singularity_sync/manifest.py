"""Image manifest acquisition and parsing."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

import aiofiles
import aiohttp
import yaml

from .exceptions import ManifestError

logger = logging.getLogger(__name__)

MANIFEST_KEY = "docker"


def parse_manifest(content: str) -> List[str]:
    """Parse a YAML manifest into its ordered list of image references.

    Args:
        content: YAML document with a ``docker`` list

    Returns:
        Image references in manifest order

    Raises:
        ManifestError: If the document is not valid YAML or lacks the list

    Examples:
        parse_manifest("docker:\\n  - rocker/tidyverse\\n")
        # ["rocker/tidyverse"]
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid YAML in manifest: {e}") from e

    if not isinstance(data, dict) or MANIFEST_KEY not in data:
        raise ManifestError(f"Manifest must be a mapping with a '{MANIFEST_KEY}' list")

    images = data[MANIFEST_KEY]
    if not isinstance(images, list) or not all(isinstance(i, str) for i in images):
        raise ManifestError(f"Manifest '{MANIFEST_KEY}' must be a list of strings")

    return images


async def read_stdin(stream: Optional[TextIO] = None) -> str:
    """Read a manifest from standard input without blocking the event loop."""
    stream = stream or sys.stdin
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, stream.read)
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Cannot read manifest from stdin: {e}") from e


async def read_file(path: Path) -> str:
    """Read a manifest from a local file."""
    try:
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            return await f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Cannot read manifest {path}: {e}") from e


async def read_url(url: str, timeout: Optional[float] = None) -> str:
    """Download a manifest from a URL."""
    try:
        async with aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=timeout)
        ) as session:
            async with session.get(url) as resp:
                resp.raise_for_status()
                return await resp.text()
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        raise ManifestError(f"Cannot download manifest {url}: {e!r}") from e


async def load_manifest(
    location: Optional[str] = None,
    stdin: Optional[TextIO] = None,
    timeout: Optional[float] = None,
) -> List[str]:
    """Acquire and parse the manifest.

    No location reads standard input. An existing local path is read as a
    file; anything else is treated as a URL.

    Args:
        location: File path, URL or None
        stdin: Stream used instead of sys.stdin when no location is given
        timeout: Total download timeout in seconds for URLs (None for no limit)

    Returns:
        Image references in manifest order

    Raises:
        ManifestError: If the manifest cannot be read or parsed
    """
    if location is None:
        logger.debug("Reading manifest from stdin")
        content = await read_stdin(stdin)
    elif Path(location).exists():
        logger.debug(f"Reading manifest from file {location}")
        content = await read_file(Path(location))
    else:
        logger.debug(f"Downloading manifest from {location}")
        content = await read_url(location, timeout)

    images = parse_manifest(content)
    logger.info(f"Manifest lists {len(images)} images")
    return images
