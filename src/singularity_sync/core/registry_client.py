"""Docker Hub tag listing client."""

import asyncio
import logging
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

import aiohttp

from ..exceptions import RegistryConnectionError, RegistryResponseError
from .types import Tag

logger = logging.getLogger(__name__)

DOCKER_HUB_URL = "https://registry.hub.docker.com"


def parse_timestamp(value: str) -> datetime:
    """Parse a registry ``last_updated`` value into an aware datetime.

    Args:
        value: ISO 8601 timestamp (e.g., "2023-05-02T10:11:12.123456Z")

    Returns:
        Timezone-aware datetime

    Raises:
        ValueError: If the value is not a valid timestamp
    """
    if not isinstance(value, str):
        raise ValueError(f"Timestamp must be a string, got {value!r}")

    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        raise ValueError(f"Timestamp has no timezone: {value!r}")
    return parsed


def parse_tag_page(data: Any) -> Tuple[List[Tag], Optional[str]]:
    """Parse one page of the tag listing.

    Args:
        data: Decoded JSON body

    Returns:
        Tuple of (tags in response order, next page URL or None)

    Raises:
        RegistryResponseError: If the body is missing fields or has bad values
    """
    if not isinstance(data, dict):
        raise RegistryResponseError("Tag listing is not a JSON object")

    try:
        results = data["results"]
        next_url = data["next"]
    except KeyError as e:
        raise RegistryResponseError(f"Tag listing is missing field {e}") from e

    if not isinstance(results, list):
        raise RegistryResponseError("Tag listing 'results' is not a list")
    if next_url is not None and not isinstance(next_url, str):
        raise RegistryResponseError(f"Invalid 'next' locator: {next_url!r}")

    tags = []
    for record in results:
        try:
            tags.append(
                Tag(
                    name=record["name"],
                    last_updated=parse_timestamp(record["last_updated"]),
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            raise RegistryResponseError(f"Invalid tag record {record!r}: {e}") from e

    return tags, next_url


class RegistryClient:
    """Async client for the Docker Hub repository tags API."""

    def __init__(
        self,
        registry_url: str = DOCKER_HUB_URL,
        timeout: Optional[float] = None,
        page_size: Optional[int] = None,
        connector: Optional[aiohttp.TCPConnector] = None,
    ) -> None:
        """Initialize the registry client.

        Args:
            registry_url: Registry URL (e.g., https://registry.hub.docker.com)
            timeout: Total request timeout in seconds (None for no limit)
            page_size: Requested number of tags per page (registry default if None)
            connector: aiohttp connector for connection pooling
        """
        self.registry_url = registry_url.rstrip("/")
        self.timeout = timeout
        self.page_size = page_size
        self.connector = connector
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "RegistryClient":
        """Enter async context manager."""
        if not self.session:
            self.session = aiohttp.ClientSession(
                connector=self.connector,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        await self.close()

    async def close(self) -> None:
        """Close the client session."""
        if self.session and not self.session.closed:
            await self.session.close()

    def tags_url(self, repository: str, image: str) -> str:
        """Build the first-page URL for a repository/image pair."""
        return f"{self.registry_url}/v2/repositories/{repository}/{image}/tags"

    async def _fetch_page(
        self, url: str, params: Optional[Dict[str, str]] = None
    ) -> Tuple[List[Tag], Optional[str]]:
        """Fetch and parse a single page of tags.

        Raises:
            RegistryConnectionError: On transport or HTTP status errors
            RegistryResponseError: On malformed bodies
        """
        if self.session is None:
            raise RegistryConnectionError("Client session is not open")

        try:
            async with self.session.get(url, params=params) as resp:
                resp.raise_for_status()
                data = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RegistryConnectionError(
                f"Failed to fetch tags from {url}: {e!r}"
            ) from e
        except ValueError as e:
            raise RegistryResponseError(f"Invalid JSON from {url}: {e}") from e

        try:
            return parse_tag_page(data)
        except RegistryResponseError as e:
            raise RegistryResponseError(f"{url}: {e}") from e

    async def iter_tag_pages(
        self, repository: str, image: str
    ) -> AsyncIterator[List[Tag]]:
        """Yield tag pages for an image, following ``next`` until it is null.

        Args:
            repository: Repository namespace (e.g., "biocontainers")
            image: Image name (e.g., "samtools")

        Yields:
            Lists of tags, one per page, in response order
        """
        url: Optional[str] = self.tags_url(repository, image)
        params = {"page_size": str(self.page_size)} if self.page_size else None
        seen = set()
        page = 0

        while url is not None:
            if url in seen:
                raise RegistryResponseError(f"Tag listing loops back to {url}")
            seen.add(url)
            page += 1
            logger.debug(f"Fetching tag page {page}: {url}")
            tags, url = await self._fetch_page(url, params)
            # The next locator already carries its query string.
            params = None
            yield tags

    async def list_tags(self, repository: str, image: str) -> List[Tag]:
        """List every tag of an image across all pages.

        Args:
            repository: Repository namespace
            image: Image name

        Returns:
            All tags in registry response order

        Raises:
            RegistryError: If any page fails; no partial list is returned
        """
        tags: List[Tag] = []
        async for page in self.iter_tag_pages(repository, image):
            tags.extend(page)

        logger.debug(f"Found {len(tags)} tags for {repository}/{image}")
        return tags
