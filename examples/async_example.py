"""Example usage of the sync engine: preview what a first sync would build."""

import asyncio
import logging
import sys

# Add parent directory to path
sys.path.insert(0, "src")

from singularity_sync import (
    JobDispatcher,
    RegistryClient,
    RegistryError,
    SyncOptions,
    sync_manifest,
)
from singularity_sync.config import load_scheduler_config
from singularity_sync.core.filters import select_tags
from singularity_sync.core.types import EPOCH

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

IMAGES = ["rocker/r-ver", "biocontainers/samtools"]


async def main():
    """Show the tags a cold target would pick up for a few images."""
    options = SyncOptions(first_sync=3)

    try:
        async with RegistryClient(page_size=50) as client:
            for image in IMAGES:
                repository, name = image.rsplit("/", 1)
                logger.info(f"Listing tags for {image}...")
                tags = await client.list_tags(repository, name)
                selected = select_tags(
                    tags, EPOCH, options.banned_substrings, options.first_sync
                )
                logger.info(f"  {len(tags)} tags, first sync would build:")
                for tag in selected:
                    logger.info(f"    {tag.name} ({tag.last_updated:%Y-%m-%d})")

    except RegistryError as e:
        logger.error(f"Registry error: {e}")


async def dry_run(directory: str):
    """Render the batch scripts a parallel sync would submit."""
    options = SyncOptions(dry_run=True, force=True, parallelize=True, first_sync=2)
    dispatcher = JobDispatcher(options, load_scheduler_config())

    try:
        async with RegistryClient() as client:
            report = await sync_manifest(IMAGES, directory, options, client, dispatcher)
        logger.info(f"Would submit {report.job_count} jobs")

    except RegistryError as e:
        logger.error(f"Registry error: {e}")


if __name__ == "__main__":
    print("=== First sync preview ===")
    asyncio.run(main())

    print("\n=== Parallel dry run ===")
    asyncio.run(dry_run(sys.argv[1] if len(sys.argv) > 1 else "containers"))
