"""Command-line interface for singularity-sync."""

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from . import __version__
from .config import load_scheduler_config
from .core.dispatcher import JobDispatcher
from .core.registry_client import DOCKER_HUB_URL, RegistryClient
from .core.types import (
    DEFAULT_BANNED_SUBSTRINGS,
    DEFAULT_FIRST_SYNC,
    ErrorPolicy,
    SyncOptions,
)
from .exceptions import ManifestError, SyncError
from .manifest import load_manifest
from .sync import sync_manifest

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_SYNC_FAILED = 1
EXIT_MANIFEST_ERROR = 2


def non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="singularity-sync",
        description="Syncs singularity containers from Docker Hub",
    )
    parser.add_argument(
        "directory", metavar="DIR", help="Directory to sync singularity containers to"
    )
    parser.add_argument(
        "-m", "--manifest", metavar="FILE",
        help="Manifest to use for syncing (file path or URL; stdin if omitted)",
    )
    parser.add_argument(
        "-d", "--dry-run", action="store_true",
        help="Print build commands or job scripts instead of running them",
    )
    parser.add_argument(
        "-f", "--force", action="store_true",
        help="Create missing directories and overwrite existing containers",
    )
    parser.add_argument(
        "-F", "--first-sync", type=non_negative_int, default=DEFAULT_FIRST_SYNC,
        metavar="N",
        help="Number of tags to build for a never-synced image (default: %(default)s)",
    )
    parser.add_argument(
        "-p", "--parallelize", action="store_true",
        help="Submit builds to the batch scheduler instead of running them",
    )
    parser.add_argument(
        "-s", "--skip-errors", action="store_true",
        help="Continue with the next image when an image fails",
    )
    parser.add_argument(
        "-l", "--include-latest", action="store_true",
        help='Include the "latest" tag',
    )
    parser.add_argument(
        "--registry-url", default=DOCKER_HUB_URL,
        help=f"Registry to query for tags (default: {DOCKER_HUB_URL})",
    )
    parser.add_argument(
        "--timeout", type=float, default=None, metavar="SECONDS",
        help="Total timeout for each manifest download and registry request",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def options_from_args(args: argparse.Namespace) -> SyncOptions:
    banned = DEFAULT_BANNED_SUBSTRINGS
    if args.include_latest:
        banned = banned - {"latest"}

    return SyncOptions(
        dry_run=args.dry_run,
        force=args.force,
        first_sync=args.first_sync,
        parallelize=args.parallelize,
        error_policy=ErrorPolicy.SKIP if args.skip_errors else ErrorPolicy.ABORT,
        banned_substrings=banned,
    )


async def run(args: argparse.Namespace) -> int:
    """Load the manifest and sync every image in it.

    Returns:
        Process exit status
    """
    options = options_from_args(args)
    config = load_scheduler_config()

    try:
        references = await load_manifest(args.manifest, timeout=args.timeout)
    except ManifestError as e:
        logger.error(f"Failed to parse manifest: {e}")
        return EXIT_MANIFEST_ERROR

    dispatcher = JobDispatcher(options, config)
    async with RegistryClient(args.registry_url, timeout=args.timeout) as client:
        try:
            report = await sync_manifest(
                references, args.directory, options, client, dispatcher
            )
        except SyncError:
            return EXIT_SYNC_FAILED

    if not report.ok:
        failed = ", ".join(result.reference for result in report.failures)
        logger.error(f"{len(report.failures)} image(s) failed: {failed}")
        return EXIT_SYNC_FAILED

    logger.info(
        f"Dispatched {report.job_count} job(s) for {len(report.results)} image(s)"
    )
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    return asyncio.run(run(args))
