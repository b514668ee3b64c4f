"""Test configuration and fixtures."""

import os

import pytest
import pytest_asyncio

from singularity_sync.core.dispatcher import JobDispatcher
from singularity_sync.core.registry_client import RegistryClient
from singularity_sync.core.types import SchedulerConfig, SyncOptions
from tests.helpers import FakeRegistry, RecordingRunner


@pytest_asyncio.fixture
async def registry():
    """Start a local tag registry."""
    async with FakeRegistry() as fake:
        yield fake


@pytest_asyncio.fixture
async def client(registry):
    """Registry client pointed at the local registry."""
    async with RegistryClient(registry.url) as registry_client:
        yield registry_client


@pytest.fixture
def runner():
    """Process runner that records invocations."""
    return RecordingRunner()


@pytest.fixture
def scheduler_config():
    """Deterministic scheduler configuration."""
    return SchedulerConfig(
        memory="16G",
        time_limit="2:00:00",
        cache_dir="${HOME}/scratch/singularity",
        tmp_dir="${HOME}/scratch/tmp",
        output="/scratch/logs/slurm-%u-%x-%j.out",
    )


@pytest.fixture
def make_dispatcher(runner, scheduler_config):
    """Build a dispatcher for given options that uses the recording runner."""

    def _make(options: SyncOptions) -> JobDispatcher:
        return JobDispatcher(options, scheduler_config, runner=runner)

    return _make


# Pytest configuration
def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless Docker Hub access is enabled."""
    skip_integration = pytest.mark.skip(reason="Docker Hub access not enabled")

    for item in items:
        if (
            "integration" in item.keywords
            and os.getenv("DOCKER_HUB_AVAILABLE", "false").lower() != "true"
        ):
            item.add_marker(skip_integration)
