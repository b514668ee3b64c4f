"""Tests for environment-sourced scheduler configuration."""

from singularity_sync.config import load_scheduler_config
from singularity_sync.core.types import SchedulerConfig


def test_defaults():
    config = load_scheduler_config({"HOME": "/home/alice"})

    assert config.memory == "8G"
    assert config.time_limit == "8:00:00"
    assert config.cache_dir == "${HOME}/scratch/singularity"
    assert config.tmp_dir == "${HOME}/scratch/tmp"
    assert config.output == "/home/alice/scratch/slurm-%u-%x-%j.out"
    assert config.builder == "singularity"
    assert config.submit == "sbatch"


def test_overrides():
    config = load_scheduler_config(
        {
            "HOME": "/home/alice",
            "SINGULARITY_SYNC_MEMORY": "32G",
            "SINGULARITY_SYNC_TIME": "1-00:00:00",
            "SINGULARITY_SYNC_CACHEDIR": "/cache",
            "SINGULARITY_SYNC_TMPDIR": "/tmp/sing",
            "SINGULARITY_SYNC_OUTPUT": "/logs/%j.out",
            "SINGULARITY_SYNC_BUILDER": "apptainer",
            "SINGULARITY_SYNC_SUBMIT": "/opt/slurm/bin/sbatch",
        }
    )

    assert config == SchedulerConfig(
        memory="32G",
        time_limit="1-00:00:00",
        cache_dir="/cache",
        tmp_dir="/tmp/sing",
        output="/logs/%j.out",
        builder="apptainer",
        submit="/opt/slurm/bin/sbatch",
    )


def test_output_without_home_keeps_placeholder():
    config = load_scheduler_config({})
    assert config.output == "${HOME}/scratch/slurm-%u-%x-%j.out"


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("SINGULARITY_SYNC_MEMORY", "4G")
    assert load_scheduler_config().memory == "4G"
