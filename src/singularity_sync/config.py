"""Environment-sourced configuration for batch job submission."""

import logging
import os
from string import Template
from typing import Mapping, Optional

from .core.types import SchedulerConfig

logger = logging.getLogger(__name__)

ENV_MEMORY = "SINGULARITY_SYNC_MEMORY"
ENV_TIME = "SINGULARITY_SYNC_TIME"
ENV_CACHEDIR = "SINGULARITY_SYNC_CACHEDIR"
ENV_TMPDIR = "SINGULARITY_SYNC_TMPDIR"
ENV_OUTPUT = "SINGULARITY_SYNC_OUTPUT"
ENV_BUILDER = "SINGULARITY_SYNC_BUILDER"
ENV_SUBMIT = "SINGULARITY_SYNC_SUBMIT"


def load_scheduler_config(
    environ: Optional[Mapping[str, str]] = None,
) -> SchedulerConfig:
    """Resolve scheduler settings from environment overrides.

    Cache and tmp directories are exported inside the job script, so their
    ``${HOME}`` is left for the job's shell to expand. ``#SBATCH`` lines are
    never shell-expanded, so variables in the output path are substituted here.

    Args:
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        SchedulerConfig with defaults applied for unset variables
    """
    if environ is None:
        environ = os.environ

    defaults = SchedulerConfig()
    output = Template(environ.get(ENV_OUTPUT, defaults.output)).safe_substitute(
        environ
    )

    config = SchedulerConfig(
        memory=environ.get(ENV_MEMORY, defaults.memory),
        time_limit=environ.get(ENV_TIME, defaults.time_limit),
        cache_dir=environ.get(ENV_CACHEDIR, defaults.cache_dir),
        tmp_dir=environ.get(ENV_TMPDIR, defaults.tmp_dir),
        output=output,
        builder=environ.get(ENV_BUILDER, defaults.builder),
        submit=environ.get(ENV_SUBMIT, defaults.submit),
    )
    logger.debug(f"Scheduler config: {config}")
    return config
