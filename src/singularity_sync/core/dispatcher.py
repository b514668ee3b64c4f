"""Build job dispatch: direct execution or batch scheduler submission."""

import asyncio
import logging
import shlex
from typing import Awaitable, Callable, List, Optional, Sequence, TextIO

from ..config import load_scheduler_config
from ..exceptions import JobExecutionError
from .types import JobDescriptor, SchedulerConfig, SyncOptions

logger = logging.getLogger(__name__)

ProcessRunner = Callable[[Sequence[str], Optional[bytes]], Awaitable[int]]


async def run_process(args: Sequence[str], stdin: Optional[bytes] = None) -> int:
    """Run an external process to completion.

    Args:
        args: Executable and arguments
        stdin: Data written to the process's standard input, if any

    Returns:
        Process exit status

    Raises:
        OSError: If the executable cannot be started
    """
    process = await asyncio.create_subprocess_exec(
        *args,
        stdin=asyncio.subprocess.PIPE if stdin is not None else None,
    )
    await process.communicate(input=stdin)
    return process.returncode


class JobDispatcher:
    """Executes, submits or prints build jobs according to the sync options."""

    def __init__(
        self,
        options: SyncOptions,
        config: Optional[SchedulerConfig] = None,
        runner: ProcessRunner = run_process,
        stdout: Optional[TextIO] = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            options: Run-wide sync options
            config: Scheduler and executable settings (resolved from the
                environment if None)
            runner: Coroutine used to start external processes
            stdout: Stream for dry-run output (sys.stdout if None)
        """
        self.options = options
        self.config = config or load_scheduler_config()
        self.runner = runner
        self.stdout = stdout

    def build_command(self, job: JobDescriptor) -> List[str]:
        """Render the container build command for a job."""
        command = [self.config.builder, "build"]
        if job.force:
            command.append("--force")
        command.extend([str(job.local_artifact_path), job.source_uri])
        return command

    def render_script(self, job: JobDescriptor) -> str:
        """Render the batch submission script for a job."""
        lines = [
            "#!/bin/bash",
            f"#SBATCH --time={self.config.time_limit}",
            f"#SBATCH --mem={self.config.memory}",
            f"#SBATCH --job-name={job.job_label}",
            f"#SBATCH --output={self.config.output}",
            "",
            f'export SINGULARITY_CACHEDIR="{self.config.cache_dir}"',
            f'export SINGULARITY_TMPDIR="{self.config.tmp_dir}"',
            "",
            shlex.join(self.build_command(job)),
            "",
        ]
        return "\n".join(lines)

    async def dispatch(self, job: JobDescriptor) -> None:
        """Run, submit or print a single job.

        Args:
            job: Job to dispatch

        Raises:
            JobExecutionError: If the build or submission fails
        """
        if self.options.parallelize:
            await self._submit(job)
        else:
            await self._build(job)

    async def _build(self, job: JobDescriptor) -> None:
        command = self.build_command(job)
        if self.options.dry_run:
            print(shlex.join(command), file=self.stdout)
            return

        logger.info(f"Building {job.source_uri} -> {job.local_artifact_path}")
        await self._run(command, None, f"Build of {job.source_uri}")

    async def _submit(self, job: JobDescriptor) -> None:
        script = self.render_script(job)
        if self.options.dry_run:
            print(script, file=self.stdout)
            return

        logger.info(f"Submitting build of {job.source_uri} as {job.job_label}")
        await self._run(
            [self.config.submit],
            script.encode("utf-8"),
            f"Submission of {job.source_uri}",
        )

    async def _run(
        self, command: List[str], stdin: Optional[bytes], description: str
    ) -> None:
        try:
            returncode = await self.runner(command, stdin)
        except OSError as e:
            raise JobExecutionError(
                f"{description} failed to start ({shlex.join(command)}): {e}",
                command=command,
            ) from e

        if returncode != 0:
            raise JobExecutionError(
                f"{description} failed with exit status {returncode}: "
                f"{shlex.join(command)}",
                command=command,
                returncode=returncode,
            )
