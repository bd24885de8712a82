"""
Entry points for running batches of commands.
"""
import asyncio
from typing import Any, List, Mapping, Optional, Union

from .options import GlobalOptions, normalize_global_options
from .response_models import BatchSummary, ExitInfo
from .runner_utils.batch_executor import BatchExecutor
from .runner_utils.command_executor import CommandExecutor


async def run(
    commands: Any,
    options: Union[GlobalOptions, Mapping[str, Any], None] = None,
    **kwargs: Any
) -> List[ExitInfo]:
    """
    Run one or more commands and wait for all of them to finish.

    Args:
        commands: A command string, a descriptor (mapping or CommandSpec),
            or a list of strings and descriptors
        options: Global options applied to every command
        **kwargs: Extra global options, applied on top of ``options``

    Returns:
        One ExitInfo per command, in input order

    Example:
        commands = [
            "ls",
            {"command": "mkdir build", "cwd": "/tmp", "on_complete": print},
            "ls /tmp/build",
        ]
        results = await run(commands, {"cwd": "/srv"}, mode="sequential")

    Raises:
        InvalidInputError: If the commands or options have an invalid shape
    """
    global_options = normalize_global_options(options, **kwargs)
    return await BatchExecutor().execute_batch(commands, global_options)


def run_sync(
    commands: Any,
    options: Union[GlobalOptions, Mapping[str, Any], None] = None,
    **kwargs: Any
) -> List[ExitInfo]:
    """Blocking version of :func:`run`. Must not be called from a running event loop."""
    return asyncio.run(run(commands, options, **kwargs))


def summarize(results: List[ExitInfo]) -> BatchSummary:
    """
    Summarize the results of a batch.

    A command is successful when it exited with code 0, errored when it
    could not be launched, and failed otherwise.
    """
    total = len(results)
    successful = sum(1 for r in results if r.success)
    errored = sum(1 for r in results if r.errored)
    return BatchSummary(
        total_commands=total,
        successful_commands=successful,
        failed_commands=total - successful - errored,
        errored_commands=errored,
        success_rate=(successful / total * 100) if total > 0 else 0.0
    )


class CommandRunner:
    """Runs batches of commands with a fixed set of global options."""

    def __init__(self, executor: Optional[CommandExecutor] = None, **options: Any):
        """
        Initialize the runner.

        Args:
            executor: CommandExecutor to use (default: one spawning real processes)
            **options: Global options, e.g. cwd, verbose, mode, env, on_output
        """
        self.options = normalize_global_options(options)
        self.batch_executor = BatchExecutor(executor)

    async def run(self, commands: Any, **overrides: Any) -> List[ExitInfo]:
        """Run commands; keyword overrides replace this runner's global options for one call."""
        options = normalize_global_options(self.options, **overrides)
        return await self.batch_executor.execute_batch(commands, options)

    def run_sync(self, commands: Any, **overrides: Any) -> List[ExitInfo]:
        return asyncio.run(self.run(commands, **overrides))

    def get_summary(self, results: List[ExitInfo]) -> BatchSummary:
        return summarize(results)
