import asyncio
import logging
import os
from time import perf_counter
from typing import Any, List, Mapping, Optional, Union

from ..options import (
    GlobalOptions,
    Mode,
    normalize_commands,
    normalize_global_options,
    resolve_options,
)
from ..response_models import ExitInfo
from .command_executor import CommandExecutor

logger = logging.getLogger(__name__)


class BatchExecutor:
    """Executes batches of commands sequentially or in parallel."""

    def __init__(self, executor: Optional[CommandExecutor] = None):
        self.executor = executor or CommandExecutor()

    async def execute_batch(
        self,
        commands: Any,
        global_options: Union[GlobalOptions, Mapping[str, Any], None] = None
    ) -> List[ExitInfo]:
        """
        Execute a batch of commands.

        Results are returned in the same order as the input commands, in
        both modes.

        Args:
            commands: A command string, a descriptor, or a list of either
            global_options: Options applied to every command unless overridden

        Returns:
            One ExitInfo per input command

        Raises:
            InvalidInputError: If commands or global_options have an invalid shape
        """
        specs = normalize_commands(commands)
        options = normalize_global_options(global_options)
        mode = options.mode or Mode.SEQUENTIAL
        default_cwd = os.getcwd()

        batch_start_perf = perf_counter()
        logger.debug(f"[BatchExecutor] Starting {mode.value} batch with {len(specs)} commands")

        if mode == Mode.PARALLEL:
            # Tasks are created in input order so dispatch order matches it.
            tasks = [
                asyncio.ensure_future(self.executor.execute(resolve_options(spec, options, default_cwd)))
                for spec in specs
            ]
            try:
                results = list(await asyncio.gather(*tasks))
            except BaseException:
                # Stop the siblings so their processes are reaped before failing the batch.
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
        else:
            results = []
            for idx, spec in enumerate(specs):
                logger.debug(f"[BatchExecutor] [{idx+1}/{len(specs)}] Executing: {spec.command[:50]}")
                result = await self.executor.execute(resolve_options(spec, options, default_cwd))
                results.append(result)

        duration = round(perf_counter() - batch_start_perf, 3)
        logger.debug(f"[BatchExecutor] Batch complete in {duration}s: {len(results)} results")
        return results
