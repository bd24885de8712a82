import asyncio
import codecs
import logging
from typing import Awaitable, Callable, List, Optional

from ..errors import TokenizationError
from ..options import ResolvedOptions, SpawnOptions
from ..response_models import ExitInfo
from .spawner import spawn as default_spawn
from .tokenizer import split_command

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
GRACE_TIMEOUT = 2.0

SpawnFunc = Callable[[str, List[str], SpawnOptions], Awaitable[asyncio.subprocess.Process]]


class CommandExecutor:
    """Runs one command and streams its output to the resolved callbacks."""

    def __init__(self, spawn: Optional[SpawnFunc] = None):
        self.spawn = spawn or default_spawn

    async def _kill_process(self, process, grace_timeout: float = GRACE_TIMEOUT):
        """
        Terminate a process with escalating signals and reap it.

        Args:
            process: The subprocess to terminate
            grace_timeout: How long to wait after SIGTERM before sending SIGKILL
        """
        if process.returncode is not None:
            return

        logger.debug(f"[CommandExecutor] Sending SIGTERM to process {process.pid}")
        try:
            process.terminate()
            try:
                await asyncio.wait_for(process.wait(), timeout=grace_timeout)
                return
            except asyncio.TimeoutError:
                logger.debug(f"[CommandExecutor] Process {process.pid} ignored SIGTERM for {grace_timeout}s, sending SIGKILL")

            process.kill()
            await process.wait()
        except ProcessLookupError:
            # Exited between the check and the signal
            await process.wait()

    def _deliver(self, options: ResolvedOptions, callback, text: str):
        if options.verbose:
            options.logger(text)
        if callback is not None:
            callback(text)

    async def _pump(self, stream: asyncio.StreamReader, on_chunk: Callable[[str], None]):
        """Forward decoded chunks from a stream until EOF."""
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            data = await stream.read(CHUNK_SIZE)
            if not data:
                tail = decoder.decode(b"", final=True)
                if tail:
                    on_chunk(tail)
                return
            text = decoder.decode(data)
            if text:
                on_chunk(text)

    def _complete(self, options: ResolvedOptions, result: ExitInfo) -> ExitInfo:
        if options.on_complete is not None:
            if result.errored:
                options.on_complete(result.exit_code, True)
            else:
                options.on_complete(result.exit_code)
        return result

    async def execute(self, options: ResolvedOptions) -> ExitInfo:
        """
        Execute a command and wait for it to close.

        Launch failures and nonzero exits are returned as data, never raised.
        Exceptions raised by the caller's callbacks propagate.

        Args:
            options: Resolved options for this command

        Returns:
            ExitInfo: exit code, error flag and, when relevant, signal or error message
        """
        command = options.command

        if options.verbose:
            options.logger(f"$ {command}")

        try:
            executable, args = split_command(command)
        except TokenizationError as e:
            logger.warning(f"[CommandExecutor] ✗ {e}")
            return self._complete(options, ExitInfo(errored=True, error=str(e), command=command))

        logger.debug(f"[CommandExecutor] Spawning {executable} with {len(args)} args (cwd={options.cwd})")

        try:
            process = await self.spawn(executable, args, options.spawn_options())
        except (OSError, ValueError) as e:
            # ValueError: arguments or environment the OS cannot accept, e.g. NUL bytes
            logger.debug(f"[CommandExecutor] ✗ Launch failed for {command!r}: {type(e).__name__}: {e}")
            return self._complete(options, ExitInfo(
                exit_code=getattr(e, "errno", None),
                errored=True,
                error=str(e),
                command=command
            ))

        logger.debug(f"[CommandExecutor] Process created (PID: {process.pid})")

        readers = []
        if process.stdout is not None:
            readers.append(asyncio.ensure_future(self._pump(
                process.stdout,
                lambda text: self._deliver(options, options.on_output, text)
            )))
        if process.stderr is not None:
            readers.append(asyncio.ensure_future(self._pump(
                process.stderr,
                lambda text: self._deliver(options, options.on_error_output, text)
            )))

        try:
            await asyncio.gather(*readers)
            returncode = await process.wait()
        except BaseException:
            for reader in readers:
                reader.cancel()
            logger.debug(f"[CommandExecutor] ✗ Execution interrupted, stopping process {process.pid}")
            await self._kill_process(process)
            raise

        logger.debug(f"[CommandExecutor] ✓ Process {process.pid} closed with {returncode}")

        if returncode < 0:
            result = ExitInfo(signal=-returncode, command=command)
        else:
            result = ExitInfo(exit_code=returncode, command=command)
        return self._complete(options, result)
