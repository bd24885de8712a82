import asyncio
from typing import Any, Dict, List, Optional

from ..options import SpawnOptions, StdioConfig

STDIO_TARGETS = {
    "pipe": asyncio.subprocess.PIPE,
    "inherit": None,
    "ignore": asyncio.subprocess.DEVNULL,
}


def _stdio_target(value) -> Optional[int]:
    if value is None:
        return asyncio.subprocess.PIPE
    if isinstance(value, int):
        return value
    return STDIO_TARGETS[value]


def stdio_targets(stdio: Optional[StdioConfig]) -> List[Optional[int]]:
    """Map a stdio config to subprocess targets for stdin, stdout and stderr."""
    if isinstance(stdio, list):
        padded = list(stdio[:3]) + [None] * (3 - len(stdio[:3]))
        return [_stdio_target(value) for value in padded]
    return [_stdio_target(stdio)] * 3


def _subprocess_kwargs(options: SpawnOptions) -> Dict[str, Any]:
    stdin, stdout, stderr = stdio_targets(options.stdio)
    kwargs: Dict[str, Any] = {"stdin": stdin, "stdout": stdout, "stderr": stderr}

    if options.cwd is not None:
        kwargs["cwd"] = options.cwd
    if options.env is not None:
        kwargs["env"] = options.env
    if options.detached:
        kwargs["start_new_session"] = True
    if options.uid is not None:
        kwargs["user"] = options.uid
    if options.gid is not None:
        kwargs["group"] = options.gid
    return kwargs


async def spawn(
    executable: str,
    args: List[str],
    options: SpawnOptions
) -> asyncio.subprocess.Process:
    """
    Launch a child process.

    With ``shell`` set, the executable and arguments are joined with spaces
    and run by the host shell (``/bin/sh``, or the shell named by a string
    value). Piped stdin is closed right away.

    Args:
        executable: Program to run
        args: Positional arguments
        options: Allow-listed spawn options

    Returns:
        The running asyncio process

    Raises:
        OSError: If the process cannot be launched
    """
    kwargs = _subprocess_kwargs(options)

    if options.shell:
        command_line = " ".join([executable, *args])
        if isinstance(options.shell, str):
            kwargs["executable"] = options.shell
        process = await asyncio.create_subprocess_shell(command_line, **kwargs)
    else:
        process = await asyncio.create_subprocess_exec(executable, *args, **kwargs)

    if process.stdin is not None:
        process.stdin.close()
    return process
