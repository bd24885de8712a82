"""
Option models for cmdbatch command execution.

Options are resolved in three layers: built-in defaults, then the batch-wide
GlobalOptions, then the fields set on an individual CommandSpec.
"""
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Literal, Mapping, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidInputError


class Mode(str, Enum):
    """Scheduling policy for a batch."""
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


StdioTarget = Union[Literal["pipe", "inherit", "ignore"], int, None]
StdioConfig = Union[Literal["pipe", "inherit", "ignore"], int, List[StdioTarget]]
OutputCallback = Callable[[str], Any]
CompleteCallback = Callable[..., Any]

# Only these fields are ever forwarded to the process spawner.
SPAWN_OPTION_KEYS = ("cwd", "env", "stdio", "detached", "uid", "gid", "shell")

DEFAULT_MODE = Mode.SEQUENTIAL
DEFAULT_VERBOSE = False
DEFAULT_LOGGER = print


class _ProcessOptions(BaseModel):
    """Fields shared by commands, global options and resolved options."""
    model_config = ConfigDict(extra="forbid")

    cwd: Optional[Union[str, Path]] = None
    env: Optional[Dict[str, str]] = None
    stdio: Optional[StdioConfig] = None
    detached: Optional[bool] = None
    uid: Optional[int] = None
    gid: Optional[int] = None
    shell: Optional[Union[bool, str]] = None
    on_output: Optional[OutputCallback] = Field(
        default=None,
        validation_alias=AliasChoices("on_output", "onOutput", "on_data", "onData"),
    )
    on_error_output: Optional[OutputCallback] = Field(
        default=None,
        validation_alias=AliasChoices("on_error_output", "onErrorOutput", "on_error", "onError"),
    )
    on_complete: Optional[CompleteCallback] = Field(
        default=None,
        validation_alias=AliasChoices("on_complete", "onComplete", "on_done", "onDone"),
    )

    def explicit_fields(self) -> Dict[str, Any]:
        """Fields the caller set to a non-None value."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }


class CommandSpec(_ProcessOptions):
    """A single command line plus its per-command overrides."""
    command: str
    verbose: Optional[bool] = None
    logger: Optional[OutputCallback] = None


class GlobalOptions(_ProcessOptions):
    """Batch-wide defaults, overridable by each CommandSpec."""
    verbose: Optional[bool] = None
    logger: Optional[OutputCallback] = None
    mode: Optional[Mode] = None


class SpawnOptions(BaseModel):
    """The subset of options handed to the OS process spawner."""
    model_config = ConfigDict(frozen=True)

    cwd: Optional[Union[str, Path]] = None
    env: Optional[Dict[str, str]] = None
    stdio: Optional[StdioConfig] = None
    detached: Optional[bool] = None
    uid: Optional[int] = None
    gid: Optional[int] = None
    shell: Optional[Union[bool, str]] = None


class ResolvedOptions(_ProcessOptions):
    """Effective configuration for one command, computed at dispatch time."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    command: str
    verbose: bool = DEFAULT_VERBOSE
    logger: OutputCallback = DEFAULT_LOGGER
    mode: Mode = DEFAULT_MODE

    def spawn_options(self) -> SpawnOptions:
        return SpawnOptions(**{key: getattr(self, key) for key in SPAWN_OPTION_KEYS})


def resolve_options(
    command: CommandSpec,
    global_options: GlobalOptions,
    default_cwd: Union[str, Path]
) -> ResolvedOptions:
    """
    Overlay defaults, global options and command fields.

    The last layer with a non-None value for a field wins.

    Args:
        command: The command being dispatched
        global_options: Batch-wide options
        default_cwd: Working directory snapshot taken when the batch started

    Returns:
        ResolvedOptions for this command
    """
    layers: Dict[str, Any] = {
        "cwd": default_cwd,
        "verbose": DEFAULT_VERBOSE,
        "mode": DEFAULT_MODE,
        "logger": DEFAULT_LOGGER,
    }
    layers.update(global_options.explicit_fields())
    layers.update(command.explicit_fields())
    return ResolvedOptions(**layers)


def _to_command_spec(item: Any) -> CommandSpec:
    if isinstance(item, CommandSpec):
        return item
    if isinstance(item, str):
        return CommandSpec(command=item)
    if isinstance(item, Mapping):
        try:
            return CommandSpec(**item)
        except ValidationError as e:
            raise InvalidInputError(f"Invalid command descriptor: {e}") from e
        except TypeError as e:
            # non-string keys
            raise InvalidInputError(f"Invalid command descriptor: {e}") from e
    raise InvalidInputError(f"Invalid command of type {type(item).__name__}: {item!r}")


def normalize_commands(commands: Any) -> List[CommandSpec]:
    """
    Turn any accepted input shape into a list of CommandSpec.

    Accepts a command string, a single descriptor (mapping or CommandSpec),
    or a list/tuple of strings and descriptors.

    Raises:
        InvalidInputError: If the input (or any element) has another shape
    """
    if isinstance(commands, (str, Mapping, CommandSpec)):
        return [_to_command_spec(commands)]
    if isinstance(commands, (list, tuple)):
        return [_to_command_spec(item) for item in commands]
    raise InvalidInputError(f"Invalid input of type {type(commands).__name__}: {commands!r}")


def normalize_global_options(
    options: Union[GlobalOptions, Mapping[str, Any], None] = None,
    **overrides: Any
) -> GlobalOptions:
    """
    Validate batch-wide options.

    Keyword overrides are applied on top of the mapping or model.

    Raises:
        InvalidInputError: On unknown keys, bad values or a bad shape
    """
    if options is None:
        fields: Dict[str, Any] = {}
    elif isinstance(options, GlobalOptions):
        fields = options.explicit_fields()
    elif isinstance(options, Mapping):
        fields = dict(options)
    else:
        raise InvalidInputError(f"Invalid options of type {type(options).__name__}: {options!r}")

    fields.update(overrides)
    try:
        return GlobalOptions(**fields)
    except (ValidationError, TypeError) as e:
        raise InvalidInputError(f"Invalid global options: {e}") from e
