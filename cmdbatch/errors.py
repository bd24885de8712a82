"""
Exceptions raised by cmdbatch.

Only structural problems are raised. A command that exits nonzero or fails
to launch is reported through its ExitInfo instead.
"""


class CmdBatchError(Exception):
    """Base class for cmdbatch errors."""


class InvalidInputError(CmdBatchError, ValueError):
    """The commands or options passed to a batch have an invalid shape."""


class TokenizationError(InvalidInputError):
    """A command line produced no tokens."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Could not tokenize command: {command!r}")
