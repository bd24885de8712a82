"""
Response models for cmdbatch command execution.
"""
from typing import Optional
from pydantic import BaseModel


class ExitInfo(BaseModel):
    """Outcome of one command. Produced exactly once per command."""
    exit_code: Optional[int] = None
    errored: bool = False
    signal: Optional[int] = None
    error: Optional[str] = None
    command: Optional[str] = None

    @property
    def success(self) -> bool:
        return not self.errored and self.exit_code == 0


class BatchSummary(BaseModel):
    """Summary of a batch's results."""
    total_commands: int
    successful_commands: int
    failed_commands: int
    errored_commands: int
    success_rate: float
