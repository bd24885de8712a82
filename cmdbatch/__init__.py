from .api import CommandRunner, run, run_sync, summarize
from .errors import CmdBatchError, InvalidInputError, TokenizationError
from .options import CommandSpec, GlobalOptions, Mode, ResolvedOptions
from .response_models import BatchSummary, ExitInfo
