from .tokenizer import tokenize, split_command
from .command_executor import CommandExecutor
from .batch_executor import BatchExecutor
