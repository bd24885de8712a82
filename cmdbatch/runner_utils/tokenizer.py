import re
from typing import List, Tuple

from ..errors import TokenizationError

# A bare word, or a double-quoted span that may contain escaped quotes.
TOKEN_PATTERN = re.compile(r'[^"\s]+|"(?:\\"|[^"])+"')


def _strip_quotes(token: str) -> str:
    if len(token) >= 2 and token[0] == '"' and token[-1] == '"':
        return token[1:-1]
    return token


def tokenize(command: str) -> List[str]:
    """
    Split a command line into tokens.

    Quotes wrapping a whole token are removed; nothing else is interpreted.

    Raises:
        TokenizationError: If the command is empty or yields no tokens
    """
    if not command:
        raise TokenizationError(command)

    tokens = [_strip_quotes(match) for match in TOKEN_PATTERN.findall(command)]
    if not tokens:
        raise TokenizationError(command)
    return tokens


def split_command(command: str) -> Tuple[str, List[str]]:
    """Return the executable name and its arguments."""
    tokens = tokenize(command)
    return tokens[0], tokens[1:]
