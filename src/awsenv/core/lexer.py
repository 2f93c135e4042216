"""
Quote-aware .env file lexer.

This module turns .env content into a token stream and decodes every value.
Supported value forms:
- Unquoted: KEY=value (surrounding whitespace trimmed)
- Double quotes: escape sequences and multi-line values
- Single quotes: literal, only \\' is unescaped
- Backticks: literal, multi-line

Lexing never fails. Lines that are not KEY=VALUE are kept as SKIPPED tokens
and a quote that is never closed falls back to the raw value. Every source
line belongs to exactly one token, so:
    write(parse(content)) == content
"""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

from .errors import ValidationError


KEY_VALUE_PATTERN = re.compile(r'^([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$')

# Continuation lines a quoted value may consume before it is treated as unclosed
MAX_CONTINUATION_LINES = 100

ESCAPE_SEQUENCES = {
    'n': '\n',
    'r': '\r',
    't': '\t',
    '"': '"',
    "'": "'",
    '\\': '\\',
}


class TokenType(Enum):
    """Token types for .env file parsing."""
    COMMENT = "comment"
    BLANK_LINE = "blank_line"
    KEY_VALUE = "key_value"
    SKIPPED = "skipped"


@dataclass
class Token:
    """A single token in the .env file."""
    type: TokenType
    raw: str  # Source text, several lines for multi-line values
    key: Optional[str] = None
    value: Optional[str] = None
    line: int = 0  # 1-based line where the token starts

    def __repr__(self):
        if self.type == TokenType.KEY_VALUE:
            return f"Token({self.type.value}, {self.key}={self.value!r})"
        return f"Token({self.type.value}, {repr(self.raw[:20])}...)"


def ends_with_unescaped(text: str, quote: str) -> bool:
    """
    Check whether text ends with a quote that is not escaped.

    The quote counts as escaped when an odd number of backslashes
    immediately precedes it.
    """
    if not text.endswith(quote):
        return False
    body = text[:-1]
    backslashes = len(body) - len(body.rstrip('\\'))
    return backslashes % 2 == 0


def process_escape_sequences(text: str) -> str:
    """
    Decode backslash escapes in a double-quoted value.

    Unknown sequences keep their backslash (``\\x`` stays ``\\x``).
    """
    result = []
    i = 0
    while i < len(text):
        char = text[i]
        if char == '\\' and i + 1 < len(text) and text[i + 1] in ESCAPE_SEQUENCES:
            result.append(ESCAPE_SEQUENCES[text[i + 1]])
            i += 2
        else:
            result.append(char)
            i += 1
    return ''.join(result)


class Lexer:
    """
    Line-oriented lexer for .env files.

    Each KEY=VALUE token carries the decoded value; quoted values that
    continue past the end of their line swallow the following lines.
    """

    def __init__(self, content: str):
        self.content = content
        self.lines = content.split('\n')

    def tokenize(self) -> List[Token]:
        """
        Parse content into tokens.

        Returns:
            List of Token objects representing the file structure.
        """
        tokens = []
        index = 0

        while index < len(self.lines):
            token, consumed = self._parse_line(index)
            tokens.append(token)
            index += 1 + consumed

        return tokens

    def _parse_line(self, index: int) -> Tuple[Token, int]:
        """Parse the line at index; returns the token and continuation lines used."""
        line = self.lines[index]
        stripped = line.strip()

        if not stripped:
            return Token(TokenType.BLANK_LINE, raw=line, line=index + 1), 0

        if stripped.startswith('#'):
            return Token(TokenType.COMMENT, raw=line, line=index + 1), 0

        match = KEY_VALUE_PATTERN.match(line)
        if not match:
            return Token(TokenType.SKIPPED, raw=line, line=index + 1), 0

        key, remainder = match.group(1), match.group(2)
        value, consumed = self._parse_value(remainder, index)
        raw = '\n'.join(self.lines[index:index + 1 + consumed])

        return Token(TokenType.KEY_VALUE, raw=raw, key=key, value=value, line=index + 1), consumed

    def _parse_value(self, remainder: str, index: int) -> Tuple[str, int]:
        """Dispatch on the opening character of the value."""
        value = remainder.strip()
        if not value:
            return "", 0

        if value.startswith('"'):
            return self._parse_double_quoted(value, index)
        if value.startswith("'"):
            return self._parse_single_quoted(value, index)
        if value.startswith('`'):
            return self._parse_backtick_quoted(value, index)

        # Unquoted: internal whitespace is preserved
        return value, 0

    def _parse_double_quoted(self, value: str, index: int) -> Tuple[str, int]:
        closed = self._collect(value, index, lambda text, first: ends_with_unescaped(text, '"'))
        if closed is None:
            return value, 0
        body, consumed = closed
        return process_escape_sequences(body), consumed

    def _parse_single_quoted(self, value: str, index: int) -> Tuple[str, int]:
        def is_closed(text: str, first: bool) -> bool:
            # Continuation lines only look at the last two characters
            if first:
                return ends_with_unescaped(text, "'")
            return text.endswith("'") and not text.endswith("\\'")

        closed = self._collect(value, index, is_closed)
        if closed is None:
            return value, 0
        body, consumed = closed
        return body.replace("\\'", "'"), consumed

    def _parse_backtick_quoted(self, value: str, index: int) -> Tuple[str, int]:
        closed = self._collect(value, index, lambda text, first: text.endswith('`'))
        if closed is None:
            return value, 0
        return closed

    def _collect(
        self,
        value: str,
        index: int,
        is_closed: Callable[[str, bool], bool],
    ) -> Optional[Tuple[str, int]]:
        """
        Gather a quoted value, appending following lines until it closes.

        Args:
            value: Trimmed value text, starting with its opening quote
            index: Index of the line holding the key
            is_closed: Predicate on the accumulated text (and whether it is
                still the first line) telling if the closing quote was found

        Returns:
            Tuple of (text between the quotes, continuation lines consumed),
            or None when the quote is never closed.
        """
        text = value[1:]
        consumed = 0

        while True:
            if text and is_closed(text, consumed == 0):
                return text[:-1], consumed

            if consumed >= MAX_CONTINUATION_LINES or index + consumed + 1 >= len(self.lines):
                return None

            consumed += 1
            text += '\n' + self.lines[index + consumed]


def parse(content: str) -> List[Token]:
    """
    Parse .env file content into tokens.

    Args:
        content: String content of .env file

    Returns:
        List of Token objects
    """
    lexer = Lexer(content)
    return lexer.tokenize()


def write(tokens: List[Token]) -> str:
    """
    Reconstruct .env file content from tokens.

    Args:
        tokens: List of Token objects

    Returns:
        String content byte-identical to the parsed original
    """
    return '\n'.join(token.raw for token in tokens)


def get_keys(tokens: List[Token]) -> Dict[str, str]:
    """
    Extract all key-value pairs from tokens.

    Later occurrences of a key override earlier ones.

    Args:
        tokens: List of Token objects

    Returns:
        Dictionary of key-value pairs
    """
    return {
        token.key: token.value
        for token in tokens
        if token.type == TokenType.KEY_VALUE and token.key
    }


def parse_env(content: str) -> Dict[str, str]:
    """Decode .env content straight into a key -> value mapping."""
    return get_keys(parse(content))


def read_env_file(path: Union[str, Path]) -> Dict[str, str]:
    """
    Read and decode a .env file.

    Args:
        path: Path to the .env file

    Returns:
        Dictionary of key-value pairs

    Raises:
        ValidationError: If the file is missing or unreadable
    """
    env_path = Path(path)
    if not env_path.is_file():
        raise ValidationError(f"File not found: {env_path}")

    try:
        content = env_path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise ValidationError(f"Failed to read .env file: {e}") from e

    return parse_env(content)


def quote_value(value: str) -> str:
    """Render a value as a double-quoted, escaped .env literal."""
    escaped = (
        value.replace('\\', '\\\\')
        .replace('"', '\\"')
        .replace('\n', '\\n')
        .replace('\r', '\\r')
        .replace('\t', '\\t')
    )
    return f'"{escaped}"'


def serialize(values: Dict[str, str]) -> str:
    """
    Write a mapping back out as .env content.

    Every value is double-quoted, so parse_env(serialize(values)) == values.

    Args:
        values: Dictionary of key-value pairs

    Returns:
        .env file content
    """
    return ''.join(f"{key}={quote_value(value)}\n" for key, value in values.items())
