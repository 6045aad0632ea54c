"""
Tokenizer for LC-3 assembly source.

Produces one token list per source line, so list index + 1 is always the
source line number. Tokens are plain strings; the tokenizer does not decide
what is a label, a mnemonic or an operand.

Grouping rules:
  - ';' outside a quoted region starts a comment running to end of line
  - a quoted region ("...", with \\" escapes) is one atomic token
  - groups separated only by commas (whitespace around the comma allowed)
    merge into one token:   ADD R1, R2 , R3   ->  ['ADD', 'R1,R2,R3']
  - whitespace alone always separates:
                            ADD R1,R2 R3      ->  ['ADD', 'R1,R2', 'R3']
"""

from __future__ import annotations
from typing import List

from .errors import TokenizeError

__all__ = ['Lexer', 'split_lines', 'tokenize', 'tokenize_line']

COMMENT_CHAR = ';'
QUOTE_CHAR = '"'
ESCAPE_CHAR = '\\'
SEPARATOR_CHAR = ','


def split_lines(source: str) -> List[str]:
    """Split on '\\n' or '\\r\\n'. A trailing newline keeps its empty slot."""
    return source.replace('\r\n', '\n').split('\n')


class Lexer:
    """Scans a single line of assembly into string tokens."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.tokens: List[str] = []

    def _peek(self, offset: int = 0) -> str:
        i = self.pos + offset
        return self.text[i] if i < len(self.text) else "\0"

    def _at_end(self) -> bool:
        return self.pos >= len(self.text)

    def _skip_whitespace(self):
        while not self._at_end() and self.text[self.pos].isspace():
            self.pos += 1

    def _read_quoted(self) -> str:
        """Return the quoted region starting at pos, quotes and escapes verbatim."""
        start = self.pos
        self.pos += 1  # opening "
        while not self._at_end():
            ch = self.text[self.pos]
            if ch == ESCAPE_CHAR:
                self.pos += 2
                continue
            self.pos += 1
            if ch == QUOTE_CHAR:
                return self.text[start:self.pos]
        raise TokenizeError(f"unterminated string literal: {self.text[start:].rstrip()}")

    def tokenize(self) -> List[str]:
        self.tokens = []
        current = ""

        while not self._at_end():
            ch = self._peek()

            if ch == COMMENT_CHAR:
                break

            if ch == QUOTE_CHAR:
                current += self._read_quoted()
                continue

            if ch.isspace():
                self._skip_whitespace()
                # A comma on either side of the gap glues the groups together
                joined = current.endswith(SEPARATOR_CHAR) or self._peek() == SEPARATOR_CHAR
                if current and not joined:
                    self.tokens.append(current)
                    current = ""
                continue

            current += ch
            self.pos += 1

        if current:
            self.tokens.append(current)
        return self.tokens


def tokenize_line(text: str) -> List[str]:
    """Tokenize one line. Blank and comment-only lines give []."""
    return Lexer(text).tokenize()


def tokenize(source: str) -> List[List[str]]:
    """Tokenize a whole document, one token list per line.

    Raises TokenizeError with `line` set to the offending 1-based line.
    """
    token_lines: List[List[str]] = []
    for line_num, text in enumerate(split_lines(source), 1):
        try:
            token_lines.append(tokenize_line(text))
        except TokenizeError as e:
            e.line = line_num
            raise
    return token_lines
