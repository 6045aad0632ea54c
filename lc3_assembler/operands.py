"""
Operand parsers.

Each parser takes one token and either returns its value or raises an
AssemblerError subclass with a message meant for the user. Range checks
belong to the encoder, not here.
"""

from __future__ import annotations
import re
from typing import List

from .errors import OperandCountError, OperandSyntaxError

__all__ = [
    'parse_register', 'parse_literal', 'parse_string', 'split_operands',
    'looks_like_register', 'looks_like_literal', 'is_label_name',
]

_REGISTER_RE = re.compile(r'[Rr]([0-7])')
_DECIMAL_RE = re.compile(r'#(-?[0-9]+)')
_HEX_RE = re.compile(r'[xX]([0-9A-Fa-f]+)')
_LABEL_RE = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')

_ESCAPES = {
    'n': '\n',
    'r': '\r',
    't': '\t',
    '0': '\0',
    '\\': '\\',
    '"': '"',
}


def parse_register(token: str) -> int:
    """R0..R7 (either case) -> 0..7."""
    m = _REGISTER_RE.fullmatch(token)
    if not m:
        raise OperandSyntaxError(
            f"invalid register '{token}': expected R0 through R7")
    return int(m.group(1))


def parse_literal(token: str) -> int:
    """#<decimal> (signed) or x<hex> (unsigned) -> int."""
    m = _DECIMAL_RE.fullmatch(token)
    if m:
        return int(m.group(1), 10)
    m = _HEX_RE.fullmatch(token)
    if m:
        return int(m.group(1), 16)
    raise OperandSyntaxError(
        f"invalid literal '{token}': expected #<decimal> or x<hex>")


def parse_string(token: str) -> str:
    """Decode a quoted .STRINGZ operand, resolving backslash escapes."""
    if len(token) < 2 or not token.startswith('"') or not token.endswith('"'):
        raise OperandSyntaxError(f"expected a quoted string, got {token}")

    body = token[1:-1]
    chars: List[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == '\\':
            if i + 1 >= len(body):
                # the closing quote was escaped
                raise OperandSyntaxError(f"unterminated string {token}")
            esc = body[i + 1]
            if esc not in _ESCAPES:
                raise OperandSyntaxError(f"unknown escape sequence '\\{esc}' in {token}")
            chars.append(_ESCAPES[esc])
            i += 2
            continue
        if ch == '"':
            raise OperandSyntaxError(f"unexpected quote inside string {token}")
        chars.append(ch)
        i += 1
    return "".join(chars)


def looks_like_register(token: str) -> bool:
    return bool(_REGISTER_RE.fullmatch(token))


def looks_like_literal(token: str) -> bool:
    return bool(_DECIMAL_RE.fullmatch(token) or _HEX_RE.fullmatch(token))


def is_label_name(token: str) -> bool:
    """Identifier-shaped and not readable as a register or hex literal."""
    return (bool(_LABEL_RE.fullmatch(token))
            and not looks_like_register(token)
            and not looks_like_literal(token))


def split_operands(name: str, tokens: List[str], expected: int) -> List[str]:
    """Split the operand tokens after `name` into exactly `expected` operands.

    The tokenizer keeps whitespace-separated groups apart, so more than one
    group here means the operands were not comma-separated.
    """
    if len(tokens) > 1:
        raise OperandCountError(
            f"{name}: operands must be separated by commas, "
            f"got {len(tokens)} groups: {' '.join(tokens)}")

    if not tokens:
        operands: List[str] = []
    elif expected == 1 and tokens[0].startswith('"'):
        # quoted strings may contain commas
        operands = [tokens[0]]
    else:
        operands = tokens[0].split(',')
        if any(op == '' for op in operands):
            raise OperandSyntaxError(f"{name}: empty operand in '{tokens[0]}'")

    if len(operands) != expected:
        raise OperandCountError(
            f"{name}: expected {expected} operand{'s' if expected != 1 else ''}, "
            f"got {len(operands)}")
    return operands
