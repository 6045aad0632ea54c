"""
Pass 2: encode each line into 16-bit words.

Runs over the same token lines as pass 1 with the finished symbol table.
Instruction operands are checked against the field template from isa.py:

    ADD R1,R2,#-3      ->  0001 001 010 1 11101   (x12BD)
    BRz LOOP           ->  0000 010 <LOOP - (PC + 1)>

Every immediate and PC-relative offset is range-checked against the signed
width of its field; the TRAP vector is unsigned.
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .errors import (Context, OperandKindError, OperandSyntaxError, RangeError,
                     Result, SymbolError, handle_errors)
from .isa import (WORD_MASK, Directive, Field, InstructionSpec, OperandKind,
                  lookup_instruction)
from .operands import (is_label_name, looks_like_literal, looks_like_register,
                       parse_literal, parse_register, split_operands)
from .symbols import block_size, split_statement, string_operand

__all__ = ['EncodedLine', 'Encoder', 'encode_program', 'encode_instruction',
           'signed_range']

# R followed by digits: meant as a register even when out of range (R8, R12)
_REGISTERISH_RE = re.compile(r'[Rr]-?\d+')

FILL_MIN = -0x8000
FILL_MAX = WORD_MASK


@dataclass(frozen=True)
class EncodedLine:
    """Words produced by one source line, placed at `address`."""
    line: int
    address: int
    words: Tuple[int, ...]


def signed_range(width: int) -> Tuple[int, int]:
    return -(1 << (width - 1)), (1 << (width - 1)) - 1


def _kind_of(token: str) -> str:
    if looks_like_register(token):
        return "register"
    if looks_like_literal(token):
        return "literal"
    if token.startswith('"'):
        return "string"
    return "label"


def _wrong_kind(name: str, expected: str, token: str) -> OperandKindError:
    return OperandKindError(f"{name}: expected {expected}, got {_kind_of(token)} '{token}'")


def _check_signed(name: str, what: str, value: int, width: int) -> int:
    lo, hi = signed_range(width)
    if not lo <= value <= hi:
        raise RangeError(
            f"{name}: {what} {value} does not fit in {width} bits ({lo}..{hi})")
    return value & ((1 << width) - 1)


def resolve_label(symbols: Dict[str, int], label: str) -> int:
    if label not in symbols:
        raise SymbolError(f"undefined label '{label}'")
    return symbols[label]


def _encode_register(name: str, token: str) -> int:
    if not looks_like_register(token) and not _REGISTERISH_RE.fullmatch(token):
        if looks_like_literal(token) or is_label_name(token) or token.startswith('"'):
            raise _wrong_kind(name, "a register", token)
    return parse_register(token)


def encode_field(ctx: Context, name: str, fld: Field, token: str,
                 symbols: Dict[str, int]) -> int:
    """Bits contributed by one operand, already shifted into place."""
    kind = fld.kind

    if kind is OperandKind.REGISTER:
        return _encode_register(name, token) << fld.shift

    if kind is OperandKind.REGISTER_OR_IMMEDIATE:
        if looks_like_literal(token):
            imm = _check_signed(name, "immediate", parse_literal(token), fld.width)
            return (1 << fld.width) | imm
        if looks_like_register(token) or _REGISTERISH_RE.fullmatch(token):
            return parse_register(token) << fld.shift
        if is_label_name(token) or token.startswith('"'):
            raise _wrong_kind(name, "a register or immediate", token)
        parse_literal(token)  # raises with the literal syntax message
        raise OperandSyntaxError(f"{name}: invalid register or immediate '{token}'")

    if kind is OperandKind.IMMEDIATE:
        if looks_like_literal(token):
            return _check_signed(name, "offset", parse_literal(token), fld.width) << fld.shift
        if looks_like_register(token) or is_label_name(token) or token.startswith('"'):
            raise _wrong_kind(name, "an immediate", token)
        parse_literal(token)
        raise OperandSyntaxError(f"{name}: invalid immediate '{token}'")

    if kind is OperandKind.PC_OFFSET:
        if looks_like_literal(token):
            return _check_signed(name, "offset", parse_literal(token), fld.width)
        if is_label_name(token):
            target = resolve_label(symbols, token)
            offset = target - (ctx.address + 1)
            lo, hi = signed_range(fld.width)
            if not lo <= offset <= hi:
                raise RangeError(
                    f"{name}: label '{token}' at x{target:04X} is {offset} words "
                    f"from x{ctx.address + 1:04X}, outside {fld.width}-bit range ({lo}..{hi})")
            return offset & fld.mask
        if looks_like_register(token):
            raise _wrong_kind(name, "a label or PC offset", token)
        raise OperandSyntaxError(f"{name}: invalid label or offset '{token}'")

    if kind is OperandKind.TRAP_VECTOR:
        if looks_like_literal(token):
            vector = parse_literal(token)
            if not 0 <= vector <= fld.mask:
                raise RangeError(
                    f"{name}: trap vector {token} is outside x00..x{fld.mask:02X}")
            return vector
        if looks_like_register(token) or is_label_name(token):
            raise _wrong_kind(name, "a trap vector literal", token)
        parse_literal(token)
        raise OperandSyntaxError(f"{name}: invalid trap vector '{token}'")

    raise AssertionError(f"unhandled operand kind {kind}")


def encode_instruction(ctx: Context, spec: InstructionSpec, operands: List[str],
                       symbols: Dict[str, int]) -> int:
    """Encode one instruction at ctx.address."""
    tokens = split_operands(spec.mnemonic, operands, spec.operand_count)
    word = spec.base
    for fld, token in zip(spec.fields, tokens):
        word |= encode_field(ctx, spec.mnemonic, fld, token, symbols)
    return word & WORD_MASK


def encode_fill(operands: List[str], symbols: Dict[str, int]) -> int:
    token = split_operands(Directive.FILL.value, operands, 1)[0]
    if looks_like_literal(token):
        value = parse_literal(token)
        if not FILL_MIN <= value <= FILL_MAX:
            raise RangeError(
                f".FILL value {token} does not fit in 16 bits ({FILL_MIN}..{FILL_MAX})")
        return value & WORD_MASK
    if is_label_name(token):
        return resolve_label(symbols, token)
    if looks_like_register(token) or token.startswith('"'):
        raise _wrong_kind(Directive.FILL.value, "a literal or label", token)
    parse_literal(token)
    raise OperandSyntaxError(f"{Directive.FILL.value}: invalid operand '{token}'")


def encode_stringz(operands: List[str]) -> Tuple[int, ...]:
    text = string_operand(operands)
    words = []
    for ch in text:
        code = ord(ch)
        if code > WORD_MASK:
            raise RangeError(f".STRINGZ character {ch!r} does not fit in 16 bits")
        words.append(code)
    words.append(0)
    return tuple(words)


class Encoder:
    """Pass 2 state for one assembly run."""

    def __init__(self, symbols: Dict[str, int], orig: int):
        self.symbols = symbols
        self.orig = orig
        self.address: int = orig
        self.finished = False

    def encode(self, token_lines: List[List[str]]) -> Result:
        """Run pass 2; Result.result is a list of EncodedLine on success."""
        encoded: List[EncodedLine] = []
        for line_num, tokens in enumerate(token_lines, 1):
            if self.finished:
                break
            if not tokens:
                continue
            ctx = Context(line=line_num, address=self.address)
            result = handle_errors(ctx, self.encode_line)(ctx, tokens)
            if not result.success:
                return result
            if result.result is not None:
                encoded.append(result.result)
        return Result.ok(encoded)

    def encode_line(self, ctx: Context, tokens: List[str]) -> Optional[EncodedLine]:
        stmt = split_statement(tokens)
        if stmt.keyword is None:
            return None

        directive = stmt.directive
        if directive is Directive.ORIG:
            split_operands(directive.value, stmt.operands, 1)
            self.address = self.orig
            return None
        if directive is Directive.END:
            split_operands(directive.value, stmt.operands, 0)
            self.finished = True
            return None

        if directive is Directive.FILL:
            words: Tuple[int, ...] = (encode_fill(stmt.operands, self.symbols),)
        elif directive is Directive.BLKW:
            words = (0,) * block_size(stmt.operands)
        elif directive is Directive.STRINGZ:
            words = encode_stringz(stmt.operands)
        else:
            spec = lookup_instruction(stmt.keyword)
            words = (encode_instruction(ctx, spec, stmt.operands, self.symbols),)

        self.address += len(words)
        return EncodedLine(line=ctx.line, address=ctx.address, words=words)


def encode_program(token_lines: List[List[str]], symbols: Dict[str, int], orig: int) -> Result:
    """Pass 2 over tokenized source. See Encoder."""
    return Encoder(symbols, orig).encode(token_lines)
