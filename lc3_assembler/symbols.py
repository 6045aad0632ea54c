"""
Pass 1: assign addresses and build the symbol table.

Walks the token lines with an address counter starting at the .ORIG operand.
Each line advances the counter by the number of words it will occupy, and
any label on the line is bound to the counter value before the advance.
Nothing is encoded here; operand checking beyond what sizing needs is left
to pass 2.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import (Context, DirectiveError, InstructionError, RangeError,
                     Result, SymbolError, handle_errors)
from .isa import MAX_ADDRESS, Directive, is_keyword, lookup_directive
from .operands import (is_label_name, looks_like_literal, parse_literal,
                       parse_string, split_operands)

__all__ = ['Statement', 'SymbolPass', 'SymbolTableBuilder', 'split_statement',
           'build_symbol_table']


@dataclass
class Statement:
    """A token line split into optional label, keyword and operand tokens."""
    label: Optional[str] = None
    keyword: Optional[str] = None
    operands: List[str] = field(default_factory=list)

    @property
    def directive(self) -> Optional[Directive]:
        return lookup_directive(self.keyword) if self.keyword else None


def split_statement(tokens: List[str]) -> Statement:
    """Classify the leading token(s) of a line.

    A first token that is not an instruction or directive is a label, and the
    rest of the line is read again as a statement of its own.
    """
    if not tokens:
        return Statement()

    first, rest = tokens[0], tokens[1:]
    if is_keyword(first):
        return Statement(keyword=first, operands=rest)

    if not is_label_name(first):
        raise SymbolError(f"'{first}' is neither an instruction nor a valid label")
    if not rest:
        return Statement(label=first)
    if not is_keyword(rest[0]):
        raise InstructionError(
            f"unknown instruction '{rest[0]}' after label '{first}'")
    return Statement(label=first, keyword=rest[0], operands=rest[1:])


def directive_operand(directive: Directive, operands: List[str]) -> str:
    """The single operand of a one-operand directive."""
    return split_operands(directive.value, operands, 1)[0]


def string_operand(operands: List[str]) -> str:
    """Decoded text of a .STRINGZ operand."""
    token = directive_operand(Directive.STRINGZ, operands)
    if not token.startswith('"'):
        raise DirectiveError(f".STRINGZ expects a quoted string, got {token}")
    return parse_string(token)


def block_size(operands: List[str]) -> int:
    """Word count of a .BLKW operand."""
    token = directive_operand(Directive.BLKW, operands)
    if not looks_like_literal(token):
        raise DirectiveError(f".BLKW expects a literal word count, got {token}")
    count = parse_literal(token)
    if count < 0:
        raise RangeError(f".BLKW count must not be negative, got {count}")
    return count


@dataclass
class SymbolPass:
    """Outcome of pass 1."""
    symbols: Dict[str, int]
    orig: int
    end_line: Optional[int] = None
    ignored_lines: List[int] = field(default_factory=list)


class SymbolTableBuilder:
    """Pass 1 state for one assembly run."""

    def __init__(self, require_end: bool = True):
        self.require_end = require_end
        self.symbols: Dict[str, int] = {}
        self.label_lines: Dict[str, int] = {}
        self.orig: Optional[int] = None
        self.orig_line: Optional[int] = None
        self.counter: int = 0
        self.end_line: Optional[int] = None
        self.ignored_lines: List[int] = []

    def build(self, token_lines: List[List[str]]) -> Result:
        """Run pass 1; Result.result is a SymbolPass on success."""
        for line_num, tokens in enumerate(token_lines, 1):
            ctx = Context(line=line_num, address=self.counter)
            result = handle_errors(ctx, self.process_line)(ctx, tokens)
            if not result.success:
                return result

        last = Context(line=max(len(token_lines), 1), address=self.counter)
        return handle_errors(last, self.finish)(last)

    def process_line(self, ctx: Context, tokens: List[str]):
        if not tokens:
            return
        if self.end_line is not None:
            self.ignored_lines.append(ctx.line)
            return

        stmt = split_statement(tokens)
        directive = stmt.directive

        if self.orig is None:
            if directive is not Directive.ORIG or stmt.label:
                raise DirectiveError(
                    f"expected .ORIG before '{tokens[0]}'")
        elif directive is Directive.ORIG:
            raise DirectiveError(
                f"duplicate .ORIG (already set at line {self.orig_line})")

        if stmt.label:
            self.bind(ctx, stmt.label)

        if directive is Directive.ORIG:
            self.set_origin(ctx, stmt.operands)
            return
        if directive is Directive.END:
            self.end_line = ctx.line
            return
        if stmt.keyword:
            self.advance(self.measure(stmt))

    def bind(self, ctx: Context, label: str):
        if label in self.symbols:
            raise SymbolError(
                f"duplicate label '{label}' (first defined at line {self.label_lines[label]})")
        if ctx.address > MAX_ADDRESS:
            raise RangeError(f"label '{label}' would be placed past x{MAX_ADDRESS:04X}")
        self.symbols[label] = ctx.address
        self.label_lines[label] = ctx.line

    def set_origin(self, ctx: Context, operands: List[str]):
        token = directive_operand(Directive.ORIG, operands)
        if not looks_like_literal(token):
            raise DirectiveError(f".ORIG expects a literal address, got {token}")
        address = parse_literal(token)
        if not 0 <= address <= MAX_ADDRESS:
            raise RangeError(f".ORIG address {token} is outside x0000..x{MAX_ADDRESS:04X}")
        self.orig = address
        self.orig_line = ctx.line
        self.counter = address

    @staticmethod
    def measure(stmt: Statement) -> int:
        """Words occupied by an instruction or directive line."""
        directive = stmt.directive
        if directive is None or directive is Directive.FILL:
            return 1
        if directive is Directive.BLKW:
            return block_size(stmt.operands)
        if directive is Directive.STRINGZ:
            return len(string_operand(stmt.operands)) + 1
        return 0

    def advance(self, size: int):
        if self.counter + size > MAX_ADDRESS + 1:
            raise RangeError(
                f"program extends past x{MAX_ADDRESS:04X} "
                f"(x{self.counter:04X} + {size} words)")
        self.counter += size

    def finish(self, ctx: Context) -> SymbolPass:
        if self.orig is None:
            raise DirectiveError("missing .ORIG directive")
        if self.end_line is None and self.require_end:
            raise DirectiveError("missing .END directive")
        return SymbolPass(symbols=dict(self.symbols), orig=self.orig,
                          end_line=self.end_line,
                          ignored_lines=list(self.ignored_lines))


def build_symbol_table(token_lines: List[List[str]], *, require_end: bool = True) -> Result:
    """Pass 1 over tokenized source. See SymbolTableBuilder."""
    return SymbolTableBuilder(require_end=require_end).build(token_lines)
