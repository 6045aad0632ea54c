"""
Two-pass LC-3 assembler.

Input:  assembly source text
Output: Result holding an AssembledImage, or the first fatal error

How the two passes work:
  Pass 1 (symbols.py): walk every line, assign addresses starting at .ORIG
          and bind labels to the address counter.
  Pass 2 (encoder.py): walk the lines again and emit 16-bit words, now that
          every label (including forward references) has an address.

Assembly is all-or-nothing: the first error ends the run and no partial
image is returned. Each error is reported as "at line N: message".
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .encoder import EncodedLine, encode_program
from .errors import Context, Result, handle_errors
from .lexer import split_lines, tokenize_line
from .symbols import build_symbol_table

__all__ = ['AssembledImage', 'Assembler', 'assemble']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssembledImage:
    """Machine code for one program: words[i] lives at orig + i."""
    orig: int
    words: Tuple[int, ...]
    symbol_table: Dict[str, int]
    lines: Tuple[EncodedLine, ...] = ()
    warnings: Tuple[str, ...] = field(default=())

    def __len__(self) -> int:
        return len(self.words)

    @property
    def end_address(self) -> int:
        """First address after the image."""
        return self.orig + len(self.words)

    def word_at(self, address: int) -> int:
        if not self.orig <= address < self.end_address:
            raise IndexError(f"address x{address:04X} is outside the image")
        return self.words[address - self.orig]


class Assembler:
    """Two-pass LC-3 assembler.

    Usage:
        asm = Assembler()
        result = asm.assemble(source_text)
        if result.success:
            image = result.result
            print(asm.get_listing())
        else:
            print(result.error_message)

    An instance keeps only the source and image of its latest run.
    """

    def __init__(self, *, require_end: bool = True):
        self.require_end = require_end
        self.source_lines: List[str] = []
        self.image: Optional[AssembledImage] = None

    def assemble(self, source: str) -> Result:
        """Assemble source text. Returns Result(success, result=AssembledImage)."""
        self.image = None
        self.source_lines = split_lines(source)

        token_lines: List[List[str]] = []
        for line_num, text in enumerate(self.source_lines, 1):
            tokenized = handle_errors(Context(line=line_num), tokenize_line)(text)
            if not tokenized.success:
                logger.debug(f"Tokenizer failed {tokenized.error_message}")
                return tokenized
            token_lines.append(tokenized.result)

        pass1 = build_symbol_table(token_lines, require_end=self.require_end)
        if not pass1.success:
            logger.debug(f"Pass 1 failed {pass1.error_message}")
            return pass1
        symbols = pass1.result
        logger.debug(f"Pass 1: origin x{symbols.orig:04X}, {len(symbols.symbols)} labels")

        warnings = []
        for line_num in symbols.ignored_lines:
            message = f"line {line_num}: ignored content after .END (line {symbols.end_line})"
            logger.warning(message)
            warnings.append(message)

        pass2 = encode_program(token_lines, symbols.symbols, symbols.orig)
        if not pass2.success:
            logger.debug(f"Pass 2 failed {pass2.error_message}")
            return pass2

        encoded: List[EncodedLine] = pass2.result
        words = tuple(w for line in encoded for w in line.words)
        logger.debug(f"Pass 2: {len(words)} words at x{symbols.orig:04X}")

        self.image = AssembledImage(
            orig=symbols.orig,
            words=words,
            symbol_table=symbols.symbols,
            lines=tuple(encoded),
            warnings=tuple(warnings),
        )
        return Result.ok(self.image)

    def get_listing(self) -> str:
        """Return a human-readable listing showing address, words, and source."""
        if self.image is None:
            return ""

        lines = []
        lines.append(f"{'ADDR':>5}  {'WORD':<4}  {'LINE':>4}  SOURCE")
        lines.append("-" * 60)

        for entry in self.image.lines:
            raw = self.source_lines[entry.line - 1].strip()
            if len(raw) > 40:
                raw = raw[:40]
            for i, word in enumerate(entry.words):
                if i == 0:
                    lines.append(f"x{entry.address:04X}  {word:04X}  {entry.line:>4}  {raw}")
                else:
                    lines.append(f"x{entry.address + i:04X}  {word:04X}")

        if self.image.symbol_table:
            lines.append("")
            lines.append(f"{'SYMBOL':<20}  ADDR")
            lines.append("-" * 60)
            for name, address in sorted(self.image.symbol_table.items(), key=lambda kv: kv[1]):
                lines.append(f"{name:<20}  x{address:04X}")

        return '\n'.join(lines)


# ──────────────────────────────────────────────
# Convenience function
# ──────────────────────────────────────────────

def assemble(source: str, *, require_end: bool = True) -> Result:
    """Assemble source text with a fresh Assembler."""
    return Assembler(require_end=require_end).assemble(source)
