"""
LC-3 instruction and directive tables.

Every instruction is one 16-bit word: a fixed base pattern OR'd with its
operand fields. Each table entry lists those fields in source order, so
validating and encoding an instruction is driven entirely by the table.

Reference: Patt & Patel, "Introduction to Computing Systems", Appendix A.
"""

from __future__ import annotations
import enum
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

__all__ = [
    'WORD_MASK', 'MAX_ADDRESS',
    'OperandKind', 'Field', 'InstructionSpec', 'Directive', 'INSTRUCTIONS',
    'lookup_instruction', 'lookup_directive', 'is_keyword',
]

WORD_MASK = 0xFFFF
MAX_ADDRESS = 0xFFFF


class OperandKind(enum.Enum):
    REGISTER = "register"
    REGISTER_OR_IMMEDIATE = "register or immediate"
    IMMEDIATE = "immediate"            # signed literal
    PC_OFFSET = "label or PC offset"   # label resolved PC-relative, or literal offset
    TRAP_VECTOR = "trap vector"        # unsigned literal


@dataclass(frozen=True)
class Field:
    """One operand slot: where its bits go in the instruction word."""
    kind: OperandKind
    shift: int
    width: int = 3

    @property
    def mask(self) -> int:
        return (1 << self.width) - 1


@dataclass(frozen=True)
class InstructionSpec:
    mnemonic: str
    base: int
    fields: Tuple[Field, ...] = ()

    @property
    def operand_count(self) -> int:
        return len(self.fields)


class Directive(enum.Enum):
    ORIG = ".ORIG"
    FILL = ".FILL"
    BLKW = ".BLKW"
    STRINGZ = ".STRINGZ"
    END = ".END"


# ──────────────────────────────────────────────
# Instruction table
# ──────────────────────────────────────────────
# Keys are upper-case; lookup is case-insensitive.

INSTRUCTIONS: Dict[str, InstructionSpec] = {}

_REG_DR = Field(OperandKind.REGISTER, 9)
_REG_SR1 = Field(OperandKind.REGISTER, 6)
_REG_SR2 = Field(OperandKind.REGISTER, 0)
_IMM5 = Field(OperandKind.REGISTER_OR_IMMEDIATE, 0, 5)
_OFFSET6 = Field(OperandKind.IMMEDIATE, 0, 6)
_PCOFFSET9 = Field(OperandKind.PC_OFFSET, 0, 9)
_PCOFFSET11 = Field(OperandKind.PC_OFFSET, 0, 11)
_TRAPVECT8 = Field(OperandKind.TRAP_VECTOR, 0, 8)


def _op(mnemonic: str, base: int, *fields: Field):
    """Register an instruction entry."""
    key = mnemonic.upper()
    assert key not in INSTRUCTIONS, key
    INSTRUCTIONS[key] = InstructionSpec(mnemonic, base, tuple(fields))


# ── Operate ──
_op('ADD',   0x1000, _REG_DR, _REG_SR1, _IMM5)
_op('AND',   0x5000, _REG_DR, _REG_SR1, _IMM5)
_op('NOT',   0x903F, _REG_DR, _REG_SR1)

# ── Branches: nzp condition bits at [11:9] ──
for _flags in ('', 'n', 'z', 'p', 'nz', 'np', 'zp', 'nzp'):
    _nzp = ((4 if 'n' in _flags else 0)
            | (2 if 'z' in _flags else 0)
            | (1 if 'p' in _flags else 0))
    if not _flags:
        _nzp = 0b111  # plain BR is unconditional
    _op('BR' + _flags, _nzp << 9, _PCOFFSET9)

# ── Control ──
_op('JMP',   0xC000, _REG_SR1)
_op('RET',   0xC1C0)
_op('JSR',   0x4800, _PCOFFSET11)
_op('JSRR',  0x4000, _REG_SR1)
_op('RTI',   0x8000)

# ── Data movement ──
_op('LD',    0x2000, _REG_DR, _PCOFFSET9)
_op('LDI',   0xA000, _REG_DR, _PCOFFSET9)
_op('LEA',   0xE000, _REG_DR, _PCOFFSET9)
_op('ST',    0x3000, _REG_DR, _PCOFFSET9)
_op('STI',   0xB000, _REG_DR, _PCOFFSET9)
_op('LDR',   0x6000, _REG_DR, _REG_SR1, _OFFSET6)
_op('STR',   0x7000, _REG_DR, _REG_SR1, _OFFSET6)

# ── Traps and their service-routine aliases ──
_op('TRAP',  0xF000, _TRAPVECT8)
_op('GETC',  0xF020)
_op('OUT',   0xF021)
_op('PUTS',  0xF022)
_op('IN',    0xF023)
_op('PUTSP', 0xF024)
_op('HALT',  0xF025)


def lookup_instruction(word: str) -> Optional[InstructionSpec]:
    return INSTRUCTIONS.get(word.upper())


def lookup_directive(word: str) -> Optional[Directive]:
    try:
        return Directive(word.upper())
    except ValueError:
        return None


def is_keyword(word: str) -> bool:
    """True if `word` names an instruction or a directive."""
    return lookup_instruction(word) is not None or lookup_directive(word) is not None
