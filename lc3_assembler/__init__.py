"""
LC-3 Assembler
==============
A two-pass assembler for the LC-3, the 16-bit educational machine from
Patt & Patel's "Introduction to Computing Systems".

Architecture:
    ┌───────────┐    ┌───────────┐    ┌────────────┐    ┌────────────┐
    │ Source    │───>│ Tokenizer │───>│  Pass 1    │───>│  Pass 2    │
    │ (text)    │    │ (strings) │    │ (symbols)  │    │  (words)   │
    └───────────┘    └───────────┘    └────────────┘    └────────────┘

    - lexer.py:     per-line tokenizer, comment and quote aware
    - operands.py:  register / literal / string token parsers
    - isa.py:       instruction table with operand field templates
    - symbols.py:   address assignment and label binding
    - encoder.py:   operand validation, range checks, word emission
    - errors.py:    error kinds, Context, Result, handle_errors
    - assembler.py: pass sequencing, AssembledImage, listings

File loading, object-file output and simulation are left to callers.
"""

__version__ = "0.1.0"

from .errors import (AssemblerError, TokenizeError, OperandSyntaxError,
                     OperandCountError, OperandKindError, SymbolError,
                     DirectiveError, RangeError, InstructionError,
                     Context, Result, handle_errors)
from .lexer import tokenize, tokenize_line
from .operands import parse_register, parse_literal, parse_string
from .assembler import AssembledImage, Assembler, assemble
