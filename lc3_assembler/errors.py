"""
Error kinds, per-line context and the Result value for the LC-3 assembler.

Parsers and encoders raise AssemblerError subclasses with a bare message.
The passes call them through handle_errors(), which turns the exception into
a failed Result whose message is prefixed with the source line:

    "at line 12: undefined label 'LOOP'"
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

__all__ = [
    'AssemblerError', 'TokenizeError', 'OperandSyntaxError', 'OperandCountError',
    'OperandKindError', 'SymbolError', 'DirectiveError', 'RangeError',
    'InstructionError', 'Context', 'Result', 'handle_errors',
]


class AssemblerError(Exception):
    """Base class for every fatal assembly error."""
    def __init__(self, message: str, line: Optional[int] = None):
        self.message = message
        self.line = line
        super().__init__(message)


class TokenizeError(AssemblerError):
    """Unterminated quoted token."""


class OperandSyntaxError(AssemblerError):
    """Malformed register, literal or string token."""


class OperandCountError(AssemblerError):
    """Wrong number of operands for a mnemonic or directive."""


class OperandKindError(AssemblerError):
    """Operand of the wrong kind, e.g. a literal where a register belongs."""


class SymbolError(AssemblerError):
    """Duplicate, undefined or malformed label."""


class DirectiveError(AssemblerError):
    """Misplaced, missing or duplicated directive, or bad directive operand."""


class RangeError(AssemblerError):
    """Value does not fit its field, or the address counter overflowed."""


class InstructionError(AssemblerError):
    """Unknown word where an instruction or directive was required."""


# ──────────────────────────────────────────────
# Context and Result
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class Context:
    """Where in the source a parse/encode step is running."""
    line: int
    address: int = 0


@dataclass(frozen=True)
class Result:
    """Success/failure value returned across pass boundaries.

    Success: Result(success=True, result=value)
    Failure: Result(success=False, error_message="at line N: ...")

    `error` keeps the raised exception so callers can check its kind; it
    takes no part in equality.
    """
    success: bool
    result: Any = None
    error_message: Optional[str] = None
    error: Optional[BaseException] = field(default=None, compare=False, repr=False)

    @classmethod
    def ok(cls, value: Any) -> Result:
        return cls(success=True, result=value)

    @classmethod
    def fail(cls, context: Context, error: BaseException) -> Result:
        message = error.message if isinstance(error, AssemblerError) else str(error)
        return cls(success=False,
                   error_message=f"at line {context.line}: {message}",
                   error=error)


def handle_errors(context: Context, fn: Callable[..., Any]) -> Callable[..., Result]:
    """Wrap `fn` so that it returns a Result instead of raising.

    The context is bound here, not at call time: every call through the
    returned function reports `context.line`. Re-wrap for each line.
    """
    def wrapped(*args, **kwargs) -> Result:
        try:
            value = fn(*args, **kwargs)
        except Exception as e:
            if isinstance(e, AssemblerError):
                e.line = context.line
            return Result.fail(context, e)
        return Result.ok(value)

    wrapped.__name__ = getattr(fn, '__name__', 'wrapped')
    wrapped.__doc__ = getattr(fn, '__doc__', None)
    return wrapped
