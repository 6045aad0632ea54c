"""
Tests for handle_errors and the Result / Context values.
"""
import pytest
from lc3_assembler.errors import (AssemblerError, Context, OperandSyntaxError,
                                  Result, SymbolError, handle_errors)
from lc3_assembler.operands import parse_register


def inc1(x):
    return x + 1


def bad(x):
    raise ValueError("Bad!")


def greater_than(x, y):
    if x > y:
        return x
    raise ValueError(f"Expected {x} to be greater than {y}!")


CONTEXT = Context(line=42)


class TestHandleErrors:
    def test_unary_success(self):
        assert handle_errors(CONTEXT, inc1)(10) == Result(success=True, result=11)

    def test_unary_failure(self):
        assert handle_errors(CONTEXT, bad)(10) == Result(
            success=False, error_message="at line 42: Bad!")

    def test_binary_success(self):
        assert handle_errors(CONTEXT, greater_than)(4, 2) == Result(success=True, result=4)

    def test_binary_failure(self):
        assert handle_errors(CONTEXT, greater_than)(2, 4) == Result(
            success=False,
            error_message="at line 42: Expected 2 to be greater than 4!")

    def test_keyword_arguments_pass_through(self):
        assert handle_errors(CONTEXT, greater_than)(x=5, y=1).result == 5

    def test_line_bound_at_wrap_time(self):
        wrapped = handle_errors(Context(line=7), bad)
        first = wrapped(1)
        second = wrapped(2)
        assert first.error_message == second.error_message == "at line 7: Bad!"

    def test_failure_keeps_exception(self):
        result = handle_errors(Context(line=3), parse_register)("R9")
        assert not result.success
        assert isinstance(result.error, OperandSyntaxError)
        assert result.error.line == 3
        assert result.error_message.startswith("at line 3: invalid register 'R9'")

    def test_error_line_matches_message(self):
        def raises_with_line():
            raise SymbolError("dup", line=9)
        result = handle_errors(Context(line=1), raises_with_line)()
        assert result.error.line == 1
        assert result.error_message == "at line 1: dup"

    def test_does_not_catch_base_exceptions(self):
        def interrupt():
            raise KeyboardInterrupt
        with pytest.raises(KeyboardInterrupt):
            handle_errors(CONTEXT, interrupt)()


class TestContext:
    def test_frozen(self):
        with pytest.raises(AttributeError):
            CONTEXT.line = 1


class TestAssemblerError:
    def test_message_is_plain(self):
        e = AssemblerError("something broke", line=5)
        assert str(e) == "something broke"
        assert e.line == 5
