"""
Tokenizer tests.

Each source line maps to exactly one token list, so these also check that
blank and comment lines keep their slots for line-number reporting.
"""
import pytest
from lc3_assembler.errors import TokenizeError
from lc3_assembler.lexer import split_lines, tokenize, tokenize_line


class TestEmptyAndComments:
    def test_empty_document(self):
        assert tokenize("") == [[]]

    def test_comment_only(self):
        assert tokenize("; things go here") == [[]]

    def test_comment_with_leading_whitespace(self):
        assert tokenize("  ; things go here") == [[]]

    def test_semicolons_inside_comments(self):
        src = ";; comment\nBRnzp STUFF ; comment; really\n.END"
        assert tokenize(src) == [
            [],
            ["BRnzp", "STUFF"],
            [".END"],
        ]

    def test_whitespace_only_line(self):
        assert tokenize_line(" \t  ") == []


class TestDirectives:
    def test_orig(self):
        assert tokenize(".ORIG x3000") == [[".ORIG", "x3000"]]

    def test_orig_with_comment(self):
        assert tokenize(".ORIG  x3000   ; start here") == [[".ORIG", "x3000"]]

    def test_orig_with_comment_and_indent(self):
        assert tokenize("  .ORIG  x3000   ; start here") == [[".ORIG", "x3000"]]

    def test_several_directives(self):
        src = ".ORIG x3000\n.FILL #1234\n.BLKW xFF\n.END"
        assert tokenize(src) == [
            [".ORIG", "x3000"],
            [".FILL", "#1234"],
            [".BLKW", "xFF"],
            [".END"],
        ]


class TestOperandGrouping:
    """Commas glue operand groups together; bare whitespace never does."""

    def test_comma_separated_with_spaces(self):
        assert tokenize("ADD  R1,  R2 , R3 ") == [["ADD", "R1,R2,R3"]]

    def test_terse_comma_separated(self):
        assert tokenize("ADD R1,R2,R3") == [["ADD", "R1,R2,R3"]]

    def test_space_separated_stays_split(self):
        assert tokenize("ADD R1 R2 R3") == [["ADD", "R1", "R2", "R3"]]

    def test_mixed_space_and_comma(self):
        assert tokenize("ADD R1,R2 R3") == [["ADD", "R1,R2", "R3"]]

    def test_tabs_count_as_whitespace(self):
        assert tokenize("\tAND\tR4,\tR5,\t#11") == [["AND", "R4,R5,#11"]]

    def test_label_prefix(self):
        assert tokenize("LOOP ADD R1, R1, #-1") == [["LOOP", "ADD", "R1,R1,#-1"]]


class TestLines:
    def test_two_instruction_lines(self):
        assert tokenize("ADD R1, R2, R3\nAND R4, R5, #11") == [
            ["ADD", "R1,R2,R3"],
            ["AND", "R4,R5,#11"],
        ]

    def test_blank_and_comment_lines_keep_slots(self):
        src = "; xxx\nADD R1, R2, R3\n\nAND R4, R5, #-11\n ; the end"
        assert tokenize(src) == [
            [],
            ["ADD", "R1,R2,R3"],
            [],
            ["AND", "R4,R5,#-11"],
            [],
        ]

    def test_windows_line_endings(self):
        src = "JMP R1\nJMP R2\r\nJMP R3\r\n\nJMP R5"
        assert tokenize(src) == [
            ["JMP", "R1"],
            ["JMP", "R2"],
            ["JMP", "R3"],
            [],
            ["JMP", "R5"],
        ]

    def test_crlf_matches_lf(self):
        lf = ".ORIG x3000\nADD R1, R2, R3\n\n.END\n"
        assert tokenize(lf.replace("\n", "\r\n")) == tokenize(lf)

    def test_trailing_newline_keeps_slot(self):
        assert split_lines("HALT\n") == ["HALT", ""]
        assert tokenize("HALT\n") == [["HALT"], []]


class TestQuotedTokens:
    def test_quoted_expression_is_atomic(self):
        assert tokenize('.STRINGZ "A thing" ; comment text') == [
            ['.STRINGZ', '"A thing"'],
        ]

    def test_escaped_quotes_kept_verbatim(self):
        assert tokenize(r'.STRINGZ "He says \"hi\""') == [
            ['.STRINGZ', r'"He says \"hi\""'],
        ]

    def test_semicolon_and_comma_inside_quotes(self):
        assert tokenize_line('MSG .STRINGZ "a; b, c"') == ['MSG', '.STRINGZ', '"a; b, c"']

    def test_escaped_backslash_before_closing_quote(self):
        assert tokenize_line(r'.STRINGZ "dir\\" ; c') == ['.STRINGZ', r'"dir\\"']

    def test_unterminated_quote_raises(self):
        with pytest.raises(TokenizeError, match="unterminated"):
            tokenize_line('.STRINGZ "oops')

    def test_escaped_closing_quote_is_unterminated(self):
        with pytest.raises(TokenizeError):
            tokenize_line(r'.STRINGZ "oops\"')

    def test_tokenize_reports_line(self):
        with pytest.raises(TokenizeError) as excinfo:
            tokenize('.ORIG x3000\n\n.STRINGZ "open')
        assert excinfo.value.line == 3
