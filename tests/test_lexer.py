"""
Lexer Test Suite
================

Tests for the context-sensitive tokenizer.

Test Organization
-----------------
- TestBasicTokens: literals, names, blank lines
- TestNumbers: integer and float parsing
- TestOperators: operator runs and unary disambiguation
- TestSeparators: call and array-type rewrites
- TestLexerErrors: invalid input
- TestLocations: line/column tracking
"""

import pytest

from algoc.frontend.errors import (
    InvalidCharacterError,
    InvalidNumberError,
    InvalidOperatorError,
    LexicalError,
    UnterminatedStringError,
)
from algoc.frontend.lexer import Lexer, TokenType, parse_float, tokenize


# =============================================================================
# Helper Functions
# =============================================================================

def kinds(source: str) -> list[TokenType]:
    """Token types for a single source line."""
    return [t.type for t in tokenize([source])]


def values(source: str) -> list:
    """Token values for a single source line, without the END_LINE."""
    return [t.value for t in tokenize([source])[:-1]]


# =============================================================================
# Basic Tokens
# =============================================================================

class TestBasicTokens:
    """Literals, names and line structure."""

    @pytest.mark.parametrize("literal", ["0", "7", "42", "123456"])
    def test_integer_literal(self, literal):
        """An integer literal line is [Int, EndLine]."""
        tokens = tokenize([literal])
        assert [t.type for t in tokens] == [TokenType.INT, TokenType.END_LINE]
        assert tokens[0].value == int(literal)

    @pytest.mark.parametrize("line", ["", " ", "    ", "\t", " \t  \t"])
    def test_whitespace_only_line(self, line):
        """A blank line yields exactly one END_LINE."""
        assert kinds(line) == [TokenType.END_LINE]

    def test_every_line_ends_with_end_line(self):
        """Each physical line gets its own END_LINE."""
        tokens = tokenize(["a", "", "b"])
        assert [t.type for t in tokens] == [
            TokenType.VARIABLE,
            TokenType.END_LINE,
            TokenType.END_LINE,
            TokenType.VARIABLE,
            TokenType.END_LINE,
        ]

    def test_empty_input(self):
        """No lines, no tokens."""
        assert tokenize([]) == []

    def test_keywords(self):
        """Reserved words become KEYWORD tokens."""
        for word in ["if", "else", "end", "function", "declare", "while", "return"]:
            tokens = tokenize([word])
            assert tokens[0].type == TokenType.KEYWORD
            assert tokens[0].value == word

    def test_builtin_types(self):
        """Built-in type names are always TYPEDEF."""
        for name in ["int", "float", "bool", "string"]:
            assert kinds(name)[0] == TokenType.TYPEDEF

    def test_bool_literals(self):
        """true/false become BOOL tokens with Python values."""
        tokens = tokenize(["true false"])
        assert [t.type for t in tokens[:2]] == [TokenType.BOOL, TokenType.BOOL]
        assert [t.value for t in tokens[:2]] == [True, False]

    def test_variable_with_digits_and_underscore(self):
        """Names may contain digits and underscores after the first character."""
        tokens = tokenize(["item_2"])
        assert tokens[0].type == TokenType.VARIABLE
        assert tokens[0].value == "item_2"

    def test_string_literal(self):
        """Quoted text keeps inner spaces and drops the quotes."""
        tokens = tokenize(['name <- "hi there"'])
        assert tokens[2].type == TokenType.STRING
        assert tokens[2].value == "hi there"

    def test_empty_string(self):
        """Two adjacent quotes are an empty string."""
        tokens = tokenize(['""'])
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == ""

    def test_string_keeps_operator_characters(self):
        """Operators inside quotes are not tokenized."""
        assert values('"a <- b"') == ["a <- b"]

    def test_custom_type_after_colon(self):
        """A non-builtin name after ':' is read as a type."""
        tokens = tokenize(["p: point"])
        assert [t.type for t in tokens] == [
            TokenType.VARIABLE,
            TokenType.COLON,
            TokenType.TYPEDEF,
            TokenType.END_LINE,
        ]
        assert tokens[2].value == "point"

    def test_lexer_class_matches_function(self):
        """Lexer.tokenize and tokenize() agree."""
        lines = ["x <- 1", "y <- x"]
        assert Lexer(lines, "t.algo").tokenize() == tokenize(lines, "t.algo")


# =============================================================================
# Numbers
# =============================================================================

class TestNumbers:
    """Integer and float literals."""

    def test_float_literal(self):
        """A number with one decimal point is a FLOAT."""
        tokens = tokenize(["3.25"])
        assert tokens[0].type == TokenType.FLOAT
        assert tokens[0].value == pytest.approx(3.25)

    def test_float_fraction_digits(self):
        """The fractional part is accumulated from its last digit."""
        assert parse_float("12.25") == pytest.approx(12.25)
        assert parse_float("0.125") == pytest.approx(0.125)
        assert parse_float("0.1") == pytest.approx(0.1)

    def test_float_without_fraction(self):
        """'1.' is the float 1.0."""
        tokens = tokenize(["1."])
        assert tokens[0].type == TokenType.FLOAT
        assert tokens[0].value == pytest.approx(1.0)

    def test_float_without_whole_part(self):
        """'.5' is the float 0.5."""
        tokens = tokenize([".5"])
        assert tokens[0].type == TokenType.FLOAT
        assert tokens[0].value == pytest.approx(0.5)

    def test_two_decimal_points(self):
        """'1.2.3' is malformed."""
        with pytest.raises(InvalidNumberError):
            tokenize(["1.2.3"])

    def test_lone_decimal_point(self):
        """A numeric run without digits is malformed."""
        with pytest.raises(InvalidNumberError):
            tokenize(["x <- ."])


# =============================================================================
# Operators
# =============================================================================

class TestOperators:
    """Operator runs, longest-prefix splitting and unary preference."""

    @pytest.mark.parametrize("op", ["+", "-", "*", "/", "%", "==", "!=", "<", ">", "<=", ">=", "<-"])
    def test_binary_operators(self, op):
        """Every registered operator between two values is binary."""
        tokens = tokenize([f"a {op} b"])
        assert tokens[1].type == TokenType.BINARY_OPERATOR
        assert tokens[1].value == op

    def test_assignment_without_spaces(self):
        """'a<-b' is variable, '<-', variable."""
        tokens = tokenize(["a<-b"])
        assert [t.type for t in tokens] == [
            TokenType.VARIABLE,
            TokenType.BINARY_OPERATOR,
            TokenType.VARIABLE,
            TokenType.END_LINE,
        ]
        assert tokens[1].value == "<-"

    def test_run_split_into_binary_and_unary(self):
        """'<--' splits into '<-' followed by a unary '-'."""
        tokens = tokenize(["a<--1"])
        assert [(t.type, t.value) for t in tokens[1:3]] == [
            (TokenType.BINARY_OPERATOR, "<-"),
            (TokenType.UNARY_OPERATOR, "-"),
        ]

    def test_leading_minus_is_unary(self):
        """At the start of input a '-' is unary."""
        assert kinds("-3 + 4") == [
            TokenType.UNARY_OPERATOR,
            TokenType.INT,
            TokenType.BINARY_OPERATOR,
            TokenType.INT,
            TokenType.END_LINE,
        ]

    def test_minus_after_value_is_binary(self):
        """After a value a '-' is binary."""
        assert kinds("x - 1")[1] == TokenType.BINARY_OPERATOR

    def test_minus_after_operator_is_unary(self):
        """After an operator a '-' is unary."""
        tokens = tokenize(["a == -b"])
        assert tokens[2].type == TokenType.UNARY_OPERATOR

    def test_minus_after_keyword_is_unary(self):
        """'return -1' has a unary minus."""
        assert kinds("return -1")[1] == TokenType.UNARY_OPERATOR

    def test_minus_after_comma_and_parenthesis(self):
        """Call arguments may start with a unary sign."""
        tokens = tokenize(["f(-1, +2)"])
        assert tokens[2].type == TokenType.UNARY_OPERATOR
        assert tokens[5].type == TokenType.UNARY_OPERATOR

    def test_minus_at_start_of_second_line(self):
        """A new line restarts operand context."""
        tokens = tokenize(["x", "-1"])
        assert tokens[2].type == TokenType.UNARY_OPERATOR

    def test_double_unary(self):
        """'- -3' is two unary operators."""
        assert kinds("- -3")[:2] == [TokenType.UNARY_OPERATOR, TokenType.UNARY_OPERATOR]

    def test_undecomposable_run(self):
        """'=>' is not made of registered operators."""
        with pytest.raises(InvalidOperatorError) as exc_info:
            tokenize(["a => b"])
        assert exc_info.value.operator == "=>"

    def test_lone_bang(self):
        """'!' alone is not an operator."""
        with pytest.raises(InvalidOperatorError):
            tokenize(["a ! b"])

    def test_single_equals(self):
        """'=' alone is not an operator; assignment is '<-'."""
        with pytest.raises(InvalidOperatorError):
            tokenize(["a = 1"])


# =============================================================================
# Separators
# =============================================================================

class TestSeparators:
    """Separators and the context-sensitive rewrites."""

    def test_call_rewrite(self):
        """A variable directly before '(' becomes a FUNCTION_CALL."""
        assert kinds("f(1)") == [
            TokenType.FUNCTION_CALL,
            TokenType.OPENING_PARENTHESIS,
            TokenType.INT,
            TokenType.CLOSING_PARENTHESIS,
            TokenType.END_LINE,
        ]

    def test_grouping_parenthesis_is_not_a_call(self):
        """'(' after an operator is plain grouping."""
        tokens = tokenize(["a * (b)"])
        assert tokens[0].type == TokenType.VARIABLE
        assert tokens[2].type == TokenType.OPENING_PARENTHESIS
        assert tokens[3].type == TokenType.VARIABLE

    def test_function_header_name_is_not_a_call(self):
        """The name after 'function' stays a VARIABLE."""
        assert kinds("function f(x: int): int") == [
            TokenType.KEYWORD,
            TokenType.VARIABLE,
            TokenType.OPENING_PARENTHESIS,
            TokenType.VARIABLE,
            TokenType.COLON,
            TokenType.TYPEDEF,
            TokenType.CLOSING_PARENTHESIS,
            TokenType.COLON,
            TokenType.TYPEDEF,
            TokenType.END_LINE,
        ]

    def test_array_type(self):
        """'int[]' collapses into one ARRAY_TYPEDEF."""
        tokens = tokenize(["xs: int[]"])
        assert [t.type for t in tokens] == [
            TokenType.VARIABLE,
            TokenType.COLON,
            TokenType.ARRAY_TYPEDEF,
            TokenType.END_LINE,
        ]
        assert tokens[2].value == "int"

    def test_custom_array_type(self):
        """A custom type name after ':' also takes the '[]' suffix."""
        tokens = tokenize(["ps: point[]"])
        assert tokens[2].type == TokenType.ARRAY_TYPEDEF
        assert tokens[2].value == "point"

    def test_index_brackets_are_kept(self):
        """'xs[0]' keeps its brackets."""
        assert kinds("xs[0]") == [
            TokenType.VARIABLE,
            TokenType.OPENING_BRACKET,
            TokenType.INT,
            TokenType.CLOSING_BRACKET,
            TokenType.END_LINE,
        ]

    def test_comma(self):
        """Commas separate elements."""
        assert kinds("[1, 2]").count(TokenType.COMMA) == 1


# =============================================================================
# Errors
# =============================================================================

class TestLexerErrors:
    """Invalid input fails the whole tokenization."""

    def test_invalid_character(self):
        """'#' is outside the alphabet."""
        with pytest.raises(InvalidCharacterError) as exc_info:
            tokenize(["a # b"])
        assert exc_info.value.char == "#"

    def test_unterminated_string(self):
        """A quote left open at the end of the line is an error."""
        with pytest.raises(UnterminatedStringError):
            tokenize(['s <- "abc'])

    def test_string_does_not_span_lines(self):
        """Strings close on the line they open."""
        with pytest.raises(UnterminatedStringError):
            tokenize(['s <- "abc', 'def"'])

    def test_errors_are_lexical_errors(self):
        """All lexer errors share the LexicalError base."""
        for line in ["a # b", "a => b", "1.2.3", '"open']:
            with pytest.raises(LexicalError):
                tokenize([line])


# =============================================================================
# Locations
# =============================================================================

class TestLocations:
    """Tokens remember where they came from."""

    def test_columns(self):
        """Columns are 1-indexed token starts."""
        tokens = tokenize(["  total <- 1"])
        assert [t.column for t in tokens] == [3, 9, 12, 13]

    def test_lines(self):
        """Line numbers follow the input lines."""
        tokens = tokenize(["a", "b"])
        assert [t.line for t in tokens] == [1, 1, 2, 2]

    def test_error_message_has_location(self):
        """Errors are formatted as file:line:col: error: ..."""
        with pytest.raises(InvalidCharacterError) as exc_info:
            tokenize(["x <- 1", "y <- $"], "prog.algo")
        message = str(exc_info.value)
        assert message.startswith("prog.algo:2:6: error:")
        assert "y <- $" in message
        assert "^" in message

    def test_token_repr(self):
        """repr shows type, value and position."""
        token = tokenize(["total"])[0]
        assert repr(token) == "Token(VARIABLE, 'total', 1:1)"
