"""
Algo Lexer (Tokenizer)
======================

This module turns source lines into a flat stream of tokens for the
parser. Statements never span lines, so every physical line is closed by
an explicit END_LINE token, even when the line is blank.

The lexer is a per-character state machine. Each character either extends
the pending token or closes it; a closed token is handed to a builder
selected by the context it was accumulated in:

| Context   | Characters                    | Produces                      |
|-----------|-------------------------------|-------------------------------|
| name      | letters, digits, '_'          | TYPEDEF, KEYWORD, BOOL, VARIABLE |
| operator  | + - * / % < > = !             | BINARY_OPERATOR, UNARY_OPERATOR |
| separator | ( ) [ ] : ,                   | punctuation tokens            |
| numeric   | digits and '.'                | INT, FLOAT                    |
| quoted    | anything between '"' and '"'  | STRING                        |

Context-Sensitive Rewrites
--------------------------
Some tokens are only known once the following character is seen:

- ``name(`` turns the VARIABLE ``name`` into a FUNCTION_CALL, unless it
  directly follows the ``function`` keyword (a declaration header).
- ``type[]`` collapses the TYPEDEF and the ``[`` into one ARRAY_TYPEDEF.
- ``x: custom`` reads ``custom`` as a TYPEDEF because it follows a colon.

Operator Runs
-------------
A run such as ``<--`` is split into registered operators by taking the
longest known prefix at each step. Where the previous token cannot end a
value (an operator, keyword, comma, opening bracket or line start), a
single ``+`` or ``-`` is read as a unary operator instead.

Example Usage
-------------
>>> from algoc.frontend.lexer import tokenize
>>> for token in tokenize(["total <- -1.5"]):
...     print(token)
Token(VARIABLE, 'total', 1:1)
Token(BINARY_OPERATOR, '<-', 1:7)
Token(UNARY_OPERATOR, '-', 1:10)
Token(FLOAT, 1.5, 1:11)
Token(END_LINE, 1:14)
"""

import dataclasses
import logging
import string
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Sequence

from algoc.errors import SourceLocation
from algoc.frontend.errors import (
    InvalidCharacterError,
    InvalidNumberError,
    InvalidOperatorError,
    UnterminatedStringError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token categories produced by the lexer."""

    # === Separators ===
    OPENING_PARENTHESIS = auto()    # (
    CLOSING_PARENTHESIS = auto()    # )
    OPENING_BRACKET = auto()        # [
    CLOSING_BRACKET = auto()        # ]
    COMMA = auto()                  # ,
    COLON = auto()                  # : (type annotation)
    END_LINE = auto()               # end of a physical line

    # === Literals ===
    INT = auto()
    FLOAT = auto()
    BOOL = auto()
    STRING = auto()

    # === Types ===
    TYPEDEF = auto()                # int, float, or any name after ':'
    ARRAY_TYPEDEF = auto()          # int[]

    # === Operators ===
    BINARY_OPERATOR = auto()
    UNARY_OPERATOR = auto()

    # === Names ===
    VARIABLE = auto()
    FUNCTION_CALL = auto()          # name directly followed by '('
    KEYWORD = auto()


# =============================================================================
# Language Tables
# =============================================================================

# Built-in type names (always read as TYPEDEF)
RESERVED_TYPES = frozenset({"int", "float", "bool", "string"})

KEYWORDS = frozenset({
    "if",
    "else",
    "end",
    "function",
    "declare",
    "while",
    "return",
})

BOOL_LITERALS = {"true": True, "false": False}

BINARY_OPERATORS = frozenset({
    "+", "-", "*", "/", "%",
    "==", "!=", "<", ">", "<=", ">=",
    "<-",
})

UNARY_OPERATORS = frozenset({"+", "-"})

OPERATOR_CHARS = "+-*/%<>=!"
SEPARATOR_CHARS = "()[]:,"
NUMERIC_CHARS = string.digits + "."
NAME_START = string.ascii_letters + "_"
NAME_CHARS = string.ascii_letters + string.digits + "_"
QUOTE = '"'

SEPARATOR_TYPES = {
    "(": TokenType.OPENING_PARENTHESIS,
    ")": TokenType.CLOSING_PARENTHESIS,
    "[": TokenType.OPENING_BRACKET,
    "]": TokenType.CLOSING_BRACKET,
    ":": TokenType.COLON,
    ",": TokenType.COMMA,
}

# Tokens after which an operator cannot continue a value
_OPERAND_EXPECTED_AFTER = frozenset({
    TokenType.BINARY_OPERATOR,
    TokenType.UNARY_OPERATOR,
    TokenType.KEYWORD,
    TokenType.COMMA,
    TokenType.END_LINE,
    TokenType.OPENING_PARENTHESIS,
    TokenType.OPENING_BRACKET,
})


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single lexical unit.

    Attributes:
        type: The TokenType classification
        value: Payload (int, float, bool, or the source text of the token)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: str | int | float | bool | None
    line: int
    column: int
    filename: str = "<input>"

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.value is None:
            return f"Token({self.type.name}, {self.line}:{self.column})"
        if isinstance(self.value, str):
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.value}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    @property
    def text(self) -> str:
        """Source-like spelling of the token, used in error messages."""
        if self.type == TokenType.END_LINE:
            return "end of line"
        if self.type == TokenType.STRING:
            return f'"{self.value}"'
        if self.type == TokenType.ARRAY_TYPEDEF:
            return f"{self.value}[]"
        if self.type == TokenType.BOOL:
            return "true" if self.value else "false"
        return str(self.value)

    def is_keyword(self, name: str) -> bool:
        """Return True if this token is the keyword `name`."""
        return self.type == TokenType.KEYWORD and self.value == name


# =============================================================================
# Lexer Implementation
# =============================================================================

class _Context(Enum):
    """What kind of token is currently being accumulated."""
    NONE = auto()
    NAME = auto()
    OPERATOR = auto()
    NUMERIC = auto()
    QUOTED = auto()


class Lexer:
    """
    Tokenizes algo source lines.

    Usage:
        lexer = Lexer(lines, "program.algo")
        tokens = lexer.tokenize()

    Attributes:
        lines: The source lines, without line terminators
        filename: Name of the source file (for error reporting)
    """

    def __init__(self, lines: Sequence[str], filename: str = "<input>"):
        self.lines = list(lines)
        self.filename = filename

        self._tokens: list[Token] = []
        self._line_number = 0
        self._line_text = ""

        # Pending token state
        self._context = _Context.NONE
        self._pending = ""
        self._pending_column = 0

    def tokenize(self) -> list[Token]:
        """
        Tokenize every line.

        Returns:
            The token list, with one END_LINE per source line

        Raises:
            LexicalError: On the first invalid character, operator,
                number or unterminated string
        """
        self._tokens = []
        for number, text in enumerate(self.lines, start=1):
            self._tokenize_line(number, text.rstrip("\r\n"))

        logger.debug(
            f"Tokenized {len(self.lines)} lines of {self.filename} "
            f"into {len(self._tokens)} tokens"
        )
        return self._tokens

    # =========================================================================
    # Character Dispatch
    # =========================================================================

    def _tokenize_line(self, number: int, text: str) -> None:
        """Run the state machine over one line and close it with END_LINE."""
        self._line_number = number
        self._line_text = text
        self._context = _Context.NONE
        self._pending = ""

        for column, char in enumerate(text, start=1):
            if self._context == _Context.QUOTED:
                if char == QUOTE:
                    self._emit(TokenType.STRING, self._pending, self._pending_column)
                    self._reset()
                else:
                    self._pending += char
                continue

            if char.isspace():
                self._flush()
            elif char == QUOTE:
                self._flush()
                self._start(_Context.QUOTED, "", column)
            elif char in SEPARATOR_CHARS:
                self._flush()
                self._build_separator(char, column)
            elif char in OPERATOR_CHARS:
                self._accumulate(_Context.OPERATOR, char, column)
            elif self._context == _Context.NAME and char in NAME_CHARS:
                self._pending += char
            elif char in NUMERIC_CHARS:
                self._accumulate(_Context.NUMERIC, char, column)
            elif char in NAME_START:
                self._accumulate(_Context.NAME, char, column)
            else:
                raise InvalidCharacterError(
                    char,
                    location=self._location(column),
                    source_line=self._line_text,
                )

        if self._context == _Context.QUOTED:
            raise UnterminatedStringError(
                location=self._location(self._pending_column),
                source_line=self._line_text,
            )

        self._flush()
        self._emit(TokenType.END_LINE, None, len(text) + 1)

    def _accumulate(self, context: _Context, char: str, column: int) -> None:
        """Extend the pending token, or close it and start a new one."""
        if self._context == context:
            self._pending += char
        else:
            self._flush()
            self._start(context, char, column)

    def _start(self, context: _Context, text: str, column: int) -> None:
        self._context = context
        self._pending = text
        self._pending_column = column

    def _reset(self) -> None:
        self._context = _Context.NONE
        self._pending = ""

    def _flush(self) -> None:
        """Close the pending token, dispatching on its context."""
        context = self._context
        if context == _Context.NONE:
            return

        text = self._pending
        column = self._pending_column
        self._reset()

        if context == _Context.NAME:
            self._build_name(text, column)
        elif context == _Context.OPERATOR:
            self._build_operators(text, column)
        elif context == _Context.NUMERIC:
            self._build_number(text, column)

    # =========================================================================
    # Token Builders
    # =========================================================================

    def _build_name(self, text: str, column: int) -> None:
        """Classify a name as type, keyword, bool literal or variable."""
        if text in RESERVED_TYPES:
            self._emit(TokenType.TYPEDEF, text, column)
        elif text in KEYWORDS:
            self._emit(TokenType.KEYWORD, text, column)
        elif text in BOOL_LITERALS:
            self._emit(TokenType.BOOL, BOOL_LITERALS[text], column)
        elif self._last_type() == TokenType.COLON:
            self._emit(TokenType.TYPEDEF, text, column)
        else:
            self._emit(TokenType.VARIABLE, text, column)

    def _build_operators(self, run: str, column: int) -> None:
        """
        Split an operator run into registered operators.

        At each position the longest registered binary operator prefix is
        taken; a single unary operator wins instead when the previous token
        cannot end a value.
        """
        pos = 0
        while pos < len(run):
            if self._expects_operand() and run[pos] in UNARY_OPERATORS:
                self._emit(TokenType.UNARY_OPERATOR, run[pos], column + pos)
                pos += 1
                continue

            end = len(run)
            while end > pos and run[pos:end] not in BINARY_OPERATORS:
                end -= 1

            if end == pos:
                raise InvalidOperatorError(
                    run,
                    location=self._location(column),
                    source_line=self._line_text,
                )

            self._emit(TokenType.BINARY_OPERATOR, run[pos:end], column + pos)
            pos = end

    def _build_number(self, text: str, column: int) -> None:
        """Parse an integer, or a float with a single decimal point."""
        if not any(char.isdigit() for char in text) or text.count(".") > 1:
            raise InvalidNumberError(
                text,
                location=self._location(column),
                source_line=self._line_text,
            )

        if "." not in text:
            self._emit(TokenType.INT, int(text), column)
        else:
            self._emit(TokenType.FLOAT, parse_float(text), column)

    def _build_separator(self, char: str, column: int) -> None:
        """Emit a separator, applying the call and array-type rewrites."""
        if char == "(":
            self._mark_function_call()
        elif char == "]" and self._rewrite_array_type():
            return

        self._emit(SEPARATOR_TYPES[char], char, column)

    def _mark_function_call(self) -> None:
        """Turn a VARIABLE directly before '(' into a FUNCTION_CALL."""
        if not self._tokens or self._tokens[-1].type != TokenType.VARIABLE:
            return
        if len(self._tokens) >= 2 and self._tokens[-2].is_keyword("function"):
            return
        self._tokens[-1] = dataclasses.replace(
            self._tokens[-1], type=TokenType.FUNCTION_CALL
        )

    def _rewrite_array_type(self) -> bool:
        """Collapse TYPEDEF '[' into ARRAY_TYPEDEF; True if rewritten."""
        if len(self._tokens) < 2:
            return False
        typedef, bracket = self._tokens[-2], self._tokens[-1]
        if typedef.type != TokenType.TYPEDEF or bracket.type != TokenType.OPENING_BRACKET:
            return False

        del self._tokens[-2:]
        self._tokens.append(dataclasses.replace(typedef, type=TokenType.ARRAY_TYPEDEF))
        return True

    # =========================================================================
    # Helpers
    # =========================================================================

    def _emit(self, token_type: TokenType, value, column: int) -> None:
        self._tokens.append(Token(
            type=token_type,
            value=value,
            line=self._line_number,
            column=column,
            filename=self.filename,
        ))

    def _last_type(self) -> Optional[TokenType]:
        return self._tokens[-1].type if self._tokens else None

    def _expects_operand(self) -> bool:
        """True at input start or after a token that cannot end a value."""
        last = self._last_type()
        return last is None or last in _OPERAND_EXPECTED_AFTER

    def _location(self, column: int) -> SourceLocation:
        return SourceLocation(self.filename, self._line_number, column)


# =============================================================================
# Numeric Conversion
# =============================================================================

def parse_float(text: str) -> float:
    """
    Convert 'whole.fraction' digits to a float.

    The whole part accumulates left to right. The fractional part is
    accumulated from its last digit backwards, dividing by ten before each
    digit is added and once more at the end.

    >>> parse_float("12.25")
    12.25
    """
    whole, fraction = text.split(".")

    value = 0
    for digit in whole:
        value = value * 10 + int(digit)

    lower = 0.0
    for digit in reversed(fraction):
        lower = lower / 10 + int(digit)
    lower /= 10

    return value + lower


# =============================================================================
# Convenience Function
# =============================================================================

def tokenize(lines: Sequence[str], filename: str = "<input>") -> list[Token]:
    """
    Tokenize source lines.

    Args:
        lines: Source lines without terminators
        filename: Filename for error messages

    Returns:
        List of tokens
    """
    return Lexer(lines, filename).tokenize()
