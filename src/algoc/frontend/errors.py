"""
Front End Error Hierarchy
=========================

This module defines the exceptions raised by the lexer, parser, semantic
analyzer and stack layout. All of them inherit from FrontendError, which
itself inherits from the package-wide AlgoError.

Exception Hierarchy
-------------------
FrontendError (base for all front end errors)
├── LexicalError - tokenization errors
│   ├── InvalidCharacterError - character outside the language alphabet
│   ├── InvalidOperatorError - operator run that cannot be decomposed
│   ├── InvalidNumberError - malformed numeric literal
│   └── UnterminatedStringError - missing closing quote
├── ParseError - syntax errors
│   ├── UnexpectedTokenError - token that does not fit the grammar
│   ├── MissingTokenError - required token absent
│   ├── UnterminatedBlockError - if/while/function without 'end'
│   ├── InvalidAssignmentTargetError - '<-' applied to a non-variable
│   └── InvalidExpressionError - degenerate or malformed expression
├── SemanticError - scope and type errors
│   ├── UndefinedVariableError - variable not bound in any scope
│   ├── UndefinedFunctionError - no signature matches name + argument types
│   ├── UndefinedTypeError - type name not visible
│   ├── TypeMismatchError - incompatible types
│   ├── RedeclarationError - function implemented or declared twice
│   ├── SignatureConflictError - header/implementation return type differ
│   ├── VoidValueError - function without return type used as a value
│   └── NestedDeclarationError - header-only declaration outside global scope
└── StackLayoutError - declared frame size differs from computed size

Error Message Format
--------------------
    procedure.algo:4:9: error: undefined variable 'cuont'
        total <- cuont + 1
                 ^
    hint: did you mean 'count'?
"""

from typing import Optional, List

from algoc.errors import AlgoError, SourceLocation


# =============================================================================
# Base Front End Exception
# =============================================================================

class FrontendError(AlgoError):
    """
    Base exception for all front end errors.

    Provides message formatting with source location, source line context
    and an optional hint.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The source text at the error location
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example:

            loop.algo:3:5: error: unexpected token 'end'
                end
                ^
        """
        parts = []

        # Location prefix: filename:line:column: error: message
        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        # Source context with caret pointer
        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Lexical Errors
# =============================================================================

class LexicalError(FrontendError):
    """
    Error while turning source lines into tokens.

    Examples:
        - Character outside the language alphabet ('#', '{', ...)
        - Operator run such as '=>' that is not made of known operators
        - Malformed numbers such as '1.2.3'
        - Unterminated string literal
    """
    pass


class InvalidCharacterError(LexicalError):
    """Character that cannot start any token."""

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"invalid character '{char}' (0x{ord(char):02X})",
            location=location,
            source_line=source_line,
        )


class InvalidOperatorError(LexicalError):
    """Operator run that cannot be fully decomposed into known operators."""

    def __init__(
        self,
        operator: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.operator = operator
        super().__init__(
            f"invalid operator '{operator}'",
            location=location,
            hint="operators are + - * / % == != < > <= >= <-",
            source_line=source_line,
        )


class InvalidNumberError(LexicalError):
    """Numeric literal that is neither an integer nor a float."""

    def __init__(
        self,
        text: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.text = text
        super().__init__(
            f"invalid number '{text}'",
            location=location,
            source_line=source_line,
        )


class UnterminatedStringError(LexicalError):
    """String literal not closed before the end of the line."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "unterminated string literal",
            location=location,
            hint="add closing '\"' to complete the string",
            source_line=source_line,
        )


# =============================================================================
# Syntax Errors
# =============================================================================

class ParseError(FrontendError):
    """
    Syntax error in the token stream.

    Raised when the parser finds a token sequence that does not fit the
    statement or expression grammar.
    """
    pass


class UnexpectedTokenError(ParseError):
    """Token that doesn't match the expected grammar rule."""

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        hint = None
        if expected:
            hint = f"expected {expected}"

        super().__init__(
            f"unexpected token '{found}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingTokenError(ParseError):
    """Required token (such as ')' or a type name) not found."""

    def __init__(
        self,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        super().__init__(
            f"expected {expected}",
            location=location,
            source_line=source_line,
        )


class UnterminatedBlockError(ParseError):
    """Block that reaches the end of input without its 'end' keyword."""

    def __init__(
        self,
        construct: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.construct = construct
        super().__init__(
            f"unterminated {construct}",
            location=location,
            hint="add 'end' to close the block",
            source_line=source_line,
        )


class InvalidAssignmentTargetError(ParseError):
    """
    Left-hand side of '<-' is not assignable.

    Examples:
        1 <- x
        (a + b) <- x
    """

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "can only assign a value to a variable",
            location=location,
            hint="left side of '<-' must be a variable or an array element",
            source_line=source_line,
        )


class InvalidExpressionError(ParseError):
    """Expression that does not reduce to exactly one value."""
    pass


# =============================================================================
# Semantic Errors
# =============================================================================

class SemanticError(FrontendError):
    """
    Error found while resolving scopes and types.

    The program is syntactically valid but violates the language rules.
    """
    pass


class UndefinedVariableError(SemanticError):
    """
    Reference to a variable that is not bound in any visible scope.

    Similar names visible at the point of use are offered as a hint.
    """

    def __init__(
        self,
        name: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_names: Optional[List[str]] = None,
    ):
        self.name = name
        self.similar_names = similar_names or []

        hint = None
        if self.similar_names:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_names[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined variable '{name}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UndefinedFunctionError(SemanticError):
    """No visible signature matches the call's name and argument types."""

    def __init__(
        self,
        signature: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        candidates: Optional[List[str]] = None,
    ):
        self.signature = signature
        self.candidates = candidates or []

        hint = None
        if self.candidates:
            hint = "candidates are " + ", ".join(f"'{c}'" for c in self.candidates)

        super().__init__(
            f"undefined function '{signature}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UndefinedTypeError(SemanticError):
    """Type annotation naming a type that is not visible."""
    pass


class TypeMismatchError(SemanticError):
    """
    Incompatible types.

    Raised when:
        - An assignment value differs from the variable's type
        - Arithmetic operands cannot be combined
        - A return value differs from the declared return type
    """

    def __init__(
        self,
        message: str,
        expected_type: Optional[str] = None,
        actual_type: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected_type = expected_type
        self.actual_type = actual_type

        hint = None
        if expected_type and actual_type:
            hint = f"expected '{expected_type}', got '{actual_type}'"

        super().__init__(
            message,
            location=location,
            hint=hint,
            source_line=source_line,
        )


class RedeclarationError(SemanticError):
    """Function with the same signature implemented or declared twice."""

    def __init__(
        self,
        signature: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.signature = signature
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{signature}' was first declared at {original_location}"

        super().__init__(
            f"redeclaration of '{signature}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class SignatureConflictError(SemanticError):
    """Implementation whose return type differs from its forward header."""

    def __init__(
        self,
        signature: str,
        header_return: str,
        body_return: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.signature = signature
        super().__init__(
            f"conflicting return type for '{signature}'",
            location=location,
            hint=f"declared as '{header_return}', implemented as '{body_return}'",
            source_line=source_line,
        )


class VoidValueError(SemanticError):
    """Function without a return type used where a value is required."""

    def __init__(
        self,
        signature: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.signature = signature
        super().__init__(
            f"function '{signature}' has no return type and cannot be used as a value",
            location=location,
            source_line=source_line,
        )


class NestedDeclarationError(SemanticError):
    """'declare function' used inside a function body."""

    def __init__(
        self,
        name: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.name = name
        super().__init__(
            f"function header '{name}' can only be declared at global scope",
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Layout Errors
# =============================================================================

class StackLayoutError(FrontendError):
    """
    Stack frame whose declared size differs from the computed size.

    Each local consumes its type's byte size; the frame total must equal
    the sum of all slot sizes.
    """

    def __init__(
        self,
        function_name: str,
        declared: int,
        computed: int,
    ):
        self.function_name = function_name
        self.declared = declared
        self.computed = computed
        super().__init__(
            f"stack frame of '{function_name}' declares {declared} bytes "
            f"but its variables need {computed}",
        )
