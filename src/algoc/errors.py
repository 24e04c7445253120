"""
algoc Error Base
================

This module defines the root of the exception hierarchy for algoc.
Every exception raised by the toolchain inherits from AlgoError, so
callers can catch all algoc-related failures with a single except clause.

Exception Hierarchy
-------------------
AlgoError (base)
└── FrontendError (see algoc.frontend.errors)
    ├── LexicalError - invalid characters, operators, numbers, strings
    ├── ParseError - unexpected/missing tokens, malformed expressions
    ├── SemanticError - scope, type and declaration errors
    └── StackLayoutError - frame size mismatch

Design Philosophy
-----------------
The compiler front end is fail-fast: the first error aborts the phase
that raised it and the whole pipeline. Each exception captures the
source location of the offending token when it is known, so messages
take the familiar form:

    filename:line:column: error: description
        source_line_text
        ^
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass


# =============================================================================
# Base Exception Class
# =============================================================================

class AlgoError(Exception):
    """
    Base exception for all algoc errors.

    All exceptions in the package inherit from this class:

        try:
            compile_source(text)
        except AlgoError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Tokens and AST nodes carry one of these so that errors raised in
    later phases can still point at the original source text.

    Attributes:
        filename: Name of the source file (or "<input>" for in-memory input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"
