"""
algoc Compiler Front End Driver
===============================

This module provides the main interface to the front end. It runs the
phases in order and stops at the first error:

    Source lines → Lex → Parse → Analyze → Layout

Usage
-----
Command line:
    $ algoc program.algo

Programmatic:
    >>> from algoc.frontend import compile_source
    >>> result = compile_source("x <- 1 + 2")
    >>> [f.name for f in result.functions]
    ['main']

Configuration
-------------
CompilerOptions holds the driver settings. CompilerOptions.from_env()
reads overrides from the environment:

    ALGOC_ENTRY_FUNCTION   name of the implicit top-level function
    ALGOC_COMPUTE_LAYOUT   set to 0/false/no to skip stack layout

File reading lives here and in the CLI only; the phases themselves work
on in-memory lines.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from algoc.frontend.analyzer import Analyzer, Function
from algoc.frontend.ast import ASTPrinter, Program
from algoc.frontend.layout import StackFrame, layout_functions
from algoc.frontend.lexer import Lexer, Token
from algoc.frontend.parser import Parser
from algoc.frontend.scope import FunctionSymbol

logger = logging.getLogger(__name__)

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class CompilerOptions:
    """
    Front end configuration options.

    Attributes:
        entry_function: Name of the implicit function holding top-level
                        statements
        compute_layout: Compute a stack frame for every function
    """
    entry_function: str = "main"
    compute_layout: bool = True

    @classmethod
    def from_env(cls) -> "CompilerOptions":
        """
        Create CompilerOptions from environment variables.

        Environment variables (all optional):
            ALGOC_ENTRY_FUNCTION: Entry function name
            ALGOC_COMPUTE_LAYOUT: "0", "false", "no" or "off" disables layout

        Returns:
            CompilerOptions with values from environment variables
        """
        options = cls()

        if entry := os.environ.get("ALGOC_ENTRY_FUNCTION"):
            options.entry_function = entry

        if layout := os.environ.get("ALGOC_COMPUTE_LAYOUT"):
            options.compute_layout = layout.strip().lower() not in _FALSE_VALUES

        return options


@dataclass
class CompilationResult:
    """
    Result of a successful compilation.

    Attributes:
        filename: Source filename
        tokens: Token stream from the lexer
        ast: Parsed program
        functions: Flattened functions, entry function last
        externs: Declared but unimplemented function symbols
        frames: Stack frame per function, keyed by mangled name
    """
    filename: str = "<input>"
    tokens: list[Token] = field(default_factory=list)
    ast: Optional[Program] = None
    functions: list[Function] = field(default_factory=list)
    externs: list[FunctionSymbol] = field(default_factory=list)
    frames: dict[str, StackFrame] = field(default_factory=dict)

    def describe(self) -> str:
        """Render the flattened functions, their frames and the externs."""
        printer = ASTPrinter()
        lines: list[str] = []

        for function in self.functions:
            returns = f": {function.return_type}" if function.return_type else ""
            lines.append(f"function {function.name}{returns}")

            frame = self.frames.get(function.name)
            for label, variables in (("param", function.parameters), ("local", function.locals)):
                for variable in variables:
                    where = f" @{frame.offset_of(variable.name)}" if frame else ""
                    lines.append(f"  {label} {variable.name}: {variable.type.display_name}{where}")
            if frame:
                lines.append(f"  frame {frame.size} bytes")

            for statement in function.statements:
                for text in printer.print(statement).splitlines():
                    lines.append(f"    {text}")
            lines.append("")

        for symbol in self.externs:
            returns = f": {symbol.return_type}" if symbol.return_type else ""
            lines.append(f"extern {symbol.signature}{returns}")

        return "\n".join(lines).rstrip() + "\n"


class Compiler:
    """
    Front end pipeline for algo programs.

    Example:
        compiler = Compiler()
        result = compiler.compile_file("program.algo")
        print(result.describe())

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_lines(self, lines: Sequence[str], filename: str = "<input>") -> CompilationResult:
        """
        Run every phase over source lines.

        Args:
            lines: Source lines without terminators
            filename: Source filename for error messages

        Returns:
            CompilationResult

        Raises:
            FrontendError: On the first lexical, syntax, semantic or
                layout error
        """
        lines = list(lines)
        result = CompilationResult(filename=filename)

        result.tokens = self._lex(lines, filename)
        result.ast = self._parse(result.tokens, filename, lines)

        analysis = Analyzer(self.options.entry_function, lines).analyze(result.ast)
        result.functions = analysis.functions
        result.externs = analysis.externs

        if self.options.compute_layout:
            result.frames = self._layout(result.functions)

        logger.debug(
            f"Compiled {filename}: {len(result.functions)} functions, "
            f"{len(result.externs)} externs"
        )
        return result

    def compile_source(self, source: str, filename: str = "<input>") -> CompilationResult:
        """Compile program text; see compile_lines."""
        return self.compile_lines(source.splitlines(), filename)

    def compile_file(self, filepath) -> CompilationResult:
        """
        Compile a source file.

        Raises:
            FrontendError: If compilation fails
            FileNotFoundError: If source file not found
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.compile_source(source, str(filepath))

    def _lex(self, lines: list[str], filename: str) -> list[Token]:
        return Lexer(lines, filename).tokenize()

    def _parse(self, tokens: list[Token], filename: str, source_lines: list[str]) -> Program:
        return Parser(tokens, filename, source_lines).parse()

    def _layout(self, functions: list[Function]) -> dict[str, StackFrame]:
        return layout_functions(functions)


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_lines(
    lines: Sequence[str],
    filename: str = "<input>",
    options: Optional[CompilerOptions] = None,
) -> CompilationResult:
    """Compile source lines with the given (or default) options."""
    return Compiler(options).compile_lines(lines, filename)


def compile_source(
    source: str,
    filename: str = "<input>",
    options: Optional[CompilerOptions] = None,
) -> CompilationResult:
    """
    Compile algo program text.

    This is the primary high-level interface for the front end.

    Args:
        source: Program text
        filename: Source filename for error messages
        options: Compiler options (defaults if None)

    Returns:
        CompilationResult

    Raises:
        FrontendError: If compilation fails

    Example:
        >>> result = compile_source('''
        ... function square(x: int): int
        ...     return x * x
        ... end
        ... y <- square(3)
        ... ''')
        >>> [f.name for f in result.functions]
        ['square(int)', 'main']
    """
    return Compiler(options).compile_source(source, filename)
