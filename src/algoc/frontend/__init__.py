"""
Algo Compiler Front End
=======================

The front end runs three phases, each failing fast on its first error:

    Source lines → Lexer → Parser → AST → Analyzer → Flattened functions

followed by an optional stack layout pass that gives every variable of
every function a byte offset.

Usage
-----
>>> from algoc.frontend import compile_source
>>> result = compile_source('''
... function twice(x: int): int
...     return x * 2
... end
... y <- twice(21)
... ''')
>>> [f.name for f in result.functions]
['twice(int)', 'main']
>>> result.frames["main"].offset_of("y")
0
"""

from algoc.frontend.compiler import (
    Compiler,
    CompilerOptions,
    CompilationResult,
    compile_lines,
    compile_source,
)
from algoc.frontend.errors import (
    FrontendError,
    LexicalError,
    ParseError,
    SemanticError,
    StackLayoutError,
)
from algoc.frontend.lexer import Lexer, Token, TokenType, tokenize
from algoc.frontend.parser import Parser, parse, parse_source
from algoc.frontend.analyzer import Analyzer, AnalysisResult, Function, LocalVariable, analyze
from algoc.frontend.layout import (
    StackFrame,
    StackSlot,
    build_frame,
    layout_functions,
    verify_frame,
)
from algoc.frontend.ast import ASTPrinter, Program

__all__ = [
    # Main API
    "Compiler",
    "CompilerOptions",
    "CompilationResult",
    "compile_lines",
    "compile_source",
    # Errors
    "FrontendError",
    "LexicalError",
    "ParseError",
    "SemanticError",
    "StackLayoutError",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    # Parser
    "Parser",
    "parse",
    "parse_source",
    # Analyzer
    "Analyzer",
    "AnalysisResult",
    "Function",
    "LocalVariable",
    "analyze",
    # Layout
    "StackFrame",
    "StackSlot",
    "build_frame",
    "layout_functions",
    "verify_frame",
    # AST
    "ASTPrinter",
    "Program",
]
