#!/usr/bin/env python3
"""
algoc Front End Demo
====================

This script walks through the front end one phase at a time:
1. Tokenize the source lines
2. Parse the tokens into an AST
3. Analyze scopes and types, flattening nested functions
4. Lay out a stack frame for every function

Usage:
    pip install -e .
    python examples/frontend_demo.py [source.algo]

Without an argument it compiles examples/shapes.algo.
"""

import sys
from pathlib import Path

from algoc.frontend import ASTPrinter, Compiler, FrontendError, tokenize
from algoc.frontend.analyzer import analyze
from algoc.frontend.layout import build_frame
from algoc.frontend.parser import parse


def main():
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path(__file__).with_name("shapes.algo")
    lines = path.read_text(encoding="utf-8").splitlines()

    try:
        # ======================================================================
        # 1. Tokens
        # ======================================================================
        tokens = tokenize(lines, path.name)
        print(f"{len(tokens)} tokens; first line:")
        for token in tokens:
            if token.line > 1:
                break
            print(f"  {token!r}")

        # ======================================================================
        # 2. Syntax tree
        # ======================================================================
        program = parse(tokens, path.name, lines)
        print("\nSyntax tree:")
        print(ASTPrinter().print(program))

        # ======================================================================
        # 3. Flattened functions
        # ======================================================================
        analysis = analyze(program, source_lines=lines)
        print("\nFunctions (nested first, entry last):")
        for function in analysis.functions:
            print(f"  {function.name}")
        for symbol in analysis.externs:
            print(f"  extern {symbol.signature}")

        # ======================================================================
        # 4. Stack frames
        # ======================================================================
        print("\nStack frames:")
        for function in analysis.functions:
            frame = build_frame(function)
            slots = ", ".join(f"{s.name}@{s.offset}" for s in frame.slots)
            print(f"  {function.name}: {frame.size} bytes [{slots}]")

    except FrontendError as e:
        print(e, file=sys.stderr)
        return 1

    # The driver runs the same phases in one call
    print("\nFull report:")
    print(Compiler().compile_lines(lines, path.name).describe(), end="")
    return 0


if __name__ == "__main__":
    sys.exit(main())
