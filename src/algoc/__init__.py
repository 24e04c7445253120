"""
algoc - Front End for the Algo Teaching Language
================================================

This package turns programs written in a small imperative language into a
validated, scope-resolved and function-flattened representation ready for
a code generator.

Main Components
---------------
- **frontend.lexer**: context-sensitive tokenizer
- **frontend.parser**: statement parser with shunting-yard expressions
- **frontend.analyzer**: scope resolution, type checking, overload
  resolution and function flattening
- **frontend.layout**: per-function stack slot offsets
- **cli**: the ``algoc`` command

The Language
------------
    declare function log(message: string)

    function area(w: int, h: float): float
        a <- w * h
        if a > 100.0
            log("large")
        else if a > 10.0
            log("medium")
        end
        return a
    end

    total <- area(3, 4.5)

Quick Start
-----------
    >>> from algoc.frontend import compile_source
    >>> result = compile_source("x <- 1 + 2")
    >>> print(result.describe())

Or use the command-line tool:
    $ algoc program.algo
    $ algoc --ast program.algo
"""

__version__ = "1.0.0"
