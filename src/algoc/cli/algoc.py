"""
algoc - Algo Front End Command-Line Interface
=============================================

Compiles an algo program through the lexer, parser, analyzer and stack
layout, then prints the flattened functions with their stack slots and
the extern signatures the program still needs.

Usage Examples
--------------
Compile and print the report:
    $ algoc program.algo

Write the report to a file:
    $ algoc program.algo -o program.ir

Inspect intermediate stages:
    $ algoc --tokens program.algo
    $ algoc --ast program.algo

Verbose mode (debug logging from every phase):
    $ algoc -v program.algo
"""

import logging
from pathlib import Path
from typing import Optional

import click

from algoc import __version__
from algoc.cli.errors import handle_cli_exception
from algoc.frontend import Compiler, CompilerOptions
from algoc.frontend.ast import ASTPrinter
from algoc.frontend.lexer import tokenize


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the report to this file instead of stdout",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token stream and exit",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print AST and exit (for debugging)",
)
@click.option(
    "--entry",
    default=None,
    help="Name of the function that receives top-level statements "
         "(default: main, or ALGOC_ENTRY_FUNCTION)",
)
@click.option(
    "--no-layout",
    is_flag=True,
    help="Skip stack frame layout",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="algoc")
def main(
    input_file: Path,
    output: Optional[Path],
    tokens: bool,
    ast: bool,
    entry: Optional[str],
    no_layout: bool,
    verbose: bool,
) -> None:
    """
    Compile an algo program and report its flattened functions.

    INPUT_FILE is the source file (.algo) to compile.

    \b
    Examples:
        algoc program.algo               # Print the report
        algoc program.algo -o out.ir     # Write the report to a file
        algoc --tokens program.algo      # Token stream only
        algoc --ast program.algo         # Syntax tree only
        algoc --entry start prog.algo    # Rename the entry function
    """
    setup_logging(verbose)

    options = CompilerOptions.from_env()
    if entry:
        options.entry_function = entry
    if no_layout:
        options.compute_layout = False

    try:
        if verbose:
            click.echo(f"Compiling {input_file}...")

        source = input_file.read_text(encoding="utf-8")

        # Token dump mode
        if tokens:
            for token in tokenize(source.splitlines(), str(input_file)):
                click.echo(repr(token))
            return

        result = Compiler(options).compile_source(source, str(input_file))

        # AST dump mode
        if ast:
            click.echo(ASTPrinter().print(result.ast))
            return

        report = result.describe()
        if output:
            output.write_text(report, encoding="utf-8")
            click.echo(f"Compiled {input_file} -> {output}")
        else:
            click.echo(report, nl=False)

        if verbose:
            click.echo(f"Tokenized: {len(result.tokens)} tokens")
            click.echo(f"Functions: {len(result.functions)}, externs: {len(result.externs)}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose)


if __name__ == "__main__":
    main()
