"""
rbfc - Brainfuck Compiler Command-Line Interface
================================================

This module implements the command-line interface for the interpreter and
the x86-64 code generator.

Usage Examples
--------------
Compile to assembly (writes hello.asm next to hello.bf):
    $ rbfc hello.bf

Compile into another directory, then assemble:
    $ rbfc hello.bf -o build && fasm build/hello.asm

Interpret, feeding stdin to the program:
    $ echo hi | rbfc cat.bf -i

Bounds-checked or wrapping tape:
    $ rbfc hello.bf --bounds-check
    $ rbfc hello.bf -i --wrap

Trace every executed operation:
    $ RBFC_LOG=DEBUG rbfc hello.bf -i
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from rbfc import __version__
from rbfc.cli.errors import handle_cli_exception
from rbfc.compiler import Compiler, CompilerOptions
from rbfc.resolver import format_operations


logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def setup_logging(verbose: bool, log_level: str) -> None:
    """Configure logging based on verbosity and requested level."""
    level = logging.DEBUG if verbose else getattr(logging, log_level.upper())
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
        force=True,
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
    "-i", "--interpret",
    is_flag=True,
    help="Run the program instead of compiling it",
)
@click.option(
    "-o", "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for the generated .asm file (default: next to the input)",
)
@click.option(
    "--wrap",
    is_flag=True,
    help="Wrap the tape pointer around the tape ends instead of failing",
)
@click.option(
    "--bounds-check",
    is_flag=True,
    help="Emit tape bounds checks in generated code (exit status 2 on overflow)",
)
@click.option(
    "--no-comments",
    is_flag=True,
    help="Omit per-operation comments from generated assembly",
)
@click.option(
    "--dump-ops",
    is_flag=True,
    help="Print the resolved operation listing and exit (for debugging)",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    envvar="RBFC_LOG",
    show_default=True,
    help="Logging level (also read from RBFC_LOG)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="rbfc")
def main(
    input_file: Path,
    interpret: bool,
    output_dir: Optional[Path],
    wrap: bool,
    bounds_check: bool,
    no_comments: bool,
    dump_ops: bool,
    log_level: str,
    verbose: bool,
) -> None:
    """
    Interpret or compile a Brainfuck program.

    INPUT_FILE is the Brainfuck source file (.bf).

    By default the program is compiled to fasm assembly for x86-64 Linux.
    With -i the program is run directly; its input is read from stdin and
    its output is written to stdout as raw bytes.

    \b
    Examples:
        rbfc hello.bf                # Outputs hello.asm
        rbfc hello.bf -o build       # Outputs build/hello.asm
        rbfc hello.bf -i             # Run it
        rbfc hello.bf --dump-ops     # Show resolved operations
    """
    setup_logging(verbose, log_level)

    options = CompilerOptions(
        wrap=wrap,
        bounds_check=bounds_check,
        comments=not no_comments,
    )
    compiler = Compiler(options)
    logger.debug(f"Options: {options}")

    try:
        if dump_ops:
            source = input_file.read_text(encoding="utf-8")
            operations = compiler.parse(source, str(input_file))
            click.echo(format_operations(operations, source))
            return

        if interpret:
            stdout = sys.stdout.buffer
            try:
                compiler.interpret_file(input_file, sys.stdin.buffer, stdout)
            finally:
                stdout.flush()
            return

        if output_dir is None:
            output_dir = input_file.parent
        output_dir.mkdir(parents=True, exist_ok=True)
        output = output_dir / input_file.with_suffix(".asm").name

        result = compiler.compile_file(input_file)
        output.write_text(result.assembly, encoding="utf-8")

        if verbose:
            click.echo(f"Wrote {len(result.assembly)} bytes to {output}")
            click.echo(
                f"Resolved: {result.operation_count} operations, "
                f"{result.loop_count} loops"
            )

        click.echo(f"Compiled {input_file} -> {output}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Compilation")


if __name__ == "__main__":
    main()
