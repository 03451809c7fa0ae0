#!/usr/bin/env python3
"""
rbfc API Demo
=============

This script shows the library interface:
1. Running a program with the interpreter
2. Inspecting the tape after a run
3. Generating assembly
4. Handling errors

Usage:
    python examples/api_demo.py
"""

import io
from pathlib import Path

from rbfc import (
    Compiler,
    CompilerOptions,
    RbfcError,
    format_operations,
    run_bf,
)


def main():
    here = Path(__file__).parent

    # ==========================================================================
    # 1. Run a program
    # ==========================================================================
    output = run_bf((here / "hello.bf").read_text())
    print(f"hello.bf printed: {output!r}")

    # ==========================================================================
    # 2. Inspect the final machine state
    # ==========================================================================
    compiler = Compiler()
    interp = compiler.interpret_source("++[->+<]", io.BytesIO(), io.BytesIO())
    print(f"Tape after '++[->+<]': {list(interp.tape[:4])}, dp = {interp.dp}")

    # ==========================================================================
    # 3. Generate assembly with bounds checks
    # ==========================================================================
    compiler = Compiler(CompilerOptions(bounds_check=True))
    result = compiler.compile_source(",[.,]", "cat.bf")
    print(format_operations(result.operations))
    print(f"{len(result.assembly.splitlines())} lines of assembly")

    # ==========================================================================
    # 4. Errors carry source locations
    # ==========================================================================
    try:
        compiler.compile_source("+++\n[>+", "broken.bf")
    except RbfcError as e:
        print(e)


if __name__ == "__main__":
    main()
