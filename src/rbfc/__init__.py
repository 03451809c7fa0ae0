"""
rbfc - Brainfuck Interpreter and x86-64 Compiler
================================================

This package runs Brainfuck programs directly or translates them into
fasm assembly for a native x86-64 Linux executable.

Main Components
---------------
- **lexer**: source text -> raw operations, with run-length collapsing
- **resolver**: bracket matching and loop jump targets
- **interpreter**: executes resolved operations on a 30000-cell tape
- **codegen**: emits fasm assembly with the same semantics
- **compiler**: front end tying the stages together
- **cli**: the ``rbfc`` command

Pipeline
--------
    Source → Lexer → Resolver → Interpreter
                              ↘ Code Generator → fasm → executable

Quick Start
-----------
    >>> from rbfc import run_bf, compile_bf
    >>> run_bf("++++++++[>++++++++<-]>+.")
    b'A'
    >>> asm = compile_bf("+[>+]", bounds_check=True)

Or from the terminal:
    $ rbfc hello.bf -i
    $ rbfc hello.bf -o build && fasm build/hello.asm
"""

__version__ = "0.1.0"

# =============================================================================
# Public API Exports
# =============================================================================

from rbfc.codegen import CodeGenerator, CodegenOptions
from rbfc.compiler import (
    Compiler,
    CompilerOptions,
    CompilerResult,
    compile_bf,
    run_bf,
)
from rbfc.errors import (
    RbfcError,
    SourceLocation,
    DiagnosticError,
    StructuralError,
    UnmatchedCloseBracketError,
    UnmatchedOpenBracketError,
    ExecutionError,
    TapeOverflowError,
    TapeUnderflowError,
    InputExhaustedError,
    DefectError,
    MalformedOperationError,
    LabelStackError,
)
from rbfc.interpreter import TAPE_SIZE, Interpreter, InterpreterSettings
from rbfc.lexer import Lexer, Operation, OpKind, tokenize
from rbfc.resolver import OperationSequence, format_operations, parse_source, resolve

__all__ = [
    "__version__",
    # Pipeline stages
    "Lexer",
    "Operation",
    "OpKind",
    "tokenize",
    "OperationSequence",
    "resolve",
    "parse_source",
    "format_operations",
    "Interpreter",
    "InterpreterSettings",
    "TAPE_SIZE",
    "CodeGenerator",
    "CodegenOptions",
    # Front end
    "Compiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_bf",
    "run_bf",
    # Exception hierarchy
    "RbfcError",
    "SourceLocation",
    "DiagnosticError",
    "StructuralError",
    "UnmatchedCloseBracketError",
    "UnmatchedOpenBracketError",
    "ExecutionError",
    "TapeOverflowError",
    "TapeUnderflowError",
    "InputExhaustedError",
    "DefectError",
    "MalformedOperationError",
    "LabelStackError",
]
