"""
rbfc Compiler Front End
=======================

This module provides the main interface for turning Brainfuck source into
either an execution result or x86-64 assembly. It orchestrates the
pipeline:

    Source → Lex → Resolve → (Interpret | Generate)

Usage
-----
Command line:
    $ rbfc hello.bf              # writes hello.asm
    $ rbfc hello.bf -i           # runs the program

Programmatic:
    >>> from rbfc import compile_bf, run_bf
    >>> asm = compile_bf("+++.")
    >>> run_bf(",+.", b"A")
    b'B'

Error Handling
--------------
The pipeline stops at the first error. Diagnostic errors (structural and
execution errors) raised under the front end get a line/column location and
the offending source line attached before they propagate, so printing them
gives a complete compiler-style message. Defect errors are passed through
untouched.
"""

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Optional

from rbfc.codegen import CodeGenerator, CodegenOptions
from rbfc.errors import DiagnosticError
from rbfc.interpreter import Interpreter, InterpreterSettings
from rbfc.lexer import OpKind, tokenize
from rbfc.resolver import OperationSequence, resolve


logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Front end configuration.

    Attributes:
        wrap: Tape pointer wraps around the tape ends (both back ends)
        bounds_check: Emit tape bounds checks in generated assembly
        comments: Annotate generated assembly with one comment per operation
    """
    wrap: bool = False
    bounds_check: bool = False
    comments: bool = True

    def interpreter_settings(self) -> InterpreterSettings:
        return InterpreterSettings(wrap=self.wrap)

    def codegen_options(self) -> CodegenOptions:
        return CodegenOptions(
            wrap=self.wrap,
            bounds_check=self.bounds_check,
            comments=self.comments,
        )


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        operations: The resolved operation sequence
        assembly: Generated assembly text
    """
    filename: str = "<input>"
    operations: OperationSequence = field(default_factory=tuple)
    assembly: str = ""

    @property
    def operation_count(self) -> int:
        return len(self.operations)

    @property
    def loop_count(self) -> int:
        return sum(1 for op in self.operations if op.kind is OpKind.LOOP_START)


class Compiler:
    """
    Brainfuck compiler and interpreter front end.

    Example:
        compiler = Compiler(CompilerOptions(bounds_check=True))
        result = compiler.compile_file("hello.bf")
        print(result.assembly)

    Attributes:
        options: Front end configuration
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def parse(self, source: str, filename: str = "<input>") -> OperationSequence:
        """
        Tokenize and resolve source text.

        Raises:
            StructuralError: Brackets do not pair up (with location attached)
        """
        try:
            return resolve(tokenize(source))
        except DiagnosticError as e:
            raise e.attach_source(source, filename)

    def compile_source(self, source: str, filename: str = "<input>") -> CompilerResult:
        """
        Compile source text to assembly.

        Args:
            source: Brainfuck source code
            filename: Source filename for error messages

        Returns:
            CompilerResult holding the operations and the assembly
        """
        operations = self.parse(source, filename)
        generator = CodeGenerator(self.options.codegen_options())
        assembly = generator.generate(operations)
        return CompilerResult(filename=filename, operations=operations, assembly=assembly)

    def compile_file(self, filepath: str | Path) -> CompilerResult:
        """
        Compile a source file to assembly.

        Raises:
            FileNotFoundError: If the source file does not exist
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        logger.info(f"Compiling {path}")
        return self.compile_source(path.read_text(encoding="utf-8"), str(path))

    def interpret_source(
        self,
        source: str,
        input_source: BinaryIO,
        output_sink: BinaryIO,
        filename: str = "<input>",
    ) -> Interpreter:
        """
        Run source text with the interpreter.

        Returns:
            The interpreter, holding the final tape and pointer state

        Raises:
            StructuralError: Brackets do not pair up
            ExecutionError: The program failed at run time
        """
        operations = self.parse(source, filename)
        interpreter = Interpreter(self.options.interpreter_settings())
        try:
            interpreter.execute(operations, input_source, output_sink)
        except DiagnosticError as e:
            raise e.attach_source(source, filename)
        return interpreter

    def interpret_file(
        self,
        filepath: str | Path,
        input_source: BinaryIO,
        output_sink: BinaryIO,
    ) -> Interpreter:
        """Run a source file with the interpreter."""
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        logger.info(f"Interpreting {path}")
        return self.interpret_source(
            path.read_text(encoding="utf-8"), input_source, output_sink, str(path)
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_bf(source: str, **options) -> str:
    """
    Compile Brainfuck source to assembly text.

    Keyword arguments are passed to CompilerOptions.
    """
    return Compiler(CompilerOptions(**options)).compile_source(source).assembly


def run_bf(source: str, input_data: bytes = b"", **options) -> bytes:
    """
    Interpret Brainfuck source and return everything it printed.

    Keyword arguments are passed to CompilerOptions.
    """
    output = io.BytesIO()
    Compiler(CompilerOptions(**options)).interpret_source(
        source, io.BytesIO(input_data), output
    )
    return output.getvalue()
