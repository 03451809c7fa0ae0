"""
x86-64 Code Generator
=====================

This module translates a resolved operation sequence into fasm assembly
for a static x86-64 Linux ELF executable. The output is plain text; running
fasm on it is left to the caller.

Code Generation Strategy
------------------------
The tape pointer lives in a single register for the whole program and every
operation maps onto a short fixed instruction pattern. No optimisation is
done beyond the run-length collapsing performed by the lexer.

Register Usage
--------------
| Register | Usage                                       |
|----------|---------------------------------------------|
| r12      | Address of the current tape cell            |
| rax      | Syscall number / scratch for wraparound     |
| rdi      | Syscall arg 1 (fd, exit status)             |
| rsi      | Syscall arg 2 (buffer = r12)                |
| rdx      | Syscall arg 3 (length = 1)                  |

Operation Patterns
------------------
| Operation     | Assembly                                    |
|---------------|---------------------------------------------|
| + xN / - xN   | add/sub byte [r12], N                       |
| > xN / < xN   | add/sub r12, N  (+ bounds check or wrap)    |
| . xN / , xN   | N x call WRITE_TO_STDOUT / READ_FROM_STDIN  |
| [ at index i  | cmp byte [r12], 0 / je after_loop_i / loop_i: |
| ]             | cmp byte [r12], 0 / jne loop_i / after_loop_i: |
| END           | call EXIT                                   |

Loop labels are derived from the LOOP_START's sequence index, which is
unique per bracket pair, and the generator's own label stack makes sure
both ends of a loop agree on it.

Exit Status
-----------
| Status | Meaning                                          |
|--------|--------------------------------------------------|
| 0      | Normal termination                               |
| 2      | Tape pointer left the tape (bounds checking)     |
| 3      | Input exhausted on ','                           |

Usage
-----
>>> from rbfc.resolver import parse_source
>>> from rbfc.codegen import CodeGenerator, CodegenOptions
>>> asm = CodeGenerator(CodegenOptions(bounds_check=True)).generate(parse_source("+[>+]"))
"""

import logging
from dataclasses import dataclass
from typing import Optional

from rbfc.errors import LabelStackError, MalformedOperationError
from rbfc.interpreter import TAPE_SIZE
from rbfc.lexer import Operation, OpKind
from rbfc.resolver import OperationSequence


logger = logging.getLogger(__name__)

EXIT_OUT_OF_BOUNDS = 2
EXIT_INPUT_EXHAUSTED = 3


@dataclass
class CodegenOptions:
    """
    Code generator configuration.

    Attributes:
        wrap: Wrap the tape pointer around the tape ends. Takes precedence
            over bounds_check, since a wrapped pointer can never leave the
            tape.
        bounds_check: Exit with status 2 when the pointer leaves the tape
        comments: Annotate each operation with a comment line
    """
    wrap: bool = False
    bounds_check: bool = False
    comments: bool = True


class CodeGenerator:
    """
    Generates fasm x86-64 assembly from a resolved operation sequence.

    A generator may be reused; all per-program state is reset at the
    start of generate().

    Example:
        gen = CodeGenerator(CodegenOptions(wrap=True))
        asm = gen.generate(parse_source(",[.,]"))
    """

    def __init__(self, options: Optional[CodegenOptions] = None):
        self.options = options or CodegenOptions()
        self._output: list[str] = []
        self._label_stack: list[int] = []
        self._loop_count = 0

    @property
    def bounds_check(self) -> bool:
        """True when bounds-checking code is actually emitted."""
        return self.options.bounds_check and not self.options.wrap

    def generate(self, operations: OperationSequence) -> str:
        """
        Generate a complete assembly program.

        Args:
            operations: Resolved operation sequence

        Returns:
            fasm source text

        Raises:
            LabelStackError: Loop labels do not pair up
            MalformedOperationError: Repeatable operation without run length
        """
        self._output = []
        self._label_stack = []
        self._loop_count = 0

        self._emit_header()
        self._emit_helpers()

        self._emit("")
        self._emit_label("main")
        self._emit_instruction("mov", "r12, TAPE")

        ended = False
        for index, op in enumerate(operations):
            self._generate_operation(index, op)
            if op.kind is OpKind.END:
                ended = True
                break

        if not ended:
            # Sequence ran out without END: treat the boundary as END
            self._generate_end(None)

        self._emit_data()

        logger.debug(
            f"Generated {len(self._output)} lines of assembly "
            f"({self._loop_count} loops)"
        )
        return "\n".join(self._output) + "\n"

    # =========================================================================
    # Emission Helpers
    # =========================================================================

    def _emit(self, line: str = "") -> None:
        """Emit a line of assembly."""
        self._output.append(line)

    def _emit_comment(self, comment: str) -> None:
        """Emit a comment, unless comments are disabled."""
        if self.options.comments:
            self._emit(f"; {comment}")

    def _emit_label(self, label: str) -> None:
        """Emit a label definition."""
        self._emit(f"{label}:")

    def _emit_instruction(self, mnemonic: str, operand: str = "") -> None:
        """Emit an instruction with optional operand."""
        if operand:
            self._emit(f"        {mnemonic:<8}{operand}")
        else:
            self._emit(f"        {mnemonic}")

    # =========================================================================
    # Fixed Prologue and Epilogue
    # =========================================================================

    def _emit_header(self) -> None:
        """Emit format/entry declaration and constants."""
        self._emit("; =============================================================================")
        self._emit("; Brainfuck Generated Assembly for x86-64 Linux")
        self._emit("; Generated by rbfc - assemble with: fasm <file>.asm")
        self._emit("; =============================================================================")
        self._emit("")
        self._emit("format ELF64 executable 3")
        self._emit("entry main")
        self._emit("")
        self._emit("SYS_read = 0")
        self._emit("SYS_write = 1")
        self._emit("SYS_exit = 60")
        self._emit("")
        self._emit("STDIN = 0")
        self._emit("STDOUT = 1")
        self._emit("")
        self._emit(f"TAPE_SIZE = {TAPE_SIZE}")
        if self.bounds_check:
            self._emit(f"EXIT_OUT_OF_BOUNDS = {EXIT_OUT_OF_BOUNDS}")
        self._emit(f"EXIT_INPUT_EXHAUSTED = {EXIT_INPUT_EXHAUSTED}")
        self._emit("")
        self._emit("segment readable executable")

    def _emit_helpers(self) -> None:
        """Emit the syscall helper routines."""
        self._emit("")
        self._emit("; -----------------------------------------------------------------------------")
        self._emit("; Helper routines")
        self._emit("; -----------------------------------------------------------------------------")
        self._emit("")
        self._emit_label("WRITE_TO_STDOUT")
        self._emit_instruction("mov", "rax, SYS_write")
        self._emit_instruction("mov", "rdi, STDOUT")
        self._emit_instruction("mov", "rsi, r12")
        self._emit_instruction("mov", "rdx, 1")
        self._emit_instruction("syscall")
        self._emit_instruction("ret")
        self._emit("")
        self._emit_label("READ_FROM_STDIN")
        self._emit_instruction("mov", "rax, SYS_read")
        self._emit_instruction("mov", "rdi, STDIN")
        self._emit_instruction("mov", "rsi, r12")
        self._emit_instruction("mov", "rdx, 1")
        self._emit_instruction("syscall")
        self._emit_instruction("cmp", "rax, 1")
        self._emit_instruction("jne", "INPUT_EXHAUSTED")
        self._emit_instruction("ret")
        self._emit("")
        self._emit_label("INPUT_EXHAUSTED")
        self._emit_instruction("mov", "rdi, EXIT_INPUT_EXHAUSTED")
        self._emit_instruction("jmp", "EXIT_WITH_STATUS")
        self._emit("")
        self._emit_label("EXIT")
        self._emit_instruction("xor", "rdi, rdi")
        self._emit_label("EXIT_WITH_STATUS")
        self._emit_instruction("mov", "rax, SYS_exit")
        self._emit_instruction("syscall")

    def _emit_out_of_bounds_handler(self) -> None:
        """Emit the shared handler all bounds checks jump to."""
        self._emit("")
        self._emit_label("OUT_OF_BOUNDS")
        self._emit_instruction("mov", "rdi, EXIT_OUT_OF_BOUNDS")
        self._emit_instruction("jmp", "EXIT_WITH_STATUS")

    def _emit_data(self) -> None:
        """Emit the tape storage."""
        self._emit("")
        self._emit("segment readable writeable")
        self._emit("TAPE rb TAPE_SIZE")

    # =========================================================================
    # Operation Translation
    # =========================================================================

    def _generate_operation(self, index: int, op: Operation) -> None:
        kind = op.kind

        if kind is OpKind.END:
            self._generate_end(op)
            return

        if kind is OpKind.LOOP_START:
            self._generate_loop_start(index, op)
            return
        if kind is OpKind.LOOP_END:
            self._generate_loop_end(op)
            return

        if op.run_length is None:
            raise MalformedOperationError(op.position)
        size = op.run_length

        self._emit_comment(f"{kind.name} x{size}")
        if kind is OpKind.INCREMENT:
            self._emit_instruction("add", f"byte [r12], {size}")
        elif kind is OpKind.DECREMENT:
            self._emit_instruction("sub", f"byte [r12], {size}")
        elif kind is OpKind.MOVE_RIGHT:
            self._generate_move_right(size)
        elif kind is OpKind.MOVE_LEFT:
            self._generate_move_left(size)
        elif kind is OpKind.OUTPUT:
            for _ in range(size):
                self._emit_instruction("call", "WRITE_TO_STDOUT")
        elif kind is OpKind.INPUT:
            for _ in range(size):
                self._emit_instruction("call", "READ_FROM_STDIN")

    def _generate_move_right(self, size: int) -> None:
        if self.options.wrap:
            step = size % TAPE_SIZE
            self._emit_instruction("add", f"r12, {step}")
            self._emit_instruction("lea", "rax, [r12 - TAPE_SIZE]")
            self._emit_instruction("cmp", "r12, TAPE + TAPE_SIZE")
            self._emit_instruction("cmovae", "r12, rax")
            return

        if self.bounds_check:
            # r12 + size must stay below TAPE + TAPE_SIZE
            self._emit_instruction("cmp", f"r12, TAPE + TAPE_SIZE - {size}")
            self._emit_instruction("jae", "OUT_OF_BOUNDS")
        self._emit_instruction("add", f"r12, {size}")

    def _generate_move_left(self, size: int) -> None:
        if self.options.wrap:
            step = size % TAPE_SIZE
            self._emit_instruction("sub", f"r12, {step}")
            self._emit_instruction("lea", "rax, [r12 + TAPE_SIZE]")
            self._emit_instruction("cmp", "r12, TAPE")
            self._emit_instruction("cmovb", "r12, rax")
            return

        if self.bounds_check:
            # r12 - size must stay at or above TAPE
            self._emit_instruction("cmp", f"r12, TAPE + {size}")
            self._emit_instruction("jb", "OUT_OF_BOUNDS")
        self._emit_instruction("sub", f"r12, {size}")

    def _generate_loop_start(self, index: int, op: Operation) -> None:
        self._label_stack.append(index)
        self._loop_count += 1

        self._emit("")
        self._emit_comment("LOOP_START")
        self._emit_instruction("cmp", "byte [r12], 0")
        self._emit_instruction("je", f"after_loop_{index}")
        self._emit_label(f"loop_{index}")

    def _generate_loop_end(self, op: Operation) -> None:
        if not self._label_stack:
            raise LabelStackError("loop end without an open loop label", op.position)
        start = self._label_stack.pop()
        if op.jump_target is not None and op.jump_target != start:
            raise LabelStackError(
                f"loop end jumps to {op.jump_target} but the open loop is {start}",
                op.position,
            )

        self._emit_comment("LOOP_END")
        self._emit_instruction("cmp", "byte [r12], 0")
        self._emit_instruction("jne", f"loop_{start}")
        self._emit_label(f"after_loop_{start}")
        self._emit("")

    def _generate_end(self, op: Optional[Operation]) -> None:
        if self._label_stack:
            position = op.position if op is not None else None
            raise LabelStackError(
                f"end of program with {len(self._label_stack)} open loop label(s)",
                position,
            )

        self._emit_comment("END")
        self._emit_instruction("call", "EXIT")

        if self.bounds_check:
            self._emit_out_of_bounds_handler()
