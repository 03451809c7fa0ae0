"""
Brainfuck Interpreter
=====================

Executes a resolved operation sequence directly.

Machine Model
-------------
- A tape of TAPE_SIZE (30000) unsigned 8-bit cells, all zero at start
- A data pointer (dp) indexing the tape
- A program counter (pc) indexing the operation sequence

The tape and both pointers are recreated on every execute() call, so an
Interpreter can be reused for several programs or runs.

Cell arithmetic is always modulo 256. Pointer motion past either end of
the tape fails with TapeOverflowError / TapeUnderflowError unless
InterpreterSettings.wrap is set, in which case the pointer re-enters from
the opposite end.

I/O
---
Program input and output are binary file-like objects: input_source must
provide read(1) -> bytes, output_sink must provide write(bytes). Running
out of input is an error (InputExhaustedError), not a zero byte.

Example
-------
>>> import io
>>> from rbfc.resolver import parse_source
>>> from rbfc.interpreter import Interpreter
>>> out = io.BytesIO()
>>> interp = Interpreter()
>>> interp.execute(parse_source("++++++++[>++++++++<-]>+."), io.BytesIO(), out)
>>> out.getvalue()
b'A'
"""

import logging
from dataclasses import dataclass
from typing import BinaryIO, Optional

from rbfc.errors import (
    InputExhaustedError,
    MalformedOperationError,
    TapeOverflowError,
    TapeUnderflowError,
)
from rbfc.lexer import Operation, OpKind
from rbfc.resolver import OperationSequence


logger = logging.getLogger(__name__)

TAPE_SIZE = 30000


@dataclass
class InterpreterSettings:
    """
    Interpreter configuration.

    Attributes:
        wrap: Let the data pointer wrap around the tape ends instead of
            failing with a tape overflow/underflow error
    """
    wrap: bool = False


class Interpreter:
    """
    Tree-walking evaluator for resolved Brainfuck programs.

    After execute() returns (or raises), the final machine state stays
    readable through tape, dp and pc until the next run.

    Attributes:
        settings: Interpreter configuration
        tape: The tape of the last run
        dp: Data pointer of the last run
        pc: Program counter of the last run
    """

    def __init__(self, settings: Optional[InterpreterSettings] = None):
        self.settings = settings or InterpreterSettings()
        self.tape = bytearray(TAPE_SIZE)
        self.dp = 0
        self.pc = 0

    def reset(self) -> None:
        """Return the machine to its initial state."""
        self.tape = bytearray(TAPE_SIZE)
        self.dp = 0
        self.pc = 0

    def execute(
        self,
        operations: OperationSequence,
        input_source: BinaryIO,
        output_sink: BinaryIO,
    ) -> None:
        """
        Run a program to completion.

        Args:
            operations: Resolved operation sequence
            input_source: Where ',' reads bytes from
            output_sink: Where '.' writes bytes to

        Raises:
            TapeOverflowError: Pointer moved past the last cell (no wrap)
            TapeUnderflowError: Pointer moved before the first cell (no wrap)
            InputExhaustedError: ',' with no input left
            MalformedOperationError: Operation missing run length or jump
                target (never produced by the resolver)
        """
        self.reset()
        trace = logger.isEnabledFor(logging.DEBUG)
        tape = self.tape

        while self.pc < len(operations):
            op = operations[self.pc]
            kind = op.kind

            if trace:
                logger.debug(
                    f"{kind.name}: (loc: {op.position}, pc: {self.pc}, "
                    f"dp: {self.dp}, cell: {tape[self.dp]})"
                )

            if kind is OpKind.END:
                break

            if kind is OpKind.INCREMENT:
                tape[self.dp] = (tape[self.dp] + self._count(op)) & 0xFF
            elif kind is OpKind.DECREMENT:
                tape[self.dp] = (tape[self.dp] - self._count(op)) & 0xFF
            elif kind is OpKind.MOVE_RIGHT:
                self._move_right(op)
            elif kind is OpKind.MOVE_LEFT:
                self._move_left(op)
            elif kind is OpKind.OUTPUT:
                value = bytes((tape[self.dp],))
                for _ in range(self._count(op)):
                    output_sink.write(value)
            elif kind is OpKind.INPUT:
                for _ in range(self._count(op)):
                    data = input_source.read(1)
                    if not data:
                        raise InputExhaustedError(op.position)
                    tape[self.dp] = data[0]
            elif kind is OpKind.LOOP_START:
                if tape[self.dp] == 0:
                    self.pc = self._target(op)
                    continue
            elif kind is OpKind.LOOP_END:
                if tape[self.dp] != 0:
                    self.pc = self._target(op) + 1
                    continue

            self.pc += 1

        logger.debug(f"Halted at pc {self.pc} with dp {self.dp}")

    # =========================================================================
    # Operation Helpers
    # =========================================================================

    @staticmethod
    def _count(op: Operation) -> int:
        if op.run_length is None:
            raise MalformedOperationError(op.position)
        return op.run_length

    @staticmethod
    def _target(op: Operation) -> int:
        if op.jump_target is None:
            raise MalformedOperationError(op.position, "missing jump target")
        return op.jump_target

    def _move_right(self, op: Operation) -> None:
        size = self._count(op)
        if self.dp + size >= TAPE_SIZE:
            if not self.settings.wrap:
                raise TapeOverflowError(op.position)
            self.dp = (self.dp + size) % TAPE_SIZE
        else:
            self.dp += size

    def _move_left(self, op: Operation) -> None:
        size = self._count(op)
        if size > self.dp:
            if not self.settings.wrap:
                raise TapeUnderflowError(op.position)
            self.dp = (self.dp - size) % TAPE_SIZE
        else:
            self.dp -= size
