"""
Brainfuck Lexer (Tokenizer)
===========================

This module converts Brainfuck source text into a stream of raw
operations for the resolver.

Symbols
-------
| Symbol | Operation   | Repeatable |
|--------|-------------|------------|
| +      | INCREMENT   | yes        |
| -      | DECREMENT   | yes        |
| >      | MOVE_RIGHT  | yes        |
| <      | MOVE_LEFT   | yes        |
| .      | OUTPUT      | yes        |
| ,      | INPUT       | yes        |
| [      | LOOP_START  | no         |
| ]      | LOOP_END    | no         |

Every other character is a comment and is skipped.

Run-Length Collapsing
---------------------
Consecutive identical repeatable symbols are merged into a single
operation carrying the count in ``run_length``. Comment characters
between two identical symbols do not break a run; a different symbol
does:

    "++ +"   -> INCREMENT x3
    "++-+"   -> INCREMENT x2, DECREMENT x1, INCREMENT x1

Example Usage
-------------
>>> from rbfc.lexer import Lexer
>>> for op in Lexer("+++[->+<]").tokenize():
...     print(op)
Op(INCREMENT x3, @0)
Op(LOOP_START, @3)
Op(DECREMENT x1, @4)
Op(MOVE_RIGHT x1, @5)
Op(INCREMENT x1, @6)
Op(MOVE_LEFT x1, @7)
Op(LOOP_END, @8)
Op(END, @9)
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional


logger = logging.getLogger(__name__)


# =============================================================================
# Operation Kinds
# =============================================================================

class OpKind(Enum):
    """The closed set of operations a Brainfuck program is made of."""

    INCREMENT = auto()      # +
    DECREMENT = auto()      # -
    MOVE_RIGHT = auto()     # >
    MOVE_LEFT = auto()      # <
    OUTPUT = auto()         # .
    INPUT = auto()          # ,
    LOOP_START = auto()     # [
    LOOP_END = auto()       # ]
    END = auto()            # end of input

    @property
    def is_repeatable(self) -> bool:
        """True for kinds that carry a run length."""
        return self in REPEATABLE_KINDS

    @property
    def is_loop(self) -> bool:
        """True for LOOP_START and LOOP_END."""
        return self in (OpKind.LOOP_START, OpKind.LOOP_END)


SYMBOLS: dict[str, OpKind] = {
    "+": OpKind.INCREMENT,
    "-": OpKind.DECREMENT,
    ">": OpKind.MOVE_RIGHT,
    "<": OpKind.MOVE_LEFT,
    ".": OpKind.OUTPUT,
    ",": OpKind.INPUT,
    "[": OpKind.LOOP_START,
    "]": OpKind.LOOP_END,
}

REPEATABLE_KINDS = frozenset({
    OpKind.INCREMENT,
    OpKind.DECREMENT,
    OpKind.MOVE_RIGHT,
    OpKind.MOVE_LEFT,
    OpKind.OUTPUT,
    OpKind.INPUT,
})


# =============================================================================
# Operation Data Class
# =============================================================================

@dataclass(frozen=True)
class Operation:
    """
    A single operation of a Brainfuck program.

    Attributes:
        kind: The OpKind classification
        run_length: How many identical symbols were collapsed (repeatable
            kinds only, None otherwise)
        position: 0-based offset of the first source character
        jump_target: Set by the resolver on loop operations. LOOP_START
            holds the index just past its LOOP_END; LOOP_END holds the
            index of its LOOP_START.
    """
    kind: OpKind
    run_length: Optional[int] = None
    position: int = 0
    jump_target: Optional[int] = None

    def __repr__(self) -> str:
        parts = [self.kind.name]
        if self.run_length is not None:
            parts[0] += f" x{self.run_length}"
        parts.append(f"@{self.position}")
        if self.jump_target is not None:
            parts.append(f"-> {self.jump_target}")
        return f"Op({', '.join(parts)})"


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes Brainfuck source code.

    The lexer never fails: malformed bracket structure is left for the
    resolver to report.

    Usage:
        lexer = Lexer(source)
        op = lexer.next_operation()     # one at a time
        ops = list(lexer.tokenize())    # or the rest of the stream

    Attributes:
        source: The source code being tokenized
    """

    def __init__(self, source: str):
        self.source = source
        self._pos = 0

    def tokenize(self) -> Iterator[Operation]:
        """
        Generate operations until (and including) END.

        Yields:
            Operation objects in source order
        """
        while True:
            op = self.next_operation()
            yield op
            if op.kind is OpKind.END:
                return

    def next_operation(self) -> Operation:
        """
        Scan and return the next operation.

        Once the input is exhausted every further call returns END.
        """
        kind = self._skip_comments()
        if kind is None:
            return Operation(OpKind.END, position=len(self.source))

        start = self._pos
        self._pos += 1

        if not kind.is_repeatable:
            return Operation(kind, position=start)

        return Operation(kind, run_length=self._scan_run(kind), position=start)

    # =========================================================================
    # Scanning Helpers
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _skip_comments(self) -> Optional[OpKind]:
        """Advance to the next symbol and return its kind (None at end)."""
        while not self._at_end():
            kind = SYMBOLS.get(self.source[self._pos])
            if kind is not None:
                return kind
            self._pos += 1
        return None

    def _scan_run(self, kind: OpKind) -> int:
        """
        Count further occurrences of kind after the first one.

        Stops in front of the first different symbol, which is left for
        the next call.
        """
        count = 1
        while self._skip_comments() is kind:
            count += 1
            self._pos += 1
        return count


def tokenize(source: str) -> list[Operation]:
    """Tokenize a whole source string, END included."""
    ops = list(Lexer(source).tokenize())
    logger.debug(f"Tokenized {len(source)} characters into {len(ops)} operations")
    return ops
