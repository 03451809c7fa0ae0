"""
Structural Resolver
===================

Matches loop brackets in a raw operation stream and fills in the jump
targets both back ends rely on.

Jump Convention
---------------
For a loop whose LOOP_START sits at index ``s`` and LOOP_END at ``e``:

    ops[s].jump_target == e + 1     (skip the loop when the cell is zero)
    ops[e].jump_target == s         (jump back; execution resumes at s + 1)

Bracket matching uses an explicit stack of pending LOOP_START indices, so
nesting depth is bounded only by memory and never by Python's recursion
limit.

Errors
------
- A ']' with nothing open raises UnmatchedCloseBracketError immediately.
- Reaching END with brackets still open raises UnmatchedOpenBracketError
  naming the innermost one.
"""

import logging
from dataclasses import replace
from typing import Iterable

from rbfc.errors import (
    SourceLocation,
    UnmatchedCloseBracketError,
    UnmatchedOpenBracketError,
)
from rbfc.lexer import Operation, OpKind, tokenize


logger = logging.getLogger(__name__)

# Resolved, immutable program handed to the back ends
OperationSequence = tuple[Operation, ...]


def resolve(raw_operations: Iterable[Operation]) -> OperationSequence:
    """
    Resolve loop jump targets.

    Args:
        raw_operations: Operations as produced by the lexer. Anything after
            the first END is ignored; a stream with no END is treated as
            ending where it runs out.

    Returns:
        The resolved operation sequence, terminated by exactly one END

    Raises:
        UnmatchedCloseBracketError: A ']' has no matching '['
        UnmatchedOpenBracketError: A '[' is never closed
    """
    ops: list[Operation] = []
    jump_stack: list[int] = []
    eof_position = None

    for op in raw_operations:
        index = len(ops)

        if op.kind is OpKind.END:
            eof_position = op.position
            ops.append(op)
            break

        if op.kind is OpKind.LOOP_START:
            jump_stack.append(index)
            ops.append(op)
        elif op.kind is OpKind.LOOP_END:
            if not jump_stack:
                raise UnmatchedCloseBracketError(op.position)
            start = jump_stack.pop()
            ops[start] = replace(ops[start], jump_target=index + 1)
            ops.append(replace(op, jump_target=start))
        else:
            ops.append(op)

    if eof_position is None:
        eof_position = ops[-1].position + 1 if ops else 0
        ops.append(Operation(OpKind.END, position=eof_position))

    if jump_stack:
        innermost = ops[jump_stack[-1]]
        raise UnmatchedOpenBracketError(eof_position, innermost.position)

    logger.debug(
        f"Resolved {len(ops)} operations "
        f"({sum(1 for op in ops if op.kind is OpKind.LOOP_START)} loops)"
    )
    return tuple(ops)


def parse_source(source: str) -> OperationSequence:
    """Tokenize and resolve source text in one step."""
    return resolve(tokenize(source))


def format_operations(operations: OperationSequence, source: str = "") -> str:
    """
    Render a resolved sequence as a readable listing.

    One line per operation:

        index  KIND        xN   @line:col  -> target

    Line/column are shown when source is given, the raw offset otherwise.
    """
    lines = []
    for index, op in enumerate(operations):
        count = f"x{op.run_length}" if op.run_length is not None else ""
        if source:
            loc = SourceLocation.from_offset(source, op.position)
            where = f"@{loc.line}:{loc.column}"
        else:
            where = f"@{op.position}"
        target = f"-> {op.jump_target}" if op.jump_target is not None else ""
        lines.append(f"{index:>6}  {op.kind.name:<11} {count:<6} {where:<10} {target}".rstrip())
    return "\n".join(lines)
