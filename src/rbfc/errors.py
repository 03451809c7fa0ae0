"""
rbfc Error Hierarchy
====================

This module defines the exception hierarchy for the whole toolchain.
All exceptions inherit from RbfcError, allowing callers to catch every
toolchain error with a single except clause if desired.

Exception Hierarchy
-------------------
RbfcError (base)
├── DiagnosticError (user-facing, carries a source position)
│   ├── StructuralError - bracket structure is broken
│   │   ├── UnmatchedCloseBracketError - ']' with no open '['
│   │   └── UnmatchedOpenBracketError - '[' never closed
│   └── ExecutionError - program failed while running
│       ├── TapeOverflowError - pointer moved past the last cell
│       ├── TapeUnderflowError - pointer moved before the first cell
│       └── InputExhaustedError - ',' with no input left
└── DefectError (internal invariant violated)
    ├── MalformedOperationError - operation missing a required field
    └── LabelStackError - code generator loop labels out of balance

Structural and execution errors are caused by the program being compiled.
Defect errors mean the resolver handed a back end a sequence it should never
have produced; they are reported separately so the CLI can treat them as
internal errors.

Error Message Format
--------------------
Once the source text is known, errors are rendered in the same format as
the rest of the toolchain:

    hello.bf:3:7: error: unmatched ']'
        ++>-]<
            ^
    hint: remove the ']' or add a matching '[' before it
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class RbfcError(Exception):
    """
    Base exception for all rbfc errors.

        try:
            compiler.compile_file("program.bf")
        except RbfcError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A line/column location in a source file.

    Operations only record a character offset; the location is derived
    from it when a diagnostic needs to be shown to the user.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"

    @classmethod
    def from_offset(
        cls, source: str, offset: int, filename: str = "<input>"
    ) -> "SourceLocation":
        """Build a location from a 0-based character offset into source."""
        offset = max(0, min(offset, len(source)))
        line = source.count("\n", 0, offset) + 1
        line_start = source.rfind("\n", 0, offset) + 1
        return cls(filename, line, offset - line_start + 1)


def source_line_at(source: str, offset: int) -> str:
    """Return the full text of the line containing offset."""
    offset = max(0, min(offset, len(source)))
    line_start = source.rfind("\n", 0, offset) + 1
    line_end = source.find("\n", offset)
    if line_end == -1:
        line_end = len(source)
    return source[line_start:line_end]


# =============================================================================
# User-Facing Diagnostics
# =============================================================================

class DiagnosticError(RbfcError):
    """
    Base class for errors caused by the program being processed.

    Attributes:
        message: The error description
        position: 0-based character offset of the offending operation
        location: Line/column location, once the source is attached
        hint: A suggestion for fixing the error (optional)
        source_line: The source text of the offending line (optional)
    """

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.position = position
        self.hint = hint
        self.location: Optional[SourceLocation] = None
        self.source_line: Optional[str] = None
        super().__init__(message)

    def attach_source(self, source: str, filename: str = "<input>") -> "DiagnosticError":
        """
        Resolve the character position against source text.

        Returns self so callers can write ``raise e.attach_source(...)``.
        """
        if self.position is not None and self.location is None:
            self.location = SourceLocation.from_offset(source, self.position, filename)
            self.source_line = source_line_at(source, self.position)
        return self

    def __str__(self) -> str:
        return self._format_message()

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Without attached source, the raw position is reported instead:
            error: unmatched ']' at position 5
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        elif self.position is not None:
            parts.append(f"error: {self.message} at position {self.position}")
        else:
            parts.append(f"error: {self.message}")

        # Source context with caret pointer
        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Structural Errors (Resolver)
# =============================================================================

class StructuralError(DiagnosticError):
    """
    Loop brackets do not pair up.

    Always fatal and always raised before any execution or code
    generation begins.
    """
    pass


class UnmatchedCloseBracketError(StructuralError):
    """A ']' was found while no '[' was open."""

    def __init__(self, position: int):
        super().__init__(
            "unmatched ']'",
            position=position,
            hint="remove the ']' or add a matching '[' before it",
        )


class UnmatchedOpenBracketError(StructuralError):
    """
    End of input was reached with at least one '[' still open.

    The reported position is the innermost unmatched '['; the end of
    input position is kept in eof_position.
    """

    def __init__(self, eof_position: int, open_position: int):
        self.eof_position = eof_position
        self.open_position = open_position
        super().__init__(
            "unmatched '['",
            position=open_position,
            hint=f"end of input reached at offset {eof_position} without a closing ']'",
        )


# =============================================================================
# Execution Errors (Interpreter)
# =============================================================================

class ExecutionError(DiagnosticError):
    """
    The program failed while being interpreted.

    Output produced before the failure has already been written and is
    not retracted.
    """
    pass


class TapeOverflowError(ExecutionError):
    """The data pointer moved past the last tape cell."""

    def __init__(self, position: int):
        super().__init__(
            "tape overflow",
            position=position,
            hint="run with --wrap to let the pointer wrap around the tape",
        )


class TapeUnderflowError(ExecutionError):
    """The data pointer moved before the first tape cell."""

    def __init__(self, position: int):
        super().__init__(
            "tape underflow",
            position=position,
            hint="run with --wrap to let the pointer wrap around the tape",
        )


class InputExhaustedError(ExecutionError):
    """A ',' needed a byte but the input source was empty."""

    def __init__(self, position: Optional[int] = None):
        super().__init__("input exhausted", position=position)


# =============================================================================
# Defect Errors (Internal)
# =============================================================================

class DefectError(RbfcError):
    """
    An internal invariant was violated.

    These are unreachable for sequences produced by the resolver and
    point to a bug in the toolchain rather than in the user's program.
    """

    def __init__(self, message: str, position: Optional[int] = None):
        self.message = message
        self.position = position
        if position is not None:
            message = f"{message} (operation at offset {position})"
        super().__init__(f"internal error: {message}")


class MalformedOperationError(DefectError):
    """An operation is missing its run length or jump target."""

    def __init__(self, position: int, detail: str = "missing run length"):
        self.detail = detail
        super().__init__(f"malformed operation: {detail}", position)


class LabelStackError(DefectError):
    """The code generator's loop label stack went out of balance."""
    pass
