# =============================================================================
# test_interpreter.py - Interpreter Unit Tests
# =============================================================================
# Tests for the Brainfuck interpreter.
#
# Test coverage includes:
#   - Cell arithmetic (modulo 256)
#   - Pointer motion, tape overflow/underflow and wraparound
#   - Loops, including skipped and nested loops
#   - Input and output, including input exhaustion
#   - Malformed operation detection
#   - Fresh state on every run
# =============================================================================

import io

import pytest
from rbfc.errors import (
    ExecutionError,
    InputExhaustedError,
    MalformedOperationError,
    TapeOverflowError,
    TapeUnderflowError,
)
from rbfc.interpreter import TAPE_SIZE, Interpreter, InterpreterSettings
from rbfc.lexer import Operation, OpKind
from rbfc.resolver import parse_source


# =============================================================================
# Helper Functions
# =============================================================================

def run(source: str, input_data: bytes = b"", wrap: bool = False):
    """Run source and return (interpreter, output bytes)."""
    interp = Interpreter(InterpreterSettings(wrap=wrap))
    output = io.BytesIO()
    interp.execute(parse_source(source), io.BytesIO(input_data), output)
    return interp, output.getvalue()


# =============================================================================
# Cell Arithmetic Tests
# =============================================================================

class TestArithmetic:
    """Test increment and decrement."""

    def test_increment(self):
        """'+++' leaves 3 in cell 0, pointer unmoved, no output."""
        interp, output = run("+++")
        assert interp.tape[0] == 3
        assert interp.dp == 0
        assert output == b""

    def test_decrement(self):
        """'+++--' leaves 1."""
        interp, _ = run("+++--")
        assert interp.tape[0] == 1

    def test_increment_wraps_at_256(self):
        """256 increments return a zero cell to zero."""
        interp, _ = run("+" * 256)
        assert interp.tape[0] == 0

    def test_increment_wraps_past_255(self):
        """300 increments leave 300 mod 256."""
        interp, _ = run("+" * 300)
        assert interp.tape[0] == 44

    def test_decrement_wraps_below_zero(self):
        """Decrementing zero gives 255."""
        interp, _ = run("-")
        assert interp.tape[0] == 255

    def test_cell_wrap_ignores_wrap_setting(self):
        """Cell arithmetic wraps whether or not pointer wrap is set."""
        for wrap in (False, True):
            interp, _ = run("--", wrap=wrap)
            assert interp.tape[0] == 254


# =============================================================================
# Pointer Motion Tests
# =============================================================================

class TestPointer:
    """Test data pointer motion and tape boundaries."""

    def test_move_right_and_left(self):
        """Moves adjust the pointer by the run length."""
        interp, _ = run(">>>+<")
        assert interp.tape[3] == 1
        assert interp.dp == 2

    def test_move_to_last_cell(self):
        """Reaching the last cell is allowed."""
        interp, _ = run(">" * (TAPE_SIZE - 1) + "+")
        assert interp.dp == TAPE_SIZE - 1
        assert interp.tape[TAPE_SIZE - 1] == 1

    def test_overflow_without_wrap(self):
        """Moving past the last cell fails without wrap."""
        with pytest.raises(TapeOverflowError) as exc_info:
            run("+" + ">" * TAPE_SIZE)
        assert exc_info.value.position == 1

    def test_overflow_with_wrap(self):
        """With wrap the pointer lands at dp + n - TAPE_SIZE."""
        interp, _ = run(">" * (TAPE_SIZE - 2) + "+" + ">>>>>", wrap=True)
        assert interp.dp == (TAPE_SIZE - 2) + 5 - TAPE_SIZE

    def test_underflow_without_wrap(self):
        """Moving before the first cell fails without wrap."""
        with pytest.raises(TapeUnderflowError) as exc_info:
            run(">>+<<<")
        assert exc_info.value.position == 3

    def test_underflow_with_wrap(self):
        """With wrap the pointer lands at TAPE_SIZE - (n - dp)."""
        interp, _ = run("><<<", wrap=True)
        assert interp.dp == TAPE_SIZE - (3 - 1)

    def test_wrap_to_last_cell(self):
        """A single '<' from cell 0 reaches the last cell."""
        interp, _ = run("<+", wrap=True)
        assert interp.dp == TAPE_SIZE - 1
        assert interp.tape[TAPE_SIZE - 1] == 1

    def test_tape_errors_are_execution_errors(self):
        """Boundary errors share the ExecutionError base."""
        with pytest.raises(ExecutionError):
            run("<")


# =============================================================================
# Loop Tests
# =============================================================================

class TestLoops:
    """Test loop control flow."""

    def test_move_loop(self):
        """'++[->+<]' moves 2 from cell 0 to cell 1."""
        interp, _ = run("++[->+<]")
        assert interp.tape[0] == 0
        assert interp.tape[1] == 2
        assert interp.dp == 0

    def test_loop_skipped_on_zero(self):
        """A loop entered with a zero cell is skipped entirely."""
        interp, output = run("[.+]>+")
        assert output == b""
        assert interp.tape[0] == 0
        assert interp.tape[1] == 1

    def test_nested_loops(self):
        """Nested loops multiply: 3 * 4 = 12."""
        interp, _ = run("+++[>++++[>+<-]<-]")
        assert interp.tape[0] == 0
        assert interp.tape[1] == 0
        assert interp.tape[2] == 12

    def test_loop_at_end_of_program(self):
        """A loop whose LOOP_END is the last operation exits cleanly."""
        interp, _ = run("+++++[-]")
        assert interp.tape[0] == 0
        assert interp.pc == len(parse_source("+++++[-]")) - 1

    def test_hello_world(self):
        """The classic hello world program."""
        source = (
            "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]>>."
            ">---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."
        )
        _, output = run(source)
        assert output == b"Hello World!\n"


# =============================================================================
# Input/Output Tests
# =============================================================================

class TestIO:
    """Test ',' and '.'."""

    def test_output_repeats(self):
        """'.' with run length n writes the cell n times."""
        _, output = run("+" * 65 + "...")
        assert output == b"AAA"

    def test_output_raw_bytes(self):
        """Output is raw bytes, no encoding applied."""
        _, output = run("-.")
        assert output == b"\xff"

    def test_echo_input(self):
        """',.' copies one input byte to the output."""
        _, output = run(",.>,.", b"hi")
        assert output == b"hi"

    def test_input_run_keeps_last_byte(self):
        """',,,' reads three bytes into the same cell."""
        interp, _ = run(",,,", b"abc")
        assert interp.tape[0] == ord("c")

    def test_input_exhausted(self):
        """Reading past the end of input is an error."""
        with pytest.raises(InputExhaustedError) as exc_info:
            run(",>,", b"x")
        assert exc_info.value.position == 2

    def test_input_exhausted_inside_run(self):
        """Exhaustion part way through a run still fails."""
        with pytest.raises(InputExhaustedError):
            run(",,", b"x")

    def test_partial_output_kept(self):
        """Output written before an error stays written."""
        interp = Interpreter()
        output = io.BytesIO()
        with pytest.raises(TapeUnderflowError):
            interp.execute(parse_source("+" * 33 + ".<"), io.BytesIO(), output)
        assert output.getvalue() == b"!"

    def test_cat_program(self):
        """A cat loop stops when it reads a zero byte."""
        _, output = run(",[.,]", b"abc\x00")
        assert output == b"abc"


# =============================================================================
# Malformed Operation Tests
# =============================================================================

class TestMalformedOperations:
    """Hand-built sequences that the resolver would never produce."""

    def test_missing_run_length(self):
        """A repeatable operation without run length is a defect."""
        ops = (Operation(OpKind.INCREMENT, None, 7), Operation(OpKind.END, None, 8))
        with pytest.raises(MalformedOperationError) as exc_info:
            Interpreter().execute(ops, io.BytesIO(), io.BytesIO())
        assert exc_info.value.position == 7

    def test_missing_jump_target(self):
        """A loop start taken without jump target is a defect."""
        ops = (Operation(OpKind.LOOP_START, None, 0), Operation(OpKind.END, None, 1))
        with pytest.raises(MalformedOperationError):
            Interpreter().execute(ops, io.BytesIO(), io.BytesIO())

    def test_sequence_without_end(self):
        """A sequence with no END stops at its boundary."""
        ops = (Operation(OpKind.INCREMENT, 2, 0),)
        interp = Interpreter()
        interp.execute(ops, io.BytesIO(), io.BytesIO())
        assert interp.tape[0] == 2


# =============================================================================
# State Lifecycle Tests
# =============================================================================

class TestLifecycle:
    """Test that every run starts from a clean machine."""

    def test_state_reset_between_runs(self):
        """Running twice on one interpreter gives identical results."""
        interp = Interpreter()
        ops = parse_source("+++>++")
        for _ in range(2):
            interp.execute(ops, io.BytesIO(), io.BytesIO())
            assert interp.tape[0] == 3
            assert interp.tape[1] == 2
            assert interp.dp == 1

    def test_sequence_unchanged_by_execution(self):
        """Executing does not modify the operation sequence."""
        ops = parse_source("++[->+<]")
        before = list(ops)
        run_interp = Interpreter()
        run_interp.execute(ops, io.BytesIO(), io.BytesIO())
        assert list(ops) == before

    def test_default_settings(self):
        """Wrap is off by default."""
        assert Interpreter().settings.wrap is False
