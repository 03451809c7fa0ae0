# =============================================================================
# test_cli.py - Command-Line Interface Tests
# =============================================================================
# Tests for the rbfc command.
#
# Test coverage includes:
#   - Help and version output
#   - Compilation to .asm, output directory handling
#   - Interpretation with stdin/stdout
#   - Operation dump
#   - Exit codes for program errors and bad arguments
# =============================================================================

import pytest
from click.testing import CliRunner

from rbfc.cli.errors import ExitCode
from rbfc.cli.rbfc import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def hello(tmp_path):
    """A program printing 'A'."""
    path = tmp_path / "hello.bf"
    path.write_text("A: ++++++++[>++++++++<-]>+.\n")
    return path


class TestCliBasics:
    """Help and version."""

    def test_cli_help(self, runner):
        """Test CLI help output."""
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Interpret or compile a Brainfuck program" in result.output

    def test_cli_version(self, runner):
        """Test CLI version output."""
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "rbfc" in result.output

    def test_missing_input_file(self, runner, tmp_path):
        """A nonexistent input file is a usage error."""
        result = runner.invoke(main, [str(tmp_path / "nope.bf")])
        assert result.exit_code == ExitCode.INVALID_ARGS


# =============================================================================
# Compilation Tests
# =============================================================================

class TestCliCompile:
    """Compile mode."""

    def test_compile_next_to_input(self, runner, hello):
        """By default the .asm lands beside the source."""
        result = runner.invoke(main, [str(hello)])
        assert result.exit_code == 0
        output = hello.with_suffix(".asm")
        assert output.exists()
        assert "format ELF64 executable 3" in output.read_text()
        assert "Compiled" in result.output

    def test_compile_output_dir(self, runner, hello, tmp_path):
        """-o writes into the given directory, creating it."""
        out_dir = tmp_path / "build" / "asm"
        result = runner.invoke(main, [str(hello), "-o", str(out_dir)])
        assert result.exit_code == 0
        assert (out_dir / "hello.asm").exists()

    def test_compile_flags(self, runner, hello):
        """--bounds-check and --no-comments reach the generator."""
        result = runner.invoke(main, [str(hello), "--bounds-check", "--no-comments"])
        assert result.exit_code == 0
        asm = hello.with_suffix(".asm").read_text()
        assert "OUT_OF_BOUNDS:" in asm
        assert "; INCREMENT" not in asm

    def test_compile_verbose(self, runner, hello):
        """-v reports operation and loop counts."""
        result = runner.invoke(main, [str(hello), "-v"])
        assert result.exit_code == 0
        assert "1 loops" in result.output

    def test_compile_structural_error(self, runner, tmp_path):
        """Unbalanced brackets exit with the program error code."""
        path = tmp_path / "bad.bf"
        path.write_text("+++[")
        result = runner.invoke(main, [str(path)])
        assert result.exit_code == ExitCode.PROGRAM_ERROR
        assert "unmatched '['" in result.output
        assert not path.with_suffix(".asm").exists()

    @pytest.mark.parametrize("flags", [[], ["-i"], ["--dump-ops"]])
    def test_undecodable_source(self, runner, tmp_path, flags):
        """A source file that is not UTF-8 is a usage error, not an internal one."""
        path = tmp_path / "binary.bf"
        path.write_bytes(b"+++\xff\xfe.")
        result = runner.invoke(main, [str(path), *flags])
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "not valid UTF-8" in result.output
        assert "Internal error" not in result.output


# =============================================================================
# Interpretation Tests
# =============================================================================

class TestCliInterpret:
    """Interpret mode."""

    def test_interpret(self, runner, hello):
        """-i runs the program and prints its output."""
        result = runner.invoke(main, [str(hello), "-i"])
        assert result.exit_code == 0
        assert result.stdout_bytes == b"A"

    def test_interpret_no_deprecation_warnings(self, runner, hello, recwarn):
        """Stream setup for -i triggers no deprecation warnings from rbfc."""
        result = runner.invoke(main, [str(hello), "-i"])
        assert result.exit_code == 0
        deprecations = [
            w for w in recwarn
            if issubclass(w.category, DeprecationWarning) and "rbfc" in w.filename
        ]
        assert deprecations == []

    def test_interpret_stdin(self, runner, tmp_path):
        """Program input comes from stdin."""
        path = tmp_path / "upper.bf"
        path.write_text(",[" + "-" * 32 + ".,]")
        result = runner.invoke(main, [str(path), "-i"], input=b"abc\x00")
        assert result.exit_code == 0
        assert result.stdout_bytes == b"ABC"

    def test_interpret_input_exhausted(self, runner, tmp_path):
        """Running out of input is a program error."""
        path = tmp_path / "read.bf"
        path.write_text(",,")
        result = runner.invoke(main, [str(path), "-i"], input=b"x")
        assert result.exit_code == ExitCode.PROGRAM_ERROR
        assert "input exhausted" in result.output

    def test_interpret_wrap(self, runner, tmp_path):
        """--wrap lets the pointer leave through the left edge."""
        path = tmp_path / "wrap.bf"
        path.write_text("<" + "+" * 33 + ".")
        assert runner.invoke(main, [str(path), "-i"]).exit_code == ExitCode.PROGRAM_ERROR
        result = runner.invoke(main, [str(path), "-i", "--wrap"])
        assert result.exit_code == 0
        assert result.stdout_bytes == b"!"


# =============================================================================
# Debug Output Tests
# =============================================================================

class TestCliDump:
    """--dump-ops."""

    def test_dump_ops(self, runner, hello):
        """The listing shows resolved operations and does not compile."""
        result = runner.invoke(main, [str(hello), "--dump-ops"])
        assert result.exit_code == 0
        assert "LOOP_START" in result.output
        assert "END" in result.output
        assert not hello.with_suffix(".asm").exists()
