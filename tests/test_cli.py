"""
CLI Test Suite
==============

Tests for the algoc command, run through click's CliRunner.
"""

from algoc import __version__
from algoc.cli.algoc import main
from algoc.cli.errors import ExitCode


class TestAlgocCli:
    """algoc command-line behaviour."""

    def test_help(self):
        """--help describes the command."""
        from click.testing import CliRunner
        runner = CliRunner()
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Compile an algo program" in result.output
        assert "--tokens" in result.output

    def test_version(self):
        """--version prints the package version."""
        from click.testing import CliRunner
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_report_to_stdout(self, source_file):
        """Without -o the report goes to stdout."""
        from click.testing import CliRunner
        runner = CliRunner()
        result = runner.invoke(main, [str(source_file)])
        assert result.exit_code == ExitCode.SUCCESS
        assert "function area(int,float): float" in result.output
        assert "extern log(string)" in result.output

    def test_report_to_file(self, source_file, tmp_path):
        """-o writes the report and confirms on stdout."""
        from click.testing import CliRunner
        output = tmp_path / "area.ir"
        runner = CliRunner()
        result = runner.invoke(main, [str(source_file), "-o", str(output)])
        assert result.exit_code == 0
        assert "Compiled" in result.output
        assert output.read_text(encoding="utf-8").startswith("function area(int,float): float")

    def test_tokens(self, source_file):
        """--tokens dumps one token per line."""
        from click.testing import CliRunner
        runner = CliRunner()
        result = runner.invoke(main, ["--tokens", str(source_file)])
        assert result.exit_code == 0
        assert result.output.splitlines()[0] == "Token(KEYWORD, 'declare', 1:1)"

    def test_ast(self, source_file):
        """--ast prints the syntax tree before analysis."""
        from click.testing import CliRunner
        runner = CliRunner()
        result = runner.invoke(main, ["--ast", str(source_file)])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "Program"
        assert "  Declare: log(message: string)" in lines
        assert "  Function: area(w: int, h: float): float" in lines

    def test_entry_option(self, source_file):
        """--entry renames the entry function."""
        from click.testing import CliRunner
        runner = CliRunner()
        result = runner.invoke(main, ["--entry", "start", str(source_file)])
        assert result.exit_code == 0
        assert "function start" in result.output.splitlines()

    def test_entry_from_environment(self, source_file):
        """ALGOC_ENTRY_FUNCTION is honoured."""
        from click.testing import CliRunner
        runner = CliRunner()
        result = runner.invoke(
            main, [str(source_file)], env={"ALGOC_ENTRY_FUNCTION": "boot"}
        )
        assert result.exit_code == 0
        assert "function boot" in result.output.splitlines()

    def test_no_layout(self, source_file):
        """--no-layout omits offsets and frame sizes."""
        from click.testing import CliRunner
        runner = CliRunner()
        result = runner.invoke(main, ["--no-layout", str(source_file)])
        assert result.exit_code == 0
        assert "frame" not in result.output
        assert "@" not in result.output

    def test_verbose(self, source_file):
        """-v reports progress and counts."""
        from click.testing import CliRunner
        runner = CliRunner()
        result = runner.invoke(main, ["-v", str(source_file)])
        assert result.exit_code == 0
        assert "Compiling" in result.output
        assert "Functions: 2, externs: 1" in result.output

    def test_compile_error(self, tmp_path):
        """Front end errors exit with BUILD_ERROR and show the location."""
        from click.testing import CliRunner
        source = tmp_path / "bad.algo"
        source.write_text("x <- 1\nx <- 2.5\n", encoding="utf-8")
        runner = CliRunner()
        result = runner.invoke(main, [str(source)])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "bad.algo:2:1: error:" in result.output

    def test_missing_file(self, tmp_path):
        """A missing input file is an argument error."""
        from click.testing import CliRunner
        runner = CliRunner()
        result = runner.invoke(main, [str(tmp_path / "missing.algo")])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_internal_error(self, source_file, monkeypatch):
        """Unexpected exceptions exit with INTERNAL_ERROR."""
        from click.testing import CliRunner

        class BrokenCompiler:
            def __init__(self, options):
                pass

            def compile_source(self, source, filename):
                raise RuntimeError("boom")

        monkeypatch.setattr("algoc.cli.algoc.Compiler", BrokenCompiler)
        runner = CliRunner()
        result = runner.invoke(main, [str(source_file)])
        assert result.exit_code == ExitCode.INTERNAL_ERROR
        assert "Internal error: boom" in result.output
