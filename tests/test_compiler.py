"""
Compiler Driver Test Suite
==========================

Tests for the phase pipeline, its options and the report it renders.

Test Organization
-----------------
- TestCompilerOptions: defaults and environment overrides
- TestPipeline: results of each phase
- TestDescribe: the rendered report
- TestErrors: errors stop compilation and keep their location
"""

import pytest

from algoc.errors import AlgoError
from algoc.frontend import (
    Compiler,
    CompilerOptions,
    FrontendError,
    LexicalError,
    ParseError,
    SemanticError,
    compile_lines,
    compile_source,
)
from algoc.frontend.ast import Program
from algoc.frontend.lexer import TokenType


# =============================================================================
# Options
# =============================================================================

class TestCompilerOptions:
    """CompilerOptions defaults and from_env."""

    def test_defaults(self):
        """main entry function, layout on."""
        options = CompilerOptions()
        assert options.entry_function == "main"
        assert options.compute_layout is True

    def test_from_env_without_variables(self, monkeypatch):
        """No variables set means defaults."""
        monkeypatch.delenv("ALGOC_ENTRY_FUNCTION", raising=False)
        monkeypatch.delenv("ALGOC_COMPUTE_LAYOUT", raising=False)
        assert CompilerOptions.from_env() == CompilerOptions()

    def test_from_env_overrides(self, monkeypatch):
        """Both variables are read."""
        monkeypatch.setenv("ALGOC_ENTRY_FUNCTION", "start")
        monkeypatch.setenv("ALGOC_COMPUTE_LAYOUT", "0")
        options = CompilerOptions.from_env()
        assert options.entry_function == "start"
        assert options.compute_layout is False

    @pytest.mark.parametrize("value,expected", [
        ("false", False),
        ("No", False),
        ("off", False),
        ("1", True),
        ("yes", True),
    ])
    def test_layout_flag_values(self, monkeypatch, value, expected):
        """Only false-like values disable layout."""
        monkeypatch.setenv("ALGOC_COMPUTE_LAYOUT", value)
        assert CompilerOptions.from_env().compute_layout is expected


# =============================================================================
# Pipeline
# =============================================================================

class TestPipeline:
    """Each phase contributes to the CompilationResult."""

    def test_all_phases(self, sample_source):
        """Tokens, AST, functions, externs and frames are filled."""
        result = compile_source(sample_source, "area.algo")
        assert result.filename == "area.algo"
        assert result.tokens[-1].type == TokenType.END_LINE
        assert isinstance(result.ast, Program)
        assert [f.name for f in result.functions] == ["area(int,float)", "main"]
        assert [str(s.signature) for s in result.externs] == ["log(string)"]
        assert set(result.frames) == {"area(int,float)", "main"}
        assert result.frames["area(int,float)"].size == 20
        assert result.frames["main"].size == 8

    def test_frames_match_reserved_sizes(self, sample_source):
        """Every frame equals the size the analyzer reserved for it."""
        result = compile_source(sample_source)
        for function in result.functions:
            assert result.frames[function.name].size == function.frame_size

    def test_without_layout(self, sample_source):
        """compute_layout=False skips frames."""
        options = CompilerOptions(compute_layout=False)
        assert compile_source(sample_source, options=options).frames == {}

    def test_entry_function_option(self):
        """The entry function takes the configured name."""
        options = CompilerOptions(entry_function="start")
        result = Compiler(options).compile_source("x <- 1")
        assert result.functions[-1].name == "start"
        assert "start" in result.frames

    def test_compile_lines(self):
        """Lines can be passed directly."""
        result = compile_lines(["x <- 1", "y <- x + 1"])
        assert [v.name for v in result.functions[0].locals] == ["x", "y"]

    def test_compile_file(self, source_file):
        """compile_file reads the file and uses its path as filename."""
        result = Compiler().compile_file(source_file)
        assert result.filename == str(source_file)
        assert result.tokens[0].filename == str(source_file)

    def test_compile_missing_file(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            Compiler().compile_file(tmp_path / "missing.algo")


# =============================================================================
# Report
# =============================================================================

class TestDescribe:
    """CompilationResult.describe()."""

    def test_report(self, sample_source):
        """Functions, slots, frame sizes, statements and externs."""
        report = compile_source(sample_source).describe()
        lines = report.splitlines()

        assert "function area(int,float): float" in lines
        assert "  param w: int @0" in lines
        assert "  param h: float @4" in lines
        assert "  local a: float @12" in lines
        assert "  frame 20 bytes" in lines
        assert "    Assign: a <- (w * h)" in lines
        assert "    Return a" in lines
        assert "function main" in lines
        assert "  local total: float @0" in lines
        assert "    Assign: total <- area(int,float)(3, 4.5)" in lines
        assert lines[-1] == "extern log(string)"
        assert report.endswith("\n")

    def test_report_without_layout(self, sample_source):
        """Without frames no offsets or sizes are shown."""
        options = CompilerOptions(compute_layout=False)
        report = compile_source(sample_source, options=options).describe()
        assert "  local a: float" in report.splitlines()
        assert "@" not in report
        assert "frame" not in report

    def test_report_calls_are_mangled(self, sample_source):
        """Calls inside bodies show the resolved overload."""
        report = compile_source(sample_source).describe()
        assert 'Expr: log(string)("large")' in report

    def test_extern_return_type(self):
        """Extern lines include their return type."""
        report = compile_source("declare function g(x: int): int\ny <- g(1)").describe()
        assert report.splitlines()[-1] == "extern g(int): int"


# =============================================================================
# Errors
# =============================================================================

class TestErrors:
    """Errors propagate from the failing phase."""

    @pytest.mark.parametrize("source,error_type", [
        ("x <- 1 # 2", LexicalError),
        ("if x", ParseError),
        ("y <- x", SemanticError),
    ])
    def test_phase_errors(self, source, error_type):
        """Each phase raises its own error family."""
        with pytest.raises(error_type):
            compile_source(source)

    def test_error_hierarchy(self):
        """Front end errors are AlgoErrors."""
        with pytest.raises(AlgoError):
            compile_source("y <- x")
        assert issubclass(FrontendError, AlgoError)

    def test_error_shows_source_line(self):
        """The message quotes the line and points at the column."""
        with pytest.raises(SemanticError) as exc_info:
            compile_source("x <- 1\ny <- x + z", "prog.algo")
        message = str(exc_info.value)
        assert message.splitlines() == [
            "prog.algo:2:10: error: undefined variable 'z'",
            "    y <- x + z",
            "             ^",
        ]
