"""
algoc Test Configuration
========================

Shared fixtures for the front end and CLI tests.
"""

from pathlib import Path

import pytest


SAMPLE_PROGRAM = """\
declare function log(message: string)

function area(w: int, h: float): float
    a <- w * h
    if a > 100.0
        log("large")
    else if a > 10.0
        log("medium")
    end
    return a
end

total <- area(3, 4.5)
"""


@pytest.fixture
def sample_source() -> str:
    """
    Fixture: a small program exercising every phase.

    It declares one extern, defines one function with an else-if chain,
    and calls it from top-level code.
    """
    return SAMPLE_PROGRAM


@pytest.fixture
def source_file(tmp_path: Path, sample_source: str) -> Path:
    """Fixture: the sample program written to a temporary .algo file."""
    path = tmp_path / "area.algo"
    path.write_text(sample_source, encoding="utf-8")
    return path
