"""
algoc Command-Line Interface
============================

- **algoc**: compile an algo program and report its flattened functions

The tool is a Click application; errors are reported through the shared
handler in algoc.cli.errors with fixed exit codes.
"""

__all__ = ["algoc"]
