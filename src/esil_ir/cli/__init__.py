"""
ESIL-IR Command-Line Interface
==============================

This package provides the command-line tool for the translator:

- **esil2ir**: Translate ESIL expressions into three-operand instructions

The tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["esil2ir"]
