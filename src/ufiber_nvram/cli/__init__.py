"""
UFiber NVRAM Command-Line Interface
===================================

This package provides the command-line tool for the NVRAM codec:

- **ufnvram**: show, validate and patch UFiber image dumps

The tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["ufnvram"]
