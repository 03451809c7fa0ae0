"""
rbfc Command-Line Interface
===========================

This package provides the ``rbfc`` command, a Click-based application that
either interprets a Brainfuck program or compiles it to fasm assembly.
"""

__all__ = ["rbfc"]
