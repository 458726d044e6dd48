"""
Dough: declarative, persisted runtime configuration.

Process-wide variables are annotated as configurable, discovered once at
startup, synchronized against on-disk documents and written back when the
program changes them.
"""

__version__ = "0.1.0"
