# tests/property/__init__.py
"""Property-based tests for Dough.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of. For a config file format that
means whatever is saved loads back unchanged and byte-stable.
"""
