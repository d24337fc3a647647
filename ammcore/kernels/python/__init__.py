"""
Production Python kernels.

These modules are designed to be:
- deterministic (integer-only),
- small surface-area (pure functions, no fee handling),
- easy to audit (explicit intermediate variables and rounding direction).
"""
