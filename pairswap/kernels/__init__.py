"""
Kernel layer.

Production Python kernels for the pair. These modules are designed to be:
- deterministic (integer-only),
- easy to audit (explicit intermediate variables),
- small surface-area (pure functions, typed results).

Nothing in this package holds state; the `state` and `core` packages thread
the pair's owned state through these functions.
"""
