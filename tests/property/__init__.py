"""Property-based tests for bindingtree.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of. The compiler feeds an
evaluation engine, so determinism and index validity are non-negotiable.

Test categories:
- core/: Linearization, tree construction and canonical hashing properties
"""
