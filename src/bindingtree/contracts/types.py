"""Semantic type aliases for compile-time type safety.

NewType creates distinct types that mypy treats as incompatible,
preventing accidental misuse of semantically different string values.
"""

from typing import Any, NewType, TypeAlias

NodeID = NewType("NodeID", str)
"""Editor-assigned node identifier (e.g., 'evt-place-order-1')"""

VariableName = NewType("VariableName", str)
"""Object variable name as shown in the editor (e.g., 'or_0', 'IT_1')"""

BoxContent: TypeAlias = dict[str, Any]
"""Binding-box payload (variables, filters, size filters, constraints, labels).

Owned by the evaluation engine's contract. The compiler copies it verbatim
and never inspects its keys.
"""

EdgeKey: TypeAlias = tuple[int, int]
"""(parent_index, child_index) pair addressing an edge inside a LinearTree."""
