"""All kinds and modes used across subsystem boundaries.

Values are the strings the editor and the evaluation engine exchange, so
they double as the wire representation.
"""

from enum import StrEnum


class DependencyType(StrEnum):
    """Quantifier relationship between the parent and child of a dependency edge.

    Derived once per edge from the multiplicity of the two connected
    qualifiers and never mutated afterwards.

    Values:
        SIMPLE: Single object on both sides
        ALL: Sets on both sides, every object must be matched
        EXISTS_IN_SOURCE: Source side is a set, one witness suffices
        EXISTS_IN_TARGET: Target side is a set, one witness suffices
    """

    SIMPLE = "simple"
    ALL = "all"
    EXISTS_IN_SOURCE = "existsInSource"
    EXISTS_IN_TARGET = "existsInTarget"

    @property
    def quantifies_set(self) -> bool:
        """True when the bound variable ranges over a set of objects."""
        return self in (DependencyType.ALL, DependencyType.EXISTS_IN_SOURCE)


class GateKind(StrEnum):
    """Logical gate combining the satisfaction of its children.

    The tree serializes gates under their upper-case names (AND/OR/NOT).
    """

    AND = "and"
    OR = "or"
    NOT = "not"

    @property
    def arity(self) -> int:
        """Number of children the gate must have in a committed tree."""
        return 1 if self is GateKind.NOT else 2


class NodeKind(StrEnum):
    """Type of node in the editor graph."""

    EVENT_TYPE = "eventType"
    GATE = "gate"


class QueueOrder(StrEnum):
    """Ordering applied to the linearizer work queue before each pass.

    PARENT_COUNT: Stable sort by descending parent count (ties keep insertion order)
    INSERTION: Plain insertion order
    """

    PARENT_COUNT = "parent_count"
    INSERTION = "insertion"
