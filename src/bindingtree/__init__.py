"""
bindingtree: compile visual constraint graphs into binding-box trees.

Turns the event-type/gate graph drawn in the constraint editor into the
flat, index-addressed tree the object-centric evaluation engine consumes.
"""

__version__ = "0.3.0"
