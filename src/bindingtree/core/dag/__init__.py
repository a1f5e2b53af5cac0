# src/bindingtree/core/dag/__init__.py
"""Graph-to-tree compilation.

Stages, leaves first: classify -> linearize -> builder -> variables, tied
together by compiler.compile_graph(). operations holds tree-level helpers.
"""

from bindingtree.core.dag.builder import build
from bindingtree.core.dag.classify import classify, classify_edge, resolve_edges
from bindingtree.core.dag.compiler import CompilationResult, CompiledTree, compile_graph
from bindingtree.core.dag.linearize import LinearizationResult, linearize
from bindingtree.core.dag.models import GraphValidationError, TreeBuildError
from bindingtree.core.dag.operations import combine_or, edge_name, tree_to_graph, validate_tree
from bindingtree.core.dag.variables import EdgeVariable, PropagationResult, SelectedVariable, propagate

__all__ = [
    "CompilationResult",
    "CompiledTree",
    "EdgeVariable",
    "GraphValidationError",
    "LinearizationResult",
    "PropagationResult",
    "SelectedVariable",
    "TreeBuildError",
    "build",
    "classify",
    "classify_edge",
    "combine_or",
    "compile_graph",
    "edge_name",
    "linearize",
    "propagate",
    "resolve_edges",
    "tree_to_graph",
    "validate_tree",
]
