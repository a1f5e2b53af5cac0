"""
Canonical JSON serialization for compiled trees.

Two-phase approach:
1. Normalize: Convert tuples and other containers to JSON-safe primitives (our code)
2. Serialize: Produce deterministic JSON per RFC 8785/JCS (rfc8785 package)

Identical graph snapshots must produce byte-identical trees. Box content
is opaque user data, so NaN and Infinity inside it are REJECTED rather
than silently converted.
"""

from __future__ import annotations

import hashlib
import math
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import rfc8785

if TYPE_CHECKING:
    from bindingtree.contracts.tree import LinearTree

# Version string stored alongside hashes so consumers can detect scheme changes
CANONICAL_VERSION = "sha256-rfc8785-v1"


def _normalize_for_canonical(data: Any) -> Any:
    """Recursively normalize a data structure for canonical JSON.

    Raises:
        ValueError: If data contains NaN or Infinity
    """
    if isinstance(data, float):
        if math.isnan(data) or math.isinf(data):
            raise ValueError(f"Cannot canonicalize non-finite float: {data}. Use None for missing values, not NaN.")
        return data
    if isinstance(data, Mapping):
        return {str(k): _normalize_for_canonical(v) for k, v in data.items()}
    if isinstance(data, list | tuple):
        return [_normalize_for_canonical(v) for v in data]
    return data


def canonical_json(obj: Any) -> str:
    """Produce canonical JSON (no whitespace, sorted keys).

    Raises:
        ValueError: If data contains NaN, Infinity, or other non-finite values
        TypeError: If data contains types that cannot be serialized
    """
    normalized = _normalize_for_canonical(obj)
    result: bytes = rfc8785.dumps(normalized)
    return result.decode("utf-8")


def stable_hash(obj: Any) -> str:
    """SHA-256 hex digest of the canonical JSON form of obj."""
    canonical = canonical_json(obj)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def tree_json(tree: LinearTree) -> str:
    """Canonical JSON of a tree in the evaluation engine's shape."""
    return canonical_json(tree.to_json())


def tree_hash(tree: LinearTree) -> str:
    """Stable fingerprint of a compiled tree.

    Two compilations of the same snapshot hash identically; any change to
    order, content, children or edge names changes the hash.
    """
    return stable_hash(tree.to_json())
