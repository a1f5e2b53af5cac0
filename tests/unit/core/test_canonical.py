# tests/unit/core/test_canonical.py
"""Tests for canonical JSON serialization and tree hashing."""

from __future__ import annotations

import math

import pytest

from bindingtree.contracts import BoxNode, LinearTree
from bindingtree.core.canonical import CANONICAL_VERSION, canonical_json, stable_hash, tree_hash, tree_json


class TestCanonicalJson:
    def test_sorted_keys_no_whitespace(self) -> None:
        assert canonical_json({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'

    def test_tuples_become_lists(self) -> None:
        assert canonical_json({"k": (1, (2, 3))}) == '{"k":[1,[2,3]]}'

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_floats_rejected(self, value: float) -> None:
        with pytest.raises(ValueError, match="non-finite"):
            canonical_json({"nested": [value]})

    def test_key_order_does_not_change_hash(self) -> None:
        assert stable_hash({"a": 1, "b": 2}) == stable_hash({"b": 2, "a": 1})

    def test_version_string(self) -> None:
        assert CANONICAL_VERSION == "sha256-rfc8785-v1"


class TestTreeHash:
    def test_tree_json_shape(self) -> None:
        tree = LinearTree(nodes=(BoxNode(content={"z": 1, "a": 2}, children=(1,)), BoxNode()))

        assert tree_json(tree) == '{"edgeNames":[],"nodes":[{"Box":[{"a":2,"z":1},[1]]},{"Box":[{},[]]}]}'

    def test_hash_is_hex_sha256(self) -> None:
        digest = tree_hash(LinearTree(nodes=(BoxNode(),)))

        assert len(digest) == 64
        int(digest, 16)

    def test_edge_names_change_hash(self) -> None:
        nodes = (BoxNode(children=(1,)), BoxNode())

        unnamed = tree_hash(LinearTree(nodes=nodes))
        named = tree_hash(LinearTree(nodes=nodes, edge_names=(((0, 1), "then"),)))

        assert unnamed != named
