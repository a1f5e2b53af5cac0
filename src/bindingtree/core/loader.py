# src/bindingtree/core/loader.py
"""Read graph and tree documents from disk.

JSON files are parsed with json, everything else with PyYAML (which also
accepts JSON). Validation happens in the pydantic document models.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from bindingtree.contracts.document import GraphDocument
from bindingtree.contracts.graph import GraphSnapshot
from bindingtree.contracts.tree import LinearTree


def _read_document(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def load_graph(path: Path) -> GraphSnapshot:
    """Load an editor graph snapshot.

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the document does not match the graph schema
        ValueError: If the file is not valid JSON/YAML
    """
    raw = _read_document(path)
    return GraphDocument.model_validate(raw or {}).to_snapshot()


def load_tree(path: Path) -> LinearTree:
    """Load a compiled tree in the evaluation engine's JSON shape.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the document is not a valid tree
    """
    raw = _read_document(path)
    if not isinstance(raw, dict) or "nodes" not in raw:
        raise ValueError(f"{path.name} is not a binding-box tree (missing 'nodes')")
    return LinearTree.from_json(raw)
