"""Core infrastructure: configuration, logging, canonical serialization, compilation."""

from bindingtree.core.canonical import CANONICAL_VERSION, canonical_json, stable_hash, tree_hash, tree_json
from bindingtree.core.config import BindingTreeSettings, CompilerSettings, LoggingSettings, load_settings
from bindingtree.core.logging import configure_logging, get_logger

__all__ = [
    "CANONICAL_VERSION",
    "BindingTreeSettings",
    "CompilerSettings",
    "LoggingSettings",
    "canonical_json",
    "configure_logging",
    "get_logger",
    "load_settings",
    "stable_hash",
    "tree_hash",
    "tree_json",
]
