# src/bindingtree/core/config.py
"""
Configuration schema and loading for bindingtree.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from bindingtree.contracts.enums import QueueOrder


class CompilerSettings(BaseModel):
    """Knobs for graph-to-tree compilation.

    Example YAML:
        compiler:
          variable_prefix_length: 2
          queue_order: parent_count
    """

    model_config = {"frozen": True}

    variable_prefix_length: int = Field(
        default=2,
        ge=1,
        le=2,
        description="Characters of the object type used as variable base name",
    )
    queue_order: QueueOrder = Field(
        default=QueueOrder.PARENT_COUNT,
        description="Work-queue ordering before each linearizer pass (ties always keep insertion order)",
    )
    unnamed_edge_prefix: str = Field(
        default="unnamed_edge",
        min_length=1,
        description="Prefix for edges without a user-assigned name (as the evaluation engine names them)",
    )


class LoggingSettings(BaseModel):
    """Logging output configuration."""

    model_config = {"frozen": True}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    json_output: bool = False
    quiet_loggers: tuple[str, ...] = Field(
        default=("dynaconf",),
        description="stdlib loggers kept at WARNING or above even when level is DEBUG",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v


class BindingTreeSettings(BaseModel):
    """Top-level settings file schema."""

    model_config = {"frozen": True, "extra": "forbid"}

    compiler: CompilerSettings = Field(default_factory=CompilerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_settings(config_path: Path) -> BindingTreeSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (BINDINGTREE_*) - highest priority
    2. Config file (settings.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: BINDINGTREE_COMPILER__QUEUE_ORDER for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated BindingTreeSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="BINDINGTREE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; Pydantic fields are lowercase
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): _lower_keys(v) for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    return BindingTreeSettings(**raw_config)


def _lower_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value
