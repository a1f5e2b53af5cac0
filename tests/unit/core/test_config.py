# tests/unit/core/test_config.py
"""Tests for settings schema and Dynaconf loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from bindingtree.contracts import QueueOrder
from bindingtree.core.config import BindingTreeSettings, CompilerSettings, LoggingSettings, load_settings


class TestSettingsSchema:
    def test_defaults(self) -> None:
        settings = BindingTreeSettings()

        assert settings.compiler.variable_prefix_length == 2
        assert settings.compiler.queue_order == QueueOrder.PARENT_COUNT
        assert settings.compiler.unnamed_edge_prefix == "unnamed_edge"
        assert settings.logging.level == "INFO"
        assert settings.logging.json_output is False
        assert settings.logging.quiet_loggers == ("dynaconf",)

    @pytest.mark.parametrize("length", [0, 3])
    def test_prefix_length_bounds(self, length: int) -> None:
        with pytest.raises(ValidationError):
            CompilerSettings(variable_prefix_length=length)

    def test_level_is_normalized(self) -> None:
        assert LoggingSettings(level="debug").level == "DEBUG"  # type: ignore[arg-type]

    def test_settings_are_frozen(self) -> None:
        settings = CompilerSettings()

        with pytest.raises(ValidationError):
            settings.variable_prefix_length = 1  # type: ignore[misc]

    def test_unknown_section_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BindingTreeSettings(renderer={})  # type: ignore[call-arg]


class TestLoadSettings:
    def test_load_from_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("compiler:\n  queue_order: insertion\nlogging:\n  level: warning\n")

        settings = load_settings(config_file)

        assert settings.compiler.queue_order == QueueOrder.INSERTION
        assert settings.compiler.variable_prefix_length == 2
        assert settings.logging.level == "WARNING"

    def test_environment_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("compiler:\n  variable_prefix_length: 1\n")
        monkeypatch.setenv("BINDINGTREE_COMPILER__QUEUE_ORDER", "insertion")

        settings = load_settings(config_file)

        assert settings.compiler.variable_prefix_length == 1
        assert settings.compiler.queue_order == QueueOrder.INSERTION

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.yaml")

    def test_invalid_value(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("compiler:\n  queue_order: random\n")

        with pytest.raises(ValidationError):
            load_settings(config_file)
