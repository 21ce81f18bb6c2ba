"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from dirwatch.config import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    ConfigManager,
    DirwatchConfig,
    flatten_for_env,
    parse_env_overrides,
    resolve_with_precedence,
)


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager()


def test_default_path_expands_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure the default configuration path lives under the home directory."""
    manager = _fresh_manager(tmp_path, monkeypatch)

    assert manager.config_path == DEFAULT_CONFIG_PATH.expanduser()
    assert manager.config_path.is_relative_to(tmp_path)


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Ensure a default configuration file is created on first use."""
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path.exists()
    text = path.read_text(encoding="utf-8")
    assert "dirwatch configuration file" in text
    assert "Last updated:" in text

    config = manager.load(include_env=False)
    assert config == DirwatchConfig()
    assert config.watch.suppress_initial_events is True


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Ensure CLI overrides beat environment values, which beat the file."""
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.save({"watch": {"interval_ms": 1000, "recursive": True}})

    env = {"DIRWATCH__WATCH__INTERVAL_MS": "250", "DIRWATCH__LOGGING__LEVEL": "DEBUG"}
    cli = {"watch.interval_ms": 50}

    config = manager.load(cli_overrides=cli, env_overrides=env)

    assert config.watch.recursive is True
    assert config.logging.level == "DEBUG"
    # CLI overrides take precedence over environment
    assert config.watch.interval_ms == 50


def test_environment_values_parse_as_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure environment values arrive as typed YAML scalars."""
    manager = _fresh_manager(tmp_path, monkeypatch)

    config = manager.load(env_overrides={"DIRWATCH__WATCH__SUPPRESS_INITIAL_EVENTS": "false"})

    assert config.watch.suppress_initial_events is False


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure a non-mapping document is reported as a ConfigError."""
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_unknown_keys_are_rejected() -> None:
    """Ensure unknown settings are rejected."""
    with pytest.raises(ConfigError):
        resolve_with_precedence(defaults=DirwatchConfig(), file_overrides={"watch": {"speed": 3}})


def test_negative_interval_is_rejected() -> None:
    """Ensure a negative polling interval fails validation."""
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=DirwatchConfig(), cli_overrides={"watch.interval_ms": -5}
        )


def test_flatten_for_env_renders_defaults() -> None:
    """Ensure defaults render as DIRWATCH__ variables with lowercase booleans."""
    flat = flatten_for_env(DirwatchConfig())

    assert flat["DIRWATCH__WATCH__INTERVAL_MS"] == "500"
    assert flat["DIRWATCH__WATCH__RECURSIVE"] == "false"
    assert flat["DIRWATCH__LOGGING__LEVEL"] == "WARNING"


def test_parse_env_overrides_ignores_foreign_variables() -> None:
    """Ensure only prefixed variables become typed dotted overrides."""
    overrides = parse_env_overrides(
        {
            "DIRWATCH__WATCH__INTERVAL_MS": "250",
            "DIRWATCH__WATCH__RECURSIVE": "yes",
            "DIRWATCH__": "ignored",
            "HOME": "/home/someone",
        }
    )

    assert overrides == {"watch.interval_ms": 250, "watch.recursive": True}


def test_dotted_and_nested_overrides_merge() -> None:
    """Ensure dotted keys and nested mappings in one layer combine."""
    config = resolve_with_precedence(
        defaults=DirwatchConfig(),
        file_overrides={"watch": {"recursive": True}, "watch.interval_ms": 75},
    )

    assert config.watch.recursive is True
    assert config.watch.interval_ms == 75


def test_mapping_over_scalar_is_rejected() -> None:
    """Ensure a nested override cannot replace a scalar setting."""
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=DirwatchConfig(), cli_overrides={"logging.level.name": "DEBUG"}
        )
