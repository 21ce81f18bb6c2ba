"""Configuration management for dirwatch."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import DirwatchConfig
from .resolver import ENV_PREFIX, flatten_for_env, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.dirwatch/config.yaml")
_HEADER = "# dirwatch configuration file; change values with `dirwatch config set`.\n"


def parse_env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``DIRWATCH__SECTION__KEY`` variables as dotted overrides.

    Values are parsed as YAML literals so ``false`` or ``250`` arrive typed.
    """
    overrides: dict[str, Any] = {}
    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        segments = [part.lower() for part in name[len(ENV_PREFIX) :].split("__") if part]
        if not segments:
            continue
        try:
            overrides[".".join(segments)] = yaml.safe_load(raw)
        except yaml.YAMLError:
            overrides[".".join(segments)] = raw
    return overrides


class ConfigManager:
    """Read, validate, and update the YAML file holding watcher defaults."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = os.environ if env is None else env

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> DirwatchConfig:
        """Return the effective configuration.

        Args:
            cli_overrides: Dotted-key overrides supplied on the command line.
            include_env: Whether ``DIRWATCH__`` environment variables apply.
            ensure_file: Create the file with defaults when it is missing.
            env_overrides: Explicit environment mapping used instead of ``os.environ``.

        Returns:
            DirwatchConfig: Validated configuration.

        Raises:
            ConfigError: If the file cannot be parsed or values fail validation.
        """
        if ensure_file:
            self.ensure_exists()
        environment = None
        if include_env:
            source = self._env if env_overrides is None else env_overrides
            environment = parse_env_overrides(source)
        return resolve_with_precedence(
            defaults=DirwatchConfig(),
            file_overrides=self.load_file_overrides(),
            env_overrides=environment or None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the raw mapping stored on disk, or an empty one."""
        if not self._config_path.exists():
            return {}
        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {self._config_path}: {exc}") from exc
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ConfigError(f"{self._config_path} must contain a mapping at the top level.")
        return raw

    def save(self, config: DirwatchConfig | Mapping[str, Any]) -> None:
        """Write ``config`` to disk below a generated header."""
        if isinstance(config, DirwatchConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config_path.write_text(
            f"{_HEADER}# Last updated: {stamp}\n{yaml.safe_dump(data, sort_keys=False)}",
            encoding="utf-8",
        )

    def ensure_exists(self) -> Path:
        """Write the default configuration unless a file is already present."""
        if not self._config_path.exists():
            self.save(DirwatchConfig())
        return self._config_path

    def read_text(self) -> str:
        """Return the current configuration file contents."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "DirwatchConfig",
    "parse_env_overrides",
    "resolve_with_precedence",
    "flatten_for_env",
    "ConfigError",
]
