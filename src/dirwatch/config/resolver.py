"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict

from pydantic import ValidationError

from .exceptions import ConfigError
from .models import DirwatchConfig

ENV_PREFIX = "DIRWATCH__"


def resolve_with_precedence(
    *,
    defaults: DirwatchConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> DirwatchConfig:
    """Layer overrides onto ``defaults``; later sources win.

    Keys may be nested mappings or dotted paths such as ``watch.interval_ms``.

    Raises:
        ConfigError: If an override is malformed or the result fails validation.
    """
    merged = defaults.model_dump(mode="python")
    layers = (("file", file_overrides), ("environment", env_overrides), ("cli", cli_overrides))
    for source_name, layer in layers:
        if layer is not None:
            _merge_into(merged, _expand(layer, source_name), source_name)

    try:
        return DirwatchConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def flatten_for_env(config: DirwatchConfig) -> Dict[str, str]:
    """Render every setting as a `DIRWATCH__SECTION__KEY` environment variable."""
    flat: Dict[str, str] = {}
    for section, values in config.model_dump(mode="python").items():
        for key, value in values.items():
            if isinstance(value, bool):
                rendered = str(value).lower()
            else:
                rendered = str(value)
            flat[f"{ENV_PREFIX}{section.upper()}__{key.upper()}"] = rendered
    return flat


def _expand(layer: Mapping[str, Any], source_name: str) -> dict[str, Any]:
    """Turn dotted keys into nested dictionaries."""
    if not isinstance(layer, Mapping):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in layer.items():
        if not isinstance(key, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        if isinstance(value, Mapping):
            value = _expand(value, source_name)
        *parents, leaf = key.split(".")
        for segment in reversed(parents):
            value = {leaf: value}
            leaf = segment
        _merge_into(expanded, {leaf: value}, source_name)
    return expanded


def _merge_into(target: dict[str, Any], overrides: Mapping[str, Any], source_name: str) -> None:
    for key, value in overrides.items():
        current = target.get(key)
        if isinstance(value, Mapping):
            if current is None:
                current = target[key] = {}
            elif not isinstance(current, dict):
                raise ConfigError(
                    f"{source_name.capitalize()} override for {key} conflicts with existing value."
                )
            _merge_into(current, value, source_name)
        else:
            target[key] = value


__all__ = ["ENV_PREFIX", "resolve_with_precedence", "flatten_for_env"]
