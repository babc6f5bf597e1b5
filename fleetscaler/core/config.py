"""Configuration helpers for fleetscaler.

This module loads YAML configuration files describing the CI API, the AWS
region, the fleet tag prefix and the matching strategy. Configuration
precedence:

1. An explicit path passed to :func:`load_scaler_config` (``--config``).
2. Environment variable ``FLEETSCALER_CONFIG`` pointing to a YAML file.
3. ``fleetscaler.yaml`` in the current working directory.
4. Built-in defaults bundled with the package (``config/default.yaml``).
"""

from __future__ import annotations

import importlib
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from fleetscaler.config.policy import resolve_setting
from fleetscaler.core.errors import ConfigurationError
from fleetscaler.core.matching.strategy import (
    available_strategies as _available_strategies,
    load_entry_point_strategies,
    register_strategy,
    strategy_factory,
    unregister_strategy,
)
from fleetscaler.core.registry import DEFAULT_TAG_PREFIX

__all__ = [
    "AwsSettings",
    "BuildkiteSettings",
    "MatchingConfig",
    "ScalerConfig",
    "StrategyConfigEntry",
    "get_scaler_config",
    "load_scaler_config",
    "reset_scaler_config",
]


_ENV_VAR = "FLEETSCALER_CONFIG"
_CWD_FILENAME = "fleetscaler.yaml"


@dataclass
class BuildkiteSettings:
    api_url: str = "https://api.buildkite.com/v2"
    organization: Optional[str] = "env:BUILDKITE_ORG"
    token: Optional[str] = "env:BUILDKITE_TOKEN"
    timeout: float = 10.0
    per_page: int = 100

    def resolve_credentials(self) -> tuple[str, str]:
        """Return ``(organization, token)`` or raise ConfigurationError."""
        organization, org_hint = resolve_setting(self.organization)
        if not organization:
            raise ConfigurationError(f"Buildkite organization is not configured ({org_hint or 'missing'})")
        token, token_hint = resolve_setting(self.token)
        if not token:
            raise ConfigurationError(f"Buildkite API token is not configured ({token_hint or 'missing'})")
        return organization, token


@dataclass
class AwsSettings:
    region: Optional[str] = None


@dataclass
class StrategyConfigEntry:
    name: str
    import_path: Optional[str] = None
    enabled: bool = True


@dataclass
class MatchingConfig:
    default_strategy: str = "first_fit"
    strategies: List[StrategyConfigEntry] = field(default_factory=list)


@dataclass
class ScalerConfig:
    buildkite: BuildkiteSettings = field(default_factory=BuildkiteSettings)
    aws: AwsSettings = field(default_factory=AwsSettings)
    tag_prefix: str = DEFAULT_TAG_PREFIX
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    log_level: str = "INFO"
    source: Optional[str] = None


_scaler_config: Optional[ScalerConfig] = None


def _resolve_config_path(explicit: Optional[os.PathLike | str] = None) -> Optional[Path]:
    if explicit:
        candidate = Path(explicit).expanduser()
        if not candidate.is_file():
            raise ConfigurationError(f"Config file '{candidate}' does not exist")
        return candidate

    env_path = os.environ.get(_ENV_VAR)
    if env_path:
        candidate = Path(env_path).expanduser()
        if candidate.is_file():
            return candidate

    cwd_file = Path.cwd() / _CWD_FILENAME
    if cwd_file.is_file():
        return cwd_file
    return None


def _load_yaml_dict(path: Optional[Path]) -> Dict[str, object]:
    try:
        if path is not None:
            with path.open("r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        else:
            # Fallback to bundled default configuration
            from importlib import resources

            text = resources.files("fleetscaler.config").joinpath("default.yaml").read_text(encoding="utf-8")
            data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path or 'bundled defaults'}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError("Top-level configuration must be a mapping")
    return data


def _section(data: Dict[str, object], name: str) -> Dict[str, object]:
    node = data.get(name) or {}
    if not isinstance(node, dict):
        raise ConfigurationError(f"'{name}' section must be a mapping")
    return node


def _coerce_number(node: Dict[str, object], key: str, default, kind):
    raw = node.get(key, default)
    if raw is None:
        return default
    try:
        value = kind(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"'{key}' must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"'{key}' must be positive, got {value}")
    return value


def _coerce_strategy_entry(raw: Dict[str, object]) -> StrategyConfigEntry:
    name = str(raw.get("name", "")).strip()
    if not name:
        raise ConfigurationError("Strategy entry requires a non-empty 'name'")
    import_path = raw.get("import")
    if import_path is not None:
        import_path = str(import_path).strip()
    enabled = bool(raw.get("enabled", True))
    return StrategyConfigEntry(name=name, import_path=import_path, enabled=enabled)


def _build_matching_config(data: Dict[str, object]) -> MatchingConfig:
    node = _section(data, "matching")

    default_strategy = str(node.get("default_strategy", "first_fit")).strip() or "first_fit"
    raw_entries = node.get("strategies", [])
    entries: List[StrategyConfigEntry] = []

    if isinstance(raw_entries, list):
        for item in raw_entries:
            if not isinstance(item, dict):
                raise ConfigurationError("Each strategy definition must be a mapping")
            entries.append(_coerce_strategy_entry(item))
    elif raw_entries:
        raise ConfigurationError("'strategies' must be a list of mappings")

    return MatchingConfig(default_strategy=default_strategy, strategies=entries)


def _build_scaler_config(data: Dict[str, object], source: Optional[str]) -> ScalerConfig:
    bk = _section(data, "buildkite")
    defaults = BuildkiteSettings()
    buildkite = BuildkiteSettings(
        api_url=str(bk.get("api_url") or defaults.api_url).rstrip("/"),
        organization=bk.get("organization", defaults.organization),
        token=bk.get("token", defaults.token),
        timeout=_coerce_number(bk, "timeout", defaults.timeout, float),
        per_page=_coerce_number(bk, "per_page", defaults.per_page, int),
    )

    aws_node = _section(data, "aws")
    region = aws_node.get("region")
    aws = AwsSettings(region=str(region).strip() if region else None)

    tags = _section(data, "tags")
    tag_prefix = str(tags.get("prefix", DEFAULT_TAG_PREFIX))
    if not tag_prefix.strip():
        raise ConfigurationError("'tags.prefix' must be a non-empty string")

    log_node = _section(data, "logging")
    log_level = str(log_node.get("level", "INFO")).strip().upper() or "INFO"

    return ScalerConfig(
        buildkite=buildkite,
        aws=aws,
        tag_prefix=tag_prefix,
        matching=_build_matching_config(data),
        log_level=log_level,
        source=source,
    )


def _apply_matching_config(config: MatchingConfig) -> None:
    load_entry_point_strategies()
    for entry in config.strategies:
        if not entry.enabled:
            unregister_strategy(entry.name)
            continue
        if entry.import_path:
            module_name, sep, attr = entry.import_path.partition(":")
            if not sep:
                raise ConfigurationError(
                    f"Invalid import path '{entry.import_path}'. Expected format 'module:attr'."
                )
            try:
                module = importlib.import_module(module_name)
                obj = getattr(module, attr)
                factory = strategy_factory(obj)
            except (ImportError, AttributeError, TypeError) as exc:
                raise ConfigurationError(f"Cannot load strategy '{entry.name}': {exc}") from exc
            register_strategy(entry.name, factory, replace=True)

    # Validate default strategy is available
    if config.default_strategy.lower() not in _available_strategies():
        raise ConfigurationError(
            f"Default strategy '{config.default_strategy}' is not registered. "
            f"Available: {', '.join(_available_strategies())}"
        )


def load_scaler_config(path: Optional[os.PathLike | str] = None) -> ScalerConfig:
    """Load, validate and apply configuration without touching the cache."""
    resolved = _resolve_config_path(path)
    raw = _load_yaml_dict(resolved)
    config = _build_scaler_config(raw, str(resolved) if resolved else None)
    _apply_matching_config(config.matching)
    return config


def get_scaler_config(path: Optional[os.PathLike | str] = None) -> ScalerConfig:
    global _scaler_config
    if _scaler_config is None:
        _scaler_config = load_scaler_config(path)
    return _scaler_config


def reset_scaler_config() -> None:
    """Reset cached scaler configuration (intended for tests)."""
    global _scaler_config
    _scaler_config = None
