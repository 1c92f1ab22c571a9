"""Layered YAML configuration for ledger runs."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Sequence

import yaml
from pydantic import BaseModel, Field

from .player import SettlementMode

ENVIRONMENT_VARIABLE = "WAGERLEDGER_ENV"
EXTRA_CONFIG_VARIABLE = "WAGERLEDGER_CONFIG"
ENV_OVERRIDE_PREFIX = "WAGERLEDGER__"
DEFAULT_CONFIG_PATH = Path("config/wagerledger.yaml")


class InputsConfig(BaseModel):
    """Locations of the rate and transaction streams."""

    match_data: str = "match_data.txt"
    player_data: str = "player_data.txt"


class OutputConfig(BaseModel):
    """Where rendered reports and CSV tables are written."""

    path: str | None = "result.txt"
    tables_dir: str | None = None


class LedgerConfig(BaseModel):
    """Settlement behaviour of the ledger engine."""

    settlement: SettlementMode = SettlementMode.NET


class RunConfig(BaseModel):
    """Aggregate configuration for a single ledger run."""

    environment: str = "default"
    inputs: InputsConfig = Field(default_factory=InputsConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)


class ConfigurationError(ValueError):
    """Raised when run configuration validation fails."""


_ENV_TOKEN = re.compile(r"\$\{([^}]+)\}")
_NULL_OVERRIDES = frozenset({"null", "none", "~"})


def _read_layer(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise TypeError(f"Configuration at {path} must be a mapping")
    return data


def _overlay(base: Mapping[str, Any], layer: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in layer.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            value = _overlay(current, value)
        merged[key] = value
    return merged


def _expand_tokens(value: Any) -> Any:
    """Replace ``${VAR}`` in string leaves with the environment value."""

    if isinstance(value, Mapping):
        return {key: _expand_tokens(item) for key, item in value.items()}
    if isinstance(value, str):
        return _ENV_TOKEN.sub(lambda match: os.getenv(match.group(1), ""), value)
    return value


def _env_override_layer(environ: Mapping[str, str]) -> Dict[str, Any]:
    """Build a layer from ``WAGERLEDGER__section__key`` variables.

    Every run setting is a string or null, so values are kept verbatim except
    ``null``/``none``/``~`` which clear the setting.
    """

    layer: Dict[str, Any] = {}
    for name, raw in environ.items():
        if not name.startswith(ENV_OVERRIDE_PREFIX):
            continue
        path = [
            part.lower().replace("-", "_")
            for part in name[len(ENV_OVERRIDE_PREFIX) :].split("__")
            if part
        ]
        if not path:
            continue
        section = layer
        for part in path[:-1]:
            nested = section.get(part)
            if not isinstance(nested, dict):
                nested = section[part] = {}
            section = nested
        section[path[-1]] = None if raw.strip().lower() in _NULL_OVERRIDES else raw
    return layer


def load_run_config(
    *,
    base_path: str | os.PathLike[str] | None = None,
    environment: str | None = None,
    extra_paths: Sequence[str | os.PathLike[str]] | None = None,
) -> RunConfig:
    """Load layered configuration for a ledger run.

    The loader merges ``config/wagerledger.yaml`` with an optional
    environment-specific layer (``config/wagerledger.<env>.yaml``), additional
    override files, and environment variable overrides that use the
    ``WAGERLEDGER__`` prefix.  An explicit ``base_path`` must exist; the
    default path is optional and built-in defaults apply when it is absent.
    """

    config_path = Path(base_path) if base_path is not None else DEFAULT_CONFIG_PATH
    if base_path is None and not config_path.exists():
        data: Dict[str, Any] = {}
    else:
        data = _read_layer(config_path)

    env_name = environment or os.getenv(ENVIRONMENT_VARIABLE) or data.get("environment")
    if isinstance(env_name, str):
        env_path = config_path.with_name(f"{config_path.stem}.{env_name}{config_path.suffix}")
        if env_path.exists():
            data = _overlay(data, _read_layer(env_path))
        data["environment"] = env_name

    override_sources = [Path(path) for path in extra_paths or ()]
    extra_variable = os.getenv(EXTRA_CONFIG_VARIABLE)
    if extra_variable:
        override_sources.extend(
            Path(token) for token in extra_variable.split(os.pathsep) if token
        )
    for override in override_sources:
        if override.exists():
            data = _overlay(data, _read_layer(override))

    data = _overlay(data, _env_override_layer(os.environ))
    return RunConfig.model_validate(_expand_tokens(data))


def validate_run_config(config: RunConfig) -> list[str]:
    """Validate a :class:`RunConfig` instance.

    Returns:
        A list of warning messages. :class:`ConfigurationError` is raised if
        any fatal issues are detected.
    """

    errors: list[str] = []
    warnings: list[str] = []

    inputs = config.inputs
    if not inputs.match_data.strip():
        errors.append("inputs.match_data cannot be empty")
    if not inputs.player_data.strip():
        errors.append("inputs.player_data cannot be empty")
    if (
        inputs.match_data.strip()
        and Path(inputs.match_data) == Path(inputs.player_data)
    ):
        errors.append("inputs.match_data and inputs.player_data must be different files")

    output = config.output
    if output.path is not None and not output.path.strip():
        errors.append("output.path cannot be empty; use null to print to stdout")
    if output.tables_dir is not None and not output.tables_dir.strip():
        errors.append("output.tables_dir cannot be empty")
    if output.path is None and output.tables_dir is None:
        warnings.append("no output.path configured; the report will be printed to stdout")

    if config.ledger.settlement is SettlementMode.GROSS:
        warnings.append(
            "ledger.settlement is 'gross'; winning bets debit the stake "
            "before crediting the payout"
        )

    if errors:
        bullet_list = "\n".join(f"- {message}" for message in errors)
        raise ConfigurationError(f"Configuration validation failed:\n{bullet_list}")

    return warnings


__all__ = [
    "ConfigurationError",
    "InputsConfig",
    "LedgerConfig",
    "OutputConfig",
    "RunConfig",
    "load_run_config",
    "validate_run_config",
]
