from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from jsonschema import ValidationError, validate

from .algebra import PathAlgebra, get_algebra
from .errors import ConfigError
from .schemas import CONFIG_SCHEMA

ENV_CONFIG = "RATE_PATH_CONFIG"
ENV_LOG_LEVEL = "RATE_PATH_LOG_LEVEL"


@dataclass
class ServiceConfig:
    algebra: str = "max_product"
    link_venues: bool = True
    vectorize: Optional[bool] = None
    strict: bool = False
    rate_format: str = "{}"
    missing_rate_text: str = "NONE"
    log_level: str = "INFO"

    def path_algebra(self) -> PathAlgebra:
        return get_algebra(self.algebra)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_yaml(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"File {path.name} is not valid YAML: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"File {path.name} must contain a YAML object (mapping).")
    return data


def validate_config(data: Mapping[str, Any]) -> Dict[str, Any]:
    try:
        validate(instance=dict(data), schema=CONFIG_SCHEMA)
    except ValidationError as e:
        raise ConfigError(f"Schema error in configuration: {e.message}") from e
    fmt = data.get("rate_format")
    if fmt is not None:
        try:
            fmt.format(1.0)
        except (AttributeError, IndexError, KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"rate_format {fmt!r} cannot format a rate: {e}") from e
    return dict(data)


def build_config(
    path: Optional[Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ServiceConfig:
    """Defaults < config file (explicit path or $RATE_PATH_CONFIG) < env < overrides."""
    env = os.environ if environ is None else environ
    merged: Dict[str, Any] = {}

    if path is None and env.get(ENV_CONFIG):
        path = Path(env[ENV_CONFIG])
    if path is not None:
        if not path.exists():
            raise ConfigError(f"Config file {path} not found")
        merged.update(load_yaml(path))

    if env.get(ENV_LOG_LEVEL):
        merged["log_level"] = env[ENV_LOG_LEVEL].upper()

    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key] = value

    validate_config(merged)
    return ServiceConfig(**merged)
