"""Loading of indicator configuration files.

Example config file (indicators.yaml):

    rsi:
      enabled: true
      period: 14
    macd:
      enabled: true
      fast_period: 12
      slow_period: 26
      signal_period: 9
    bollinger_bands:
      enabled: true
      period: 20
      standard_deviations: 2
    sma:
      enabled: true
      periods: [20, 50, 200]
    ema:
      enabled: false

Sections that are omitted keep their defaults and stay enabled. camelCase keys
(``fastPeriod``, ``standardDeviations``) are accepted as well.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Mapping

import pydantic
import yaml

from ta_engine.exceptions import ConfigError
from ta_engine.types import (BollingerConfig, IndicatorConfig, IndicatorKind,
                             MACDConfig, MovingAverageConfig, RSIConfig)

# Section name -> (indicator kind, settings model, field name on IndicatorConfig)
SECTIONS: dict[str, tuple[IndicatorKind, type[pydantic.BaseModel], str]] = {
    "rsi": (IndicatorKind.RSI, RSIConfig, "rsi"),
    "macd": (IndicatorKind.MACD, MACDConfig, "macd"),
    "bollinger": (IndicatorKind.BOLLINGER, BollingerConfig, "bollinger"),
    "bollinger_bands": (IndicatorKind.BOLLINGER, BollingerConfig, "bollinger"),
    "sma": (IndicatorKind.SMA, MovingAverageConfig, "sma"),
    "ema": (IndicatorKind.EMA, MovingAverageConfig, "ema"),
}


def _snake_case(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _parse_section(
    name: str, raw: Any, model: type[pydantic.BaseModel]
) -> tuple[bool, dict[str, Any]]:
    """Split a config section into its enabled flag and model settings.

    :raises ConfigError: If the section is not a mapping or has unknown keys.
    """
    if raw is None:
        return True, {}
    if not isinstance(raw, Mapping):
        raise ConfigError(f"'{name}' must be a mapping")

    enabled = True
    settings: dict[str, Any] = {}
    for key, value in raw.items():
        field = _snake_case(str(key))
        if field == "enabled":
            if not isinstance(value, bool):
                raise ConfigError(f"'{name}.enabled' must be true or false")
            enabled = value
        elif field in model.model_fields:
            settings[field] = value
        else:
            raise ConfigError(
                f"Unknown option '{key}' in '{name}'. "
                f"Valid options: {sorted(['enabled', *model.model_fields])}"
            )
    return enabled, settings


def parse_indicator_config(raw_config: Mapping[str, Any] | None) -> IndicatorConfig:
    """Build an :class:`IndicatorConfig` from a plain mapping.

    :param raw_config: Mapping of section name to section settings.
    :returns: Validated configuration.
    :raises ConfigError: If a section or option is unknown or a value is invalid.
    """
    if raw_config is None:
        return IndicatorConfig()
    if not isinstance(raw_config, Mapping):
        raise ConfigError("Configuration must be a mapping")

    indicators = set(IndicatorKind)
    fields: dict[str, Any] = {}
    for name, raw_section in raw_config.items():
        key = _snake_case(str(name))
        if key not in SECTIONS:
            raise ConfigError(
                f"Unknown indicator '{name}'. Valid options: {sorted(SECTIONS)}"
            )
        kind, model, field = SECTIONS[key]
        enabled, settings = _parse_section(str(name), raw_section, model)
        if not enabled:
            indicators.discard(kind)
        if settings:
            try:
                fields[field] = model(**settings)
            except pydantic.ValidationError as e:
                raise ConfigError(f"Invalid settings for '{name}': {e}") from e

    return IndicatorConfig(indicators=frozenset(indicators), **fields)


def load_indicator_config(config_path: str | Path) -> IndicatorConfig:
    """Parse and validate an indicator configuration file.

    :param config_path: Path to YAML configuration file.
    :returns: Validated IndicatorConfig object.
    :raises ConfigError: If file cannot be read or config is invalid.
    """
    config_path = Path(config_path)

    try:
        with open(config_path) as f:
            raw_config = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {config_path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in configuration file: {e}") from e

    # An empty file means "all defaults"
    if raw_config is None:
        return IndicatorConfig()
    if not isinstance(raw_config, dict):
        raise ConfigError("Configuration must be a YAML mapping")

    return parse_indicator_config(raw_config)
