"""Simulator settings: defaults < YAML (``simulator:`` section) < environment < CLI."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from honeyshare.shared.config_loader import load_section

log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config") / "simulator.yaml"


class ConfigError(ValueError):
    """Raised when a setting is missing, unparsable or out of range."""


class SimulatorSettings(BaseSettings):
    """Runtime tunables of the simulator.

    Instantiating the class reads the process environment; the YAML and
    command-line layers are merged by :func:`load_settings`.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        env_ignore_empty=True,
    )

    events_per_second: float = Field(2.0, gt=0, allow_inf_nan=False,
                                     validation_alias="LOG_EVENTS_PER_SECOND")
    retention_days: float = Field(30.0, gt=0, allow_inf_nan=False,
                                  validation_alias="LOG_RETENTION_DAYS")
    database_url: str = Field("sqlite:///data/honeyshare.db", min_length=1,
                              validation_alias="DATABASE_URL")
    seed_on_start: bool = Field(False, validation_alias="SEED")
    seed_users: int = Field(50, ge=0, validation_alias="SEED_USERS")
    seed_files: int = Field(200, ge=0, validation_alias="SEED_FILES")


# setting name -> environment variable
ENV_VARS: dict[str, str] = {
    name: str(field.validation_alias) for name, field in SimulatorSettings.model_fields.items()
}

# lowercased field name or variable -> environment variable
_ENV_NAMES: dict[str, str] = {
    **{var.lower(): var for var in ENV_VARS.values()},
    **{name: var for name, var in ENV_VARS.items()},
}


def _describe(exc: ValidationError, origin: str) -> str:
    parts = []
    for err in exc.errors():
        key = ".".join(str(p) for p in err["loc"]) or "settings"
        if origin == "environment":
            key = "$" + _ENV_NAMES.get(key.lower(), key)
        parts.append(f"{key}: {err['msg']} (got {err.get('input')!r})")
    return f"{origin}: " + "; ".join(parts)


def load_settings(
    config_path: str | Path | None = DEFAULT_CONFIG_PATH,
    overrides: Mapping[str, Any] | None = None,
) -> SimulatorSettings:
    """Merge every configuration layer and validate the result.

    ``overrides`` holds CLI values; ``None`` entries are ignored so argparse
    defaults of ``None`` fall through to the lower layers.
    """
    known = set(SimulatorSettings.model_fields)

    try:
        yaml_cfg = load_section(config_path, "simulator")
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc

    values: dict[str, Any] = {}
    for key, raw in yaml_cfg.items():
        if key not in known:
            log.warning("Unknown simulator setting '%s' in %s, ignoring", key, config_path)
            continue
        values[key] = raw

    try:
        from_env = SimulatorSettings()
    except ValidationError as exc:
        raise ConfigError(_describe(exc, "environment")) from exc
    values.update(from_env.model_dump(include=from_env.model_fields_set))

    for name, raw in (overrides or {}).items():
        if raw is None:
            continue
        if name not in known:
            raise ConfigError(f"unknown setting override: {name}")
        values[name] = raw

    try:
        settings = SimulatorSettings.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(_describe(exc, f"{config_path} / command line")) from exc
    log.debug("Settings resolved: %s", settings)
    return settings
