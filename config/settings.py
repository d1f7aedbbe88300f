"""
config/settings.py — Configuration contract for the OpenShift monitoring checks.

Uses pydantic-settings to validate and type-check the node configuration.
The on-disk format is the YAML file the checks have always shipped with
(nested keys like `node.type` or `router.ips`); keys are flattened to
dotted form and mapped onto the upper-case field names below.

Two usage modes:
  Production / CLI:
      cfg = load_settings()                 # reads ./config.yml + os.environ
      cfg = load_settings("/etc/mon.yml")   # explicit config file

  Tests (isolated — no file, no os.environ bleed):
      cfg = Settings(NODE_TYPE="master", ETCD_IPS="10.0.0.1", ...)
"""
from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

DEFAULT_CONFIG_FILE = "config.yml"

# Keys whose historical spelling does not map cleanly onto a field name
_LEGACY_KEYS = {
    "hawcularIP": "HAWKULAR_IP",
    "hawkularIP": "HAWKULAR_IP",
}
_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class ConfigurationError(Exception):
    """Fatal startup problem: the run cannot build a meaningful check plan."""


class Settings(BaseSettings):
    # Settings() reads purely from kwargs. load_settings() is the explicit
    # production entry point that merges the YAML file and os.environ.
    model_config = SettingsConfigDict(
        env_file=None,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings,)

    # -------------------------------------------------------------------------
    # Node
    # -------------------------------------------------------------------------
    NODE_TYPE: Literal["worker", "master", "storage"]

    # -------------------------------------------------------------------------
    # Cluster service addresses (comma-separated lists)
    # -------------------------------------------------------------------------
    ETCD_IPS: Optional[str] = None
    ROUTER_IPS: Optional[str] = None
    REGISTRY_IP: Optional[str] = None
    ETCD_CERT_DIR: str = "/etc/origin/master"
    MASTER_API_URL: str = "https://localhost:8443/api"

    # -------------------------------------------------------------------------
    # Optional integrations (probe skipped when unset)
    # -------------------------------------------------------------------------
    EXTERNAL_SYSTEM_URL: Optional[str] = None
    HAWKULAR_IP: Optional[str] = None
    HTTP_SERVICE_URL: Optional[str] = None

    # -------------------------------------------------------------------------
    # Thresholds and runtime
    # -------------------------------------------------------------------------
    PROJECTS_WITHOUT_LIMITS: int = 0
    PROBE_TIMEOUT_SECONDS: int = 10
    LOGGING_LEVEL: Literal["debug", "info", "warning", "error"] = "info"

    # -------------------------------------------------------------------------
    # Convenience properties
    # -------------------------------------------------------------------------

    @property
    def etcd_addresses(self) -> list[str]:
        return _split_addresses(self.ETCD_IPS)

    @property
    def router_addresses(self) -> list[str]:
        return _split_addresses(self.ROUTER_IPS)

    @property
    def role(self) -> str:
        return self.NODE_TYPE

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------

    @field_validator("NODE_TYPE", "LOGGING_LEVEL", mode="before")
    @classmethod
    def normalise_choice(cls, v: str) -> str:
        if isinstance(v, str):
            v = v.strip().lower()
        # Older config files call the worker role "node"
        return "worker" if v == "node" else v

    @field_validator(
        "ETCD_IPS",
        "ROUTER_IPS",
        "REGISTRY_IP",
        "EXTERNAL_SYSTEM_URL",
        "HAWKULAR_IP",
        "HTTP_SERVICE_URL",
        mode="before",
    )
    @classmethod
    def blank_is_unset(cls, v: object) -> object:
        if isinstance(v, (list, tuple)):
            v = ",".join(str(item) for item in v)
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("PROJECTS_WITHOUT_LIMITS")
    @classmethod
    def validate_projects_without_limits(cls, v: int) -> int:
        if v < 0:
            raise ValueError("PROJECTS_WITHOUT_LIMITS must be >= 0")
        return v

    @field_validator("PROBE_TIMEOUT_SECONDS")
    @classmethod
    def validate_probe_timeout(cls, v: int) -> int:
        if v < 1:
            raise ValueError("PROBE_TIMEOUT_SECONDS must be >= 1")
        return v


def _split_addresses(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def field_name(dotted_key: str) -> str:
    """Map a dotted config key onto a Settings field name.

    `node.type` → `NODE_TYPE`, `externalSystemUrl` → `EXTERNAL_SYSTEM_URL`.
    """
    if dotted_key in _LEGACY_KEYS:
        return _LEGACY_KEYS[dotted_key]
    parts = [_CAMEL_RE.sub("_", part) for part in dotted_key.split(".")]
    return "_".join(parts).upper()


def flatten(payload: dict, prefix: str = "") -> dict[str, object]:
    """Flatten a nested mapping into dotted keys."""
    flat: dict[str, object] = {}
    for key, value in payload.items():
        dotted = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            flat.update(flatten(value, dotted))
        else:
            flat[dotted] = value
    return flat


def load_config_yaml(path: Path) -> dict:
    try:
        with open(path, encoding="utf-8") as handle:
            payload = yaml.safe_load(handle) or {}
    except OSError as exc:
        raise ConfigurationError(f"Not able to read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Config file {path} is not valid YAML: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Config file {path} must contain a YAML mapping")
    return payload


def load_settings(config_file: str | os.PathLike[str] = DEFAULT_CONFIG_FILE) -> Settings:
    """Load and validate settings from a YAML config file + os.environ.

    os.environ takes precedence over file values; only known Settings field
    names are picked up from the environment.

    Raises:
        ConfigurationError: if the file cannot be read or parsed, or if any
            value fails validation.
    """
    payload = load_config_yaml(Path(config_file))
    file_vals = {field_name(k): v for k, v in flatten(payload).items()}
    merged = {**file_vals, **os.environ}  # os.environ wins
    known = {k: v for k, v in merged.items() if k in Settings.model_fields}
    try:
        return Settings(**known)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration in {config_file}:\n{exc}") from exc
