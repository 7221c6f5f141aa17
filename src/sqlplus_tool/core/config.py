"""Configuration management for SQL*Plus Tool.

Handles TOML config files, environment variables, named profiles,
and configuration precedence resolution.

Precedence order (highest to lowest):
1. CLI flags (--connect, --executable, etc.)
2. Environment variables (SQLPLUS_TOOL_CONNECT, SQLPLUS_TOOL_EXECUTABLE,
   SQLPLUS_TOOL_TEMP_DIR)
3. Named profile (--profile or SQLPLUS_TOOL_PROFILE env var)
4. Config file defaults
5. Built-in defaults
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from sqlplus_tool.core.exceptions import ConfigError
from sqlplus_tool.core.runner import DEFAULT_EXECUTABLE

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "sqlplus-tool" / "config.toml"

_ENV_VARS: dict[str, str] = {
    "SQLPLUS_TOOL_CONNECT": "connect",
    "SQLPLUS_TOOL_EXECUTABLE": "executable",
    "SQLPLUS_TOOL_TEMP_DIR": "temp_dir",
}

_VALID_ROLES = frozenset(
    {"sysdba", "sysoper", "sysasm", "sysbackup", "sysdg", "syskm"}
)


def _validate_role(v: str | None) -> str | None:
    if v is None:
        return v
    role = v.lower()
    if role not in _VALID_ROLES:
        msg = f"Invalid connect_as: '{v}'. Must be one of: {', '.join(sorted(_VALID_ROLES))}"
        raise ValueError(msg)
    return role


class ConnectOptions(BaseModel):
    """Per-connection options.

    log_level is the statement log verbosity: 0 logs statements at debug
    level only, 1 logs them at info, 2 also logs decoded rows.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    temp_dir: Path | None = None
    logger: Any = None
    log_level: int = 0
    connect_as: str | None = None
    raise_on_error: bool = False
    executable: str = DEFAULT_EXECUTABLE
    timeout: float | None = None

    @field_validator("connect_as")
    @classmethod
    def validate_connect_as(cls, v: str | None) -> str | None:
        return _validate_role(v)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: int) -> int:
        if v < 0:
            msg = f"Invalid log_level: {v}. Must be >= 0"
            raise ValueError(msg)
        return v


class ConnectProfile(BaseModel):
    connect: str | None = None
    connect_as: str | None = None
    executable: str | None = None
    temp_dir: Path | None = None

    @field_validator("connect_as")
    @classmethod
    def validate_connect_as(cls, v: str | None) -> str | None:
        return _validate_role(v)


class AppConfig(BaseModel):
    executable: str = DEFAULT_EXECUTABLE
    temp_dir: Path | None = None
    default_timeout: float | None = None
    default_format: str = "table"
    default_profile: str | None = None
    profiles: dict[str, ConnectProfile] = {}


class ResolvedConfig(BaseModel):
    connect: str | None = None
    connect_as: str | None = None
    executable: str = DEFAULT_EXECUTABLE
    temp_dir: Path | None = None
    timeout: float | None = None
    default_format: str = "table"
    active_profile: str | None = None
    sources: dict[str, str] = {}

    def connect_options(self, **overrides: Any) -> ConnectOptions:
        values: dict[str, Any] = {
            "temp_dir": self.temp_dir,
            "connect_as": self.connect_as,
            "executable": self.executable,
            "timeout": self.timeout,
        }
        values.update(overrides)
        return ConnectOptions(**values)


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file.

    Returns default AppConfig if file doesn't exist.
    Raises ConfigError on malformed TOML or invalid config.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return AppConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Malformed TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return AppConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid configuration in {config_path}: {e}"
        raise ConfigError(msg) from e


def resolve_config(
    config: AppConfig,
    profile_name: str | None = None,
    **cli_overrides: Any,
) -> ResolvedConfig:
    """Resolve configuration using precedence chain.

    CLI > env > profile > config defaults > built-in defaults.
    """
    sources: dict[str, str] = {}
    resolved: dict[str, Any] = {
        "connect": None,
        "connect_as": None,
        "executable": DEFAULT_EXECUTABLE,
        "temp_dir": None,
        "timeout": None,
        "default_format": "table",
    }
    for key in resolved:
        sources[key] = "default"

    # Layer 2: Config file global defaults
    for key, default in (
        ("executable", DEFAULT_EXECUTABLE),
        ("temp_dir", None),
        ("default_format", "table"),
    ):
        value = getattr(config, key)
        if value != default:
            resolved[key] = value
            sources[key] = "config"
    if config.default_timeout is not None:
        resolved["timeout"] = config.default_timeout
        sources["timeout"] = "config"

    # Layer 3: Named profile
    effective_profile = profile_name
    if not effective_profile:
        effective_profile = os.environ.get("SQLPLUS_TOOL_PROFILE")
    if not effective_profile:
        effective_profile = config.default_profile

    if effective_profile:
        if effective_profile not in config.profiles:
            available = (
                ", ".join(sorted(config.profiles.keys())) if config.profiles else "none"
            )
            msg = f"Unknown profile: '{effective_profile}'. Available profiles: {available}"
            raise ConfigError(msg)
        profile = config.profiles[effective_profile]
        for key in profile.model_fields_set:
            value = getattr(profile, key)
            if key in resolved and value is not None:
                resolved[key] = value
                sources[key] = f"profile: {effective_profile}"

    # Layer 4: Environment variables
    for env_var, field_name in _ENV_VARS.items():
        value = os.environ.get(env_var)
        if value:
            resolved[field_name] = value
            sources[field_name] = f"env: {env_var}"

    # Layer 5: CLI flags (highest priority)
    cli_to_field = {
        "connect": "connect",
        "connect_as": "connect_as",
        "executable": "executable",
        "temp_dir": "temp_dir",
        "timeout": "timeout",
    }
    for cli_name, field_name in cli_to_field.items():
        value = cli_overrides.get(cli_name)
        if value is not None:
            resolved[field_name] = value
            sources[field_name] = f"cli: --{cli_name.replace('_', '-')}"

    if resolved["connect_as"] is not None:
        try:
            resolved["connect_as"] = _validate_role(resolved["connect_as"])
        except ValueError as e:
            raise ConfigError(str(e)) from None

    resolved["active_profile"] = effective_profile
    resolved["sources"] = sources
    return ResolvedConfig(**resolved)
