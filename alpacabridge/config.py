"""
alpacabridge Configuration

Pydantic models for request policy and client settings, loaded from YAML
with environment variable overrides.

Configuration sources, later ones winning:
    1. Model defaults
    2. YAML file (explicit path, or the first existing of get_config_paths())
    3. ALPACABRIDGE_* environment variables

Usage:
    from alpacabridge.config import load_config

    config = load_config("~/.config/alpacabridge/config.yaml")
    fast = config.request_options.model_copy(update={"max_retries": 0})
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from alpacabridge.exceptions import ConfigurationError
from alpacabridge.types import DEFAULT_ALPACA_PORT

ENV_PREFIX = "ALPACABRIDGE_"
CONFIG_FILENAME = "alpacabridge.yaml"


# =============================================================================
# Request Policy
# =============================================================================

class RequestOptions(BaseModel):
    """Timeout and retry policy for one request.

    Frozen: per-call overrides are new instances, never mutations of the
    shared defaults.
    """

    model_config = ConfigDict(frozen=True)

    timeout: float = Field(default=10.0, description="Per-attempt timeout in seconds")
    max_retries: int = Field(default=2, description="Retries after the first attempt")
    retry_delay: float = Field(default=1.0, description="Sleep between attempts in seconds")
    retry_unknown: bool = Field(default=False, description="Retry unparseable responses")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout must be positive, got {v}")
        return v

    @field_validator("max_retries")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"max_retries must be >= 0, got {v}")
        return v

    @field_validator("retry_delay")
    @classmethod
    def validate_retry_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"retry_delay must be >= 0, got {v}")
        return v

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


# =============================================================================
# Device Entries
# =============================================================================

class DeviceEntry(BaseModel):
    """A device listed in the config file."""

    name: str = ""
    device_type: str
    address: str = "localhost"
    port: int = DEFAULT_ALPACA_PORT
    device_number: int = 0
    unique_id: str = ""

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 1 <= v <= 65535:
            raise ValueError(f"port must be 1-65535, got {v}")
        return v

    @field_validator("device_number")
    @classmethod
    def validate_device_number(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"device_number must be >= 0, got {v}")
        return v

    @field_validator("device_type")
    @classmethod
    def normalize_device_type(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("device_type must not be empty")
        return v


# =============================================================================
# Client Configuration
# =============================================================================

class ClientConfig(BaseModel):
    """Settings shared by every client created from this config."""

    model_config = ConfigDict(frozen=True)

    request_options: RequestOptions = Field(default_factory=RequestOptions)
    log_requests: bool = False
    coerce_values: bool = False
    user_agent: str = "alpacabridge/0.1.0"
    devices: List[DeviceEntry] = Field(default_factory=list)


def get_config_paths() -> List[Path]:
    """Config file locations searched by load_config, in order."""
    return [
        Path.cwd() / CONFIG_FILENAME,
        Path.home() / ".config" / "alpacabridge" / "config.yaml",
        Path("/etc/alpacabridge/config.yaml"),
    ]


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


# Environment variable -> (section, key, parser)
_ENV_OVERRIDES = {
    "TIMEOUT": ("request_options", "timeout", float),
    "MAX_RETRIES": ("request_options", "max_retries", int),
    "RETRY_DELAY": ("request_options", "retry_delay", float),
    "RETRY_UNKNOWN": ("request_options", "retry_unknown", _parse_bool),
    "LOG_REQUESTS": (None, "log_requests", _parse_bool),
    "COERCE_VALUES": (None, "coerce_values", _parse_bool),
    "USER_AGENT": (None, "user_agent", str),
}


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    for suffix, (section, key, parser) in _ENV_OVERRIDES.items():
        raw = os.environ.get(f"{ENV_PREFIX}{suffix}")
        if raw is None:
            continue
        try:
            value = parser(raw)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value for {ENV_PREFIX}{suffix}: {raw!r}",
                config_key=key,
            ) from e
        if section is None:
            data[key] = value
        else:
            if not isinstance(data.get(section), dict):
                data[section] = {}
            data[section][key] = value
    return data


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file: {e}", config_file=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("Config file must contain a mapping", config_file=str(path))
    return data


def load_config(path: Optional[str | Path] = None) -> ClientConfig:
    """Load client configuration.

    Args:
        path: Explicit YAML file. If omitted, the first existing file from
              get_config_paths() is used, or defaults when none exists.

    Returns:
        Validated ClientConfig

    Raises:
        ConfigurationError: If the file is missing, unparseable or invalid
    """
    data: Dict[str, Any] = {}
    source: Optional[Path] = None

    if path is not None:
        source = Path(path).expanduser()
        if not source.exists():
            raise ConfigurationError(f"Config file not found: {source}", config_file=str(source))
    else:
        source = next((p for p in get_config_paths() if p.exists()), None)

    if source is not None:
        data = _read_yaml(source)

    data = _apply_env_overrides(data)

    try:
        return ClientConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed: {e}",
            config_file=str(source) if source else None,
        ) from e
