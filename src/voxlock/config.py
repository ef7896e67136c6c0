"""Configuration management for voxlock."""

import os
import sys
import tomllib
from pathlib import Path

import tomli_w
from pydantic import BaseModel, Field, ValidationError, model_validator

from .constants import (
    CLEANUP_TIMEOUT_SECONDS,
    MAX_CONCURRENT_REQUESTS,
    MAX_REASON_LENGTH,
    MAX_REQUEST_ID_LENGTH,
    RETRY_MAX_MS,
    RETRY_MIN_MS,
    STALE_GRACE_SECONDS,
)
from .core.global_lock import default_lock_dir
from .errors import ConfigError

ENV_SEQUENTIAL = "VOXLOCK_SEQUENTIAL"
ENV_LOCK_DIR = "VOXLOCK_LOCK_DIR"
ENV_SUPPRESS_OUTPUT = "VOXLOCK_SUPPRESS_SPEAKING_OUTPUT"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _default_speech_command() -> list[str]:
    if sys.platform == "darwin":
        return ["say"]
    return ["espeak"]


def _default_rate_flag() -> str:
    return "-r" if sys.platform == "darwin" else "-s"


class CoordinatorConfig(BaseModel):
    """Cross-process lock settings."""

    sequential: bool = Field(default=True, description="Allow only one speaker per host")
    lock_dir: Path = Field(default_factory=default_lock_dir)
    stale_grace_seconds: float = Field(default=STALE_GRACE_SECONDS, gt=0)
    retry_min_ms: int = Field(default=RETRY_MIN_MS, ge=1)
    retry_max_ms: int = Field(default=RETRY_MAX_MS, ge=1)

    @model_validator(mode="after")
    def _check_retry_window(self) -> "CoordinatorConfig":
        if self.retry_max_ms < self.retry_min_ms:
            raise ValueError("retry_max_ms must be >= retry_min_ms")
        return self


class RegistryConfig(BaseModel):
    """Cancellation registry limits."""

    max_requests: int = Field(default=MAX_CONCURRENT_REQUESTS, ge=1)
    cleanup_timeout_seconds: float = Field(default=CLEANUP_TIMEOUT_SECONDS, gt=0)
    max_id_length: int = Field(default=MAX_REQUEST_ID_LENGTH, ge=1)
    max_reason_length: int = Field(default=MAX_REASON_LENGTH, ge=0)


class SpeechConfig(BaseModel):
    """Speech command settings."""

    command: list[str] = Field(default_factory=_default_speech_command)
    rate_flag: str = Field(default_factory=_default_rate_flag)
    voice_flag: str = "-v"
    suppress_output: bool = False  # Report "Speech completed" instead of echoing the text


class VoxlockConfig(BaseModel):
    """Root configuration for voxlock."""

    coordinator: CoordinatorConfig = Field(default_factory=CoordinatorConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    speech: SpeechConfig = Field(default_factory=SpeechConfig)


def default_config_path() -> Path:
    """Per-user config file location."""
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / "voxlock" / "config.toml"


def parse_bool(value: str, name: str) -> bool:
    """Parse an environment flag.

    Raises:
        ConfigError: If value is not a recognised boolean
    """
    normalized = value.strip().lower()
    if normalized in _TRUE:
        return True
    if normalized in _FALSE:
        return False
    raise ConfigError(f"{name} must be true or false, got {value!r}")


def apply_env_overrides(data: dict, environ: dict[str, str] | None = None) -> dict:
    """Overlay VOXLOCK_* environment variables on raw config data."""
    env = os.environ if environ is None else environ

    coordinator = dict(data.get("coordinator", {}))
    speech = dict(data.get("speech", {}))

    if ENV_SEQUENTIAL in env:
        coordinator["sequential"] = parse_bool(env[ENV_SEQUENTIAL], ENV_SEQUENTIAL)
    if env.get(ENV_LOCK_DIR):
        coordinator["lock_dir"] = env[ENV_LOCK_DIR]
    if ENV_SUPPRESS_OUTPUT in env:
        speech["suppress_output"] = parse_bool(env[ENV_SUPPRESS_OUTPUT], ENV_SUPPRESS_OUTPUT)

    return {**data, "coordinator": coordinator, "speech": speech}


def load_config(
    config_path: Path | None = None, environ: dict[str, str] | None = None
) -> VoxlockConfig:
    """Load config from a TOML file plus environment overrides.

    Args:
        config_path: Path to config.toml (defaults to the per-user location)
        environ: Environment to read overrides from (defaults to os.environ)

    Returns:
        Loaded configuration, or defaults if the file doesn't exist

    Raises:
        ConfigError: If the file or an override is invalid
    """
    path = config_path or default_config_path()
    data: dict = {}
    if path.exists():
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    try:
        return VoxlockConfig.model_validate(apply_env_overrides(data, environ))
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def write_config_template(config_path: Path) -> Path:
    """Write default config.toml template.

    Args:
        config_path: Where to write the template

    Returns:
        Path to the written config file
    """
    defaults = VoxlockConfig()
    template = {
        "coordinator": {
            "sequential": True,
            "lock_dir": str(defaults.coordinator.lock_dir),
            "stale_grace_seconds": STALE_GRACE_SECONDS,
            "retry_min_ms": RETRY_MIN_MS,
            "retry_max_ms": RETRY_MAX_MS,
        },
        "registry": {
            "max_requests": MAX_CONCURRENT_REQUESTS,
            "cleanup_timeout_seconds": CLEANUP_TIMEOUT_SECONDS,
            "max_id_length": MAX_REQUEST_ID_LENGTH,
            "max_reason_length": MAX_REASON_LENGTH,
        },
        "speech": {
            "command": defaults.speech.command,
            "rate_flag": defaults.speech.rate_flag,
            "voice_flag": defaults.speech.voice_flag,
            "suppress_output": False,
        },
    }
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "wb") as f:
        tomli_w.dump(template, f)
    return config_path
