"""Typed configuration loading and access.

This module provides dataclasses for the optional gplay.toml file with full
type safety and validation. Command-line options always take precedence over
values read here; see gplay.cli.commands.publish_cmd.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_int, get_str, get_table

__all__ = [
    "Config",
    "PublishDefaults",
    "RemoteConfig",
    "AuthConfig",
    "ConfigError",
    "load_config",
    "load_config_if_present",
    "CONFIG_FILE_NAME",
    "DEFAULT_CHANGELOG_LANGUAGE",
    "DEFAULT_MAX_WORKERS",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_UPLOAD_TIMEOUT_SECONDS",
    "DEFAULT_ACCESS_TOKEN_ENV",
]

CONFIG_FILE_NAME = "gplay.toml"

# Language used when a single changelog file is attached to every binary.
DEFAULT_CHANGELOG_LANGUAGE = "en-US"

# Concurrent uploads per step (binaries, image types).
DEFAULT_MAX_WORKERS = 4

# Android Publisher API calls
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_UPLOAD_TIMEOUT_SECONDS = 10 * 60.0

DEFAULT_ACCESS_TOKEN_ENV = "GPLAY_ACCESS_TOKEN"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class PublishDefaults:
    """Defaults for the publish command."""

    track: str | None = None
    changelog_language: str = DEFAULT_CHANGELOG_LANGUAGE
    max_workers: int = DEFAULT_MAX_WORKERS


@dataclass(frozen=True, slots=True)
class RemoteConfig:
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    upload_timeout_seconds: float = DEFAULT_UPLOAD_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class AuthConfig:
    """Where the access token comes from.

    The token is read from `access_token_env` when set in the environment.
    Otherwise `service_account_key` (a JSON key file, relative to the working
    directory) is used when set, and as a last resort gcloud is asked for a
    token of its active account, optionally impersonating
    `impersonate_service_account`.
    """

    access_token_env: str = DEFAULT_ACCESS_TOKEN_ENV
    service_account_key: Path | None = None
    impersonate_service_account: str | None = None


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    publish: PublishDefaults = field(default_factory=PublishDefaults)
    remote: RemoteConfig = field(default_factory=RemoteConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        publish: StrDict = get_table(data, "publish") or {}
        remote: StrDict = get_table(data, "remote") or {}
        auth: StrDict = get_table(data, "auth") or {}

        max_workers = get_int(publish, "max_workers")
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"publish.max_workers must be >= 1 (got {max_workers})")

        return cls(
            publish=PublishDefaults(
                track=get_str(publish, "track"),
                changelog_language=get_str(publish, "changelog_language")
                or DEFAULT_CHANGELOG_LANGUAGE,
                max_workers=max_workers or DEFAULT_MAX_WORKERS,
            ),
            remote=RemoteConfig(
                timeout_seconds=get_float(remote, "timeout_seconds") or DEFAULT_TIMEOUT_SECONDS,
                upload_timeout_seconds=get_float(remote, "upload_timeout_seconds")
                or DEFAULT_UPLOAD_TIMEOUT_SECONDS,
            ),
            auth=AuthConfig(
                access_token_env=get_str(auth, "access_token_env") or DEFAULT_ACCESS_TOKEN_ENV,
                service_account_key=_optional_path(get_str(auth, "service_account_key")),
                impersonate_service_account=get_str(auth, "impersonate_service_account"),
            ),
        )


def _optional_path(value: str | None) -> Path | None:
    return Path(value) if value else None


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to gplay.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_if_present(path: Path) -> Result[Config, ConfigError]:
    """Load config from file, or return defaults when the file does not exist.

    Unlike a missing file, a file that exists but cannot be parsed is an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
