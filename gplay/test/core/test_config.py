"""Tests for gplay.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from gplay.core.config import (
    DEFAULT_ACCESS_TOKEN_ENV,
    DEFAULT_CHANGELOG_LANGUAGE,
    DEFAULT_MAX_WORKERS,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_UPLOAD_TIMEOUT_SECONDS,
    Config,
    ConfigError,
    load_config,
    load_config_if_present,
)
from gplay.core.result import Err, Ok


class TestDefaults:
    def test_config_defaults(self) -> None:
        config = Config()
        assert config.publish.track is None
        assert config.publish.changelog_language == DEFAULT_CHANGELOG_LANGUAGE
        assert config.publish.max_workers == DEFAULT_MAX_WORKERS
        assert config.remote.timeout_seconds == DEFAULT_TIMEOUT_SECONDS
        assert config.remote.upload_timeout_seconds == DEFAULT_UPLOAD_TIMEOUT_SECONDS
        assert config.auth.access_token_env == DEFAULT_ACCESS_TOKEN_ENV
        assert config.auth.impersonate_service_account is None
        assert config.auth.service_account_key is None

    def test_frozen(self) -> None:
        config = Config()
        with pytest.raises(AttributeError):
            config.publish = None  # type: ignore[misc,assignment]


class TestFromDict:
    def test_full(self) -> None:
        config = Config.from_dict(
            {
                "publish": {"track": "beta", "changelog_language": "fr-FR", "max_workers": 2},
                "remote": {"timeout_seconds": 5, "upload_timeout_seconds": 30.5},
                "auth": {
                    "access_token_env": "PLAY_TOKEN",
                    "service_account_key": "secrets/play.json",
                    "impersonate_service_account": "ci@proj.iam.gserviceaccount.com",
                },
            }
        )
        assert config.publish.track == "beta"
        assert config.publish.changelog_language == "fr-FR"
        assert config.publish.max_workers == 2
        assert config.remote.timeout_seconds == 5.0
        assert config.remote.upload_timeout_seconds == 30.5
        assert config.auth.access_token_env == "PLAY_TOKEN"
        assert config.auth.service_account_key == Path("secrets/play.json")
        assert config.auth.impersonate_service_account == "ci@proj.iam.gserviceaccount.com"

    def test_empty_uses_defaults(self) -> None:
        assert Config.from_dict({}) == Config()

    def test_wrong_types_fall_back(self) -> None:
        config = Config.from_dict({"publish": {"track": 3}, "remote": "nope"})
        assert config.publish.track is None
        assert config.remote.timeout_seconds == DEFAULT_TIMEOUT_SECONDS

    def test_max_workers_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="max_workers"):
            Config.from_dict({"publish": {"max_workers": -1}})


class TestLoadConfig:
    def test_valid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "gplay.toml"
        path.write_text('[publish]\ntrack = "internal"\n', encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Ok)
        assert result.value.publish.track == "internal"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "gplay.toml")

        assert isinstance(result, Err)
        assert isinstance(result.error, ConfigError)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "gplay.toml"
        path.write_text("[publish\n", encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message
        assert result.error.path == path

    def test_invalid_structure(self, tmp_path: Path) -> None:
        path = tmp_path / "gplay.toml"
        path.write_text("[publish]\nmax_workers = 0\n", encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert "Invalid config structure" in result.error.message


class TestLoadConfigIfPresent:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config_if_present(tmp_path / "gplay.toml") == Ok(Config())

    def test_broken_file_is_still_an_error(self, tmp_path: Path) -> None:
        path = tmp_path / "gplay.toml"
        path.write_text("not = [valid", encoding="utf-8")

        assert isinstance(load_config_if_present(path), Err)
