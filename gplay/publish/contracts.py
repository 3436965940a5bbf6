"""Inputs and outputs of a publish run, shared between CLI and orchestrator."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from gplay.core.config import ConfigError, DEFAULT_CHANGELOG_LANGUAGE, DEFAULT_MAX_WORKERS
from gplay.core.result import Err, Ok, Result
from gplay.publish.model import ROLLOUT_TRACK, BinaryArtifact, PublishState


@dataclass(frozen=True, slots=True)
class PublishConfig:
    """Normalized, immutable publish request."""

    binary: str  # path or glob pattern
    track: str
    additional_binaries: tuple[str, ...] = ()
    user_fraction: float | None = None
    # Attach this file's text to every uploaded version code.
    changelog_path: Path | None = None
    # Attach listings, changelogs and images from a Fastlane-style tree.
    metadata_root: Path | None = None
    changelog_language: str = DEFAULT_CHANGELOG_LANGUAGE
    # Skip manifest parsing when set.
    package_name: str | None = None
    max_workers: int = DEFAULT_MAX_WORKERS

    def validate(self) -> Result[None, ConfigError]:
        if not self.track.strip():
            return Err(ConfigError("track must not be empty"))
        if self.track == ROLLOUT_TRACK:
            fraction = self.user_fraction
            if fraction is None:
                return Err(ConfigError("the rollout track requires a user fraction"))
            if not 0.0 < fraction <= 1.0:
                return Err(ConfigError(f"user fraction must be in (0, 1] (got {fraction})"))
        elif self.user_fraction is not None:
            return Err(
                ConfigError(f"a user fraction only applies to the rollout track (got {self.track})")
            )
        if self.max_workers < 1:
            return Err(ConfigError(f"max workers must be >= 1 (got {self.max_workers})"))
        if not self.changelog_language.strip():
            return Err(ConfigError("changelog language must not be empty"))
        return Ok(None)


@dataclass(frozen=True, slots=True)
class PublishReport:
    """Outcome of a committed run."""

    package_name: str
    edit_id: str
    track: str
    artifacts: tuple[BinaryArtifact, ...]
    languages: tuple[str, ...]
    state: PublishState

    @property
    def version_codes(self) -> tuple[int, ...]:
        return tuple(a.version_code for a in self.artifacts)
