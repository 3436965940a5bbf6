from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

PublishStep = Literal[
    "validate_config",
    "resolve_binaries",
    "authenticate",
    "open_edit",
    "upload_binaries",
    "update_track",
    "attach_changelogs",
    "attach_metadata",
    "commit",
]

MetadataStage = Literal["listing", "changelog", "images"]


@dataclass(frozen=True, slots=True)
class RemoteError:
    """A single Android Publisher call that did not succeed."""

    operation: str
    message: str
    status: int = 0

    def __str__(self) -> str:
        if self.status:
            return f"{self.operation}: HTTP {self.status}: {self.message}"
        return f"{self.operation}: {self.message}"


@dataclass(frozen=True, slots=True)
class LayoutError:
    """A metadata file or directory that exists but could not be read."""

    path: Path
    message: str


@dataclass(frozen=True, slots=True)
class InvalidPublishConfig:
    """Publish options that contradict each other, caught before any remote call."""

    reason: str


@dataclass(frozen=True, slots=True)
class InvalidBinary:
    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class AuthFailed:
    reason: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class EditOpenFailed:
    package_name: str
    reason: str


@dataclass(frozen=True, slots=True)
class BinaryUploadFailed:
    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class TrackUpdateFailed:
    track: str
    reason: str


@dataclass(frozen=True, slots=True)
class ChangelogUploadFailed:
    language_code: str
    reason: str
    version_code: int | None = None
    # Set when the changelog file itself could not be read.
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class MetadataUploadFailed:
    language_code: str
    stage: MetadataStage
    reason: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class CommitFailed:
    edit_id: str
    reason: str


@dataclass(frozen=True, slots=True)
class InvalidMetadataLayout:
    path: Path
    reason: str


PublishError = (
    InvalidPublishConfig
    | InvalidBinary
    | AuthFailed
    | EditOpenFailed
    | BinaryUploadFailed
    | TrackUpdateFailed
    | ChangelogUploadFailed
    | MetadataUploadFailed
    | CommitFailed
    | InvalidMetadataLayout
)


def error_step(error: PublishError) -> PublishStep:
    """Name the publish step at which an error kind occurs."""
    match error:
        case InvalidPublishConfig():
            return "validate_config"
        case InvalidBinary():
            return "resolve_binaries"
        case AuthFailed():
            return "authenticate"
        case EditOpenFailed():
            return "open_edit"
        case BinaryUploadFailed():
            return "upload_binaries"
        case TrackUpdateFailed():
            return "update_track"
        case ChangelogUploadFailed():
            return "attach_changelogs"
        case MetadataUploadFailed() | InvalidMetadataLayout():
            return "attach_metadata"
        case CommitFailed():
            return "commit"
