from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, StrEnum
from pathlib import Path
from typing import Literal

ImageMimeType = Literal["image/png", "image/jpeg"]
BinaryKind = Literal["apk", "aab"]
ChangelogMatchMode = Literal["by_version_code", "apply_to_all", "none"]

ROLLOUT_TRACK = "rollout"


class ImageType(StrEnum):
    FEATURE_GRAPHIC = "featureGraphic"
    ICON = "icon"
    PROMO_GRAPHIC = "promoGraphic"
    TV_BANNER = "tvBanner"
    PHONE_SCREENSHOTS = "phoneScreenshots"
    SEVEN_INCH_SCREENSHOTS = "sevenInchScreenshots"
    TEN_INCH_SCREENSHOTS = "tenInchScreenshots"
    TV_SCREENSHOTS = "tvScreenshots"
    WEAR_SCREENSHOTS = "wearScreenshots"

    @property
    def is_singleton(self) -> bool:
        return self in SINGLETON_IMAGE_TYPES


# At most one file each: images/<type>.<ext>
SINGLETON_IMAGE_TYPES: tuple[ImageType, ...] = (
    ImageType.FEATURE_GRAPHIC,
    ImageType.ICON,
    ImageType.PROMO_GRAPHIC,
    ImageType.TV_BANNER,
)

# Ordered galleries: images/<type>/*
GALLERY_IMAGE_TYPES: tuple[ImageType, ...] = (
    ImageType.PHONE_SCREENSHOTS,
    ImageType.SEVEN_INCH_SCREENSHOTS,
    ImageType.TEN_INCH_SCREENSHOTS,
    ImageType.TV_SCREENSHOTS,
    ImageType.WEAR_SCREENSHOTS,
)


@dataclass(frozen=True, slots=True)
class Edit:
    """A server-side staging area; nothing in it is visible until committed."""

    id: str
    expiry_seconds: int


@dataclass(frozen=True, slots=True)
class EditRef:
    """What every call inside an open edit needs to address it."""

    package_name: str
    edit_id: str


@dataclass(frozen=True, slots=True)
class BinaryFile:
    """A resolved local binary, before upload."""

    path: Path
    kind: BinaryKind


@dataclass(frozen=True, slots=True)
class BinaryArtifact:
    path: Path
    version_code: int  # assigned by the store on upload
    content_hash: str  # sha256 of the local file


@dataclass(frozen=True, slots=True)
class ReleaseTrack:
    name: str
    version_codes: tuple[int, ...]
    # Only set for the rollout track.
    user_fraction: float | None = None

    def __post_init__(self) -> None:
        if self.name == ROLLOUT_TRACK and self.user_fraction is None:
            raise ValueError("the rollout track needs a user fraction")

    @classmethod
    def for_release(
        cls, name: str, version_codes: tuple[int, ...], user_fraction: float | None
    ) -> ReleaseTrack:
        fraction = user_fraction if name == ROLLOUT_TRACK else None
        return cls(name=name, version_codes=version_codes, user_fraction=fraction)


@dataclass(frozen=True, slots=True)
class LocalizedListing:
    """Store listing text for one language. Missing source files leave fields as None."""

    language_code: str
    title: str | None = None
    short_description: str | None = None
    full_description: str | None = None
    video: str | None = None

    @property
    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (self.title, self.short_description, self.full_description, self.video)
        )


@dataclass(frozen=True, slots=True)
class ChangelogEntry:
    language_code: str
    version_code: int
    text: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ImageAsset:
    language_code: str
    image_type: ImageType
    path: Path
    mime_type: ImageMimeType


@dataclass(frozen=True, slots=True)
class LanguageMetadata:
    """Everything resolved from one <metadata-root>/<language>/ directory."""

    language_code: str
    directory: Path
    listing: LocalizedListing
    images: tuple[ImageAsset, ...]
    changelogs: tuple[ChangelogEntry, ...]
    changelog_mode: ChangelogMatchMode = "none"


class PublishState(Enum):
    IDLE = "idle"
    EDIT_OPEN = "edit_open"
    BINARIES_UPLOADED = "binaries_uploaded"
    TRACK_UPDATED = "track_updated"
    METADATA_ATTACHED = "metadata_attached"
    COMMITTED = "committed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (PublishState.COMMITTED, PublishState.ABORTED)

    def __str__(self) -> str:
        return self.value
