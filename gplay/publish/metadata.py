"""Resolve a Fastlane-style metadata tree into typed upload requests.

Layout:
    <metadata-root>/
      <language-code>/            e.g. en-US, fr-FR
        title.txt
        short_description.txt
        full_description.txt
        video.txt
        images/                   see gplay.publish.images
        changelogs/               see gplay.publish.changelogs

Resolution only reads the filesystem; nothing here talks to the store.
Anything not named above is ignored.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from gplay.core.result import Err, Ok, Result
from gplay.publish.changelogs import CHANGELOGS_DIR, match_changelogs
from gplay.publish.errors import InvalidMetadataLayout, MetadataUploadFailed
from gplay.publish.images import resolve_images
from gplay.publish.model import LanguageMetadata, LocalizedListing

# LocalizedListing field -> file name inside the language directory.
LISTING_FILES: dict[str, str] = {
    "title": "title.txt",
    "short_description": "short_description.txt",
    "full_description": "full_description.txt",
    "video": "video.txt",
}


def list_language_dirs(
    metadata_root: Path,
) -> Result[tuple[tuple[str, Path], ...], InvalidMetadataLayout]:
    """List (language code, directory) pairs under the metadata root, sorted by code."""
    try:
        if not metadata_root.is_dir():
            return Err(
                InvalidMetadataLayout(
                    path=metadata_root, reason="metadata root is not a directory"
                )
            )
        children = sorted(metadata_root.iterdir(), key=lambda p: p.name)
    except OSError as e:
        return Err(InvalidMetadataLayout(path=metadata_root, reason=f"cannot list: {e}"))

    languages: list[tuple[str, Path]] = []
    for child in children:
        if child.name.startswith("."):
            continue
        try:
            if child.is_dir():
                languages.append((child.name, child))
        except OSError:
            continue
    return Ok(tuple(languages))


def _read_optional_text(path: Path) -> str | None:
    # Listing fields are optional: an unreadable file counts as absent.
    try:
        return path.read_text(encoding="utf-8").rstrip("\r\n")
    except (OSError, UnicodeDecodeError):
        return None


def read_listing(language_code: str, language_dir: Path) -> LocalizedListing:
    listing = LocalizedListing(language_code=language_code)
    for field_name, file_name in LISTING_FILES.items():
        text = _read_optional_text(language_dir / file_name)
        if text is not None:
            listing = replace(listing, **{field_name: text})
    return listing


def resolve_language(
    language_code: str,
    language_dir: Path,
    known_version_codes: tuple[int, ...],
) -> Result[LanguageMetadata, MetadataUploadFailed]:
    """Resolve listing text, changelogs and images of one language directory."""
    listing = read_listing(language_code, language_dir)

    changelogs = match_changelogs(
        language_code, language_dir / CHANGELOGS_DIR, known_version_codes
    )
    if isinstance(changelogs, Err):
        return Err(
            MetadataUploadFailed(
                language_code=language_code,
                stage="changelog",
                reason=changelogs.error.message,
                path=changelogs.error.path,
            )
        )

    images = resolve_images(language_code, language_dir)
    if isinstance(images, Err):
        return Err(
            MetadataUploadFailed(
                language_code=language_code,
                stage="images",
                reason=images.error.message,
                path=images.error.path,
            )
        )

    return Ok(
        LanguageMetadata(
            language_code=language_code,
            directory=language_dir,
            listing=listing,
            images=images.value,
            changelogs=changelogs.value.entries,
            changelog_mode=changelogs.value.mode,
        )
    )
