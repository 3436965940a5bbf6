"""Resolve the images/ directory of one language into upload requests.

Layout:
    images/
      featureGraphic.(png|jpg|jpeg)    at most one file per singleton type,
      icon.(png|jpg|jpeg)              first extension in priority order wins
      promoGraphic.(png|jpg|jpeg)
      tvBanner.(png|jpg|jpeg)
      phoneScreenshots/*               every regular file, any extension,
      sevenInchScreenshots/*           in directory enumeration order
      tenInchScreenshots/*
      tvScreenshots/*
      wearScreenshots/*
"""

from __future__ import annotations

import os
from pathlib import Path

from gplay.core.result import Err, Ok, Result
from gplay.publish.errors import LayoutError
from gplay.publish.model import (
    GALLERY_IMAGE_TYPES,
    SINGLETON_IMAGE_TYPES,
    ImageAsset,
    ImageMimeType,
    ImageType,
)

IMAGES_DIR = "images"

SINGLETON_EXTENSIONS: tuple[str, ...] = ("png", "jpg", "jpeg")


def resolve_mime_type(path: Path) -> ImageMimeType:
    """Map a file extension to an accepted image mime type (jpeg when unknown)."""
    ext = path.suffix.lstrip(".").lower()
    if ext == "png":
        return "image/png"
    return "image/jpeg"


def _is_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError:
        return False


def find_singleton_image(images_dir: Path, image_type: ImageType) -> Path | None:
    for ext in SINGLETON_EXTENSIONS:
        candidate = images_dir / f"{image_type}.{ext}"
        if _is_file(candidate):
            return candidate
    return None


def list_gallery_images(gallery_dir: Path) -> Result[tuple[Path, ...], LayoutError]:
    """List regular files directly inside a gallery directory.

    No sort is applied: the store shows screenshots in upload order, and the
    upload order is the directory enumeration order.
    """
    if not _is_dir(gallery_dir):
        return Ok(())

    try:
        names = os.listdir(gallery_dir)
    except OSError as e:
        return Err(LayoutError(path=gallery_dir, message=f"cannot list directory: {e}"))

    files = tuple(gallery_dir / name for name in names if _is_file(gallery_dir / name))
    return Ok(files)


def resolve_images(
    language_code: str, language_dir: Path
) -> Result[tuple[ImageAsset, ...], LayoutError]:
    """Resolve every image asset of a language directory.

    Assets are grouped by image type, singleton types first, each gallery in
    its own enumeration order. A missing images/ directory yields no assets.
    """
    images_dir = language_dir / IMAGES_DIR
    if not _is_dir(images_dir):
        return Ok(())

    assets: list[ImageAsset] = []

    for image_type in SINGLETON_IMAGE_TYPES:
        path = find_singleton_image(images_dir, image_type)
        if path is None:
            continue
        assets.append(
            ImageAsset(
                language_code=language_code,
                image_type=image_type,
                path=path,
                mime_type=resolve_mime_type(path),
            )
        )

    for image_type in GALLERY_IMAGE_TYPES:
        listed = list_gallery_images(images_dir / image_type)
        if isinstance(listed, Err):
            return listed
        for path in listed.value:
            assets.append(
                ImageAsset(
                    language_code=language_code,
                    image_type=image_type,
                    path=path,
                    mime_type=resolve_mime_type(path),
                )
            )

    return Ok(tuple(assets))


def group_by_type(assets: tuple[ImageAsset, ...]) -> dict[ImageType, tuple[ImageAsset, ...]]:
    """Group assets per image type, keeping first-seen type order and in-type order."""
    groups: dict[ImageType, list[ImageAsset]] = {}
    for asset in assets:
        groups.setdefault(asset.image_type, []).append(asset)
    return {image_type: tuple(items) for image_type, items in groups.items()}
