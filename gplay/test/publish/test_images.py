"""Tests for gplay.publish.images module."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from gplay.core.result import Err, Ok
from gplay.publish.images import (
    find_singleton_image,
    group_by_type,
    list_gallery_images,
    resolve_images,
    resolve_mime_type,
)
from gplay.publish.model import ImageType


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\x89PNG")
    return path


class TestMimeType:
    @pytest.mark.parametrize(
        ("name", "mime"),
        [
            ("icon.png", "image/png"),
            ("icon.PNG", "image/png"),
            ("shot.jpg", "image/jpeg"),
            ("shot.jpeg", "image/jpeg"),
            ("shot.webp", "image/jpeg"),
            ("noext", "image/jpeg"),
        ],
    )
    def test_resolve(self, name: str, mime: str) -> None:
        assert resolve_mime_type(Path(name)) == mime


class TestSingletons:
    def test_png_wins_over_jpg(self, tmp_path: Path) -> None:
        _touch(tmp_path / "icon.jpg")
        png = _touch(tmp_path / "icon.png")

        assert find_singleton_image(tmp_path, ImageType.ICON) == png

    def test_jpg_wins_over_jpeg(self, tmp_path: Path) -> None:
        _touch(tmp_path / "tvBanner.jpeg")
        jpg = _touch(tmp_path / "tvBanner.jpg")

        assert find_singleton_image(tmp_path, ImageType.TV_BANNER) == jpg

    def test_other_extensions_ignored(self, tmp_path: Path) -> None:
        _touch(tmp_path / "icon.gif")

        assert find_singleton_image(tmp_path, ImageType.ICON) is None

    def test_directory_named_like_image_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "icon.png").mkdir()

        assert find_singleton_image(tmp_path, ImageType.ICON) is None


class TestGallery:
    def test_missing_dir_is_empty(self, tmp_path: Path) -> None:
        assert list_gallery_images(tmp_path / "phoneScreenshots") == Ok(())

    def test_keeps_enumeration_order(self, tmp_path: Path) -> None:
        gallery = tmp_path / "phoneScreenshots"
        for name in ("b.png", "a.png", "c.jpg"):
            _touch(gallery / name)
        (gallery / "nested").mkdir()

        result = list_gallery_images(gallery)

        assert isinstance(result, Ok)
        expected = [name for name in os.listdir(gallery) if name != "nested"]
        assert [p.name for p in result.value] == expected

    def test_unlistable_dir_is_an_error(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        gallery = tmp_path / "phoneScreenshots"
        gallery.mkdir()

        def fake_listdir(path: object) -> list[str]:
            del path
            raise PermissionError("denied")

        monkeypatch.setattr("gplay.publish.images.os.listdir", fake_listdir)

        result = list_gallery_images(gallery)

        assert isinstance(result, Err)
        assert result.error.path == gallery


class TestResolveImages:
    def test_no_images_dir(self, tmp_path: Path) -> None:
        assert resolve_images("en-US", tmp_path) == Ok(())

    def test_full_layout(self, tmp_path: Path) -> None:
        images = tmp_path / "images"
        _touch(images / "icon.png")
        _touch(images / "featureGraphic.jpg")
        _touch(images / "phoneScreenshots" / "1.png")
        _touch(images / "wearScreenshots" / "w.jpeg")
        _touch(images / "unrelated.png")

        result = resolve_images("en-US", tmp_path)

        assert isinstance(result, Ok)
        by_type = {(a.image_type, a.path.name, a.mime_type) for a in result.value}
        assert by_type == {
            (ImageType.ICON, "icon.png", "image/png"),
            (ImageType.FEATURE_GRAPHIC, "featureGraphic.jpg", "image/jpeg"),
            (ImageType.PHONE_SCREENSHOTS, "1.png", "image/png"),
            (ImageType.WEAR_SCREENSHOTS, "w.jpeg", "image/jpeg"),
        }
        assert all(a.language_code == "en-US" for a in result.value)
        # Singletons come first.
        assert result.value[0].image_type.is_singleton
        assert not result.value[-1].image_type.is_singleton

    def test_group_by_type_keeps_order(self, tmp_path: Path) -> None:
        gallery = tmp_path / "images" / "phoneScreenshots"
        for name in ("1.png", "2.png"):
            _touch(gallery / name)
        _touch(tmp_path / "images" / "icon.png")

        result = resolve_images("de-DE", tmp_path)
        assert isinstance(result, Ok)

        groups = group_by_type(result.value)

        assert list(groups) == [ImageType.ICON, ImageType.PHONE_SCREENSHOTS]
        phone = [a.path.name for a in groups[ImageType.PHONE_SCREENSHOTS]]
        assert phone == [p.name for p in list_gallery_images(gallery).unwrap()]
