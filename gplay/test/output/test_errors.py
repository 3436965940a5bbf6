"""Tests for gplay.output.errors module."""

from __future__ import annotations

from pathlib import Path

import pytest

from gplay.core.errors import ErrorCode
from gplay.output.console import MockConsole
from gplay.output.errors import print_publish_error, publish_error_exit_code
from gplay.publish.errors import (
    AuthFailed,
    BinaryUploadFailed,
    ChangelogUploadFailed,
    CommitFailed,
    EditOpenFailed,
    InvalidBinary,
    InvalidMetadataLayout,
    InvalidPublishConfig,
    MetadataUploadFailed,
    PublishError,
    TrackUpdateFailed,
)


class TestPrintPublishError:
    def test_binary_upload_failed(self) -> None:
        console = MockConsole()
        error = BinaryUploadFailed(path=Path("app.apk"), reason="HTTP 403: forbidden")

        print_publish_error(error, console)

        assert console.has_error()
        assert "app.apk" in console.text
        assert "HTTP 403: forbidden" in console.text
        assert "step: upload_binaries" in console.text
        assert "nothing was committed" in console.text

    def test_auth_failed_shows_hint(self) -> None:
        console = MockConsole()

        print_publish_error(AuthFailed(reason="no token", hint="run gcloud auth login"), console)

        assert "authentication failed: no token" in console.text
        assert "hint: run gcloud auth login" in console.text
        assert "nothing was committed" not in console.text

    def test_edit_open_failed_has_no_open_edit(self) -> None:
        console = MockConsole()

        print_publish_error(EditOpenFailed(package_name="com.example", reason="404"), console)

        assert "com.example" in console.text
        assert "step: open_edit" in console.text
        assert "will expire" not in console.text

    def test_changelog_file_error_names_the_file(self) -> None:
        console = MockConsole()
        error = ChangelogUploadFailed(
            language_code="en-US", reason="cannot read", path=Path("notes.txt")
        )

        print_publish_error(error, console)

        assert "changelog notes.txt (en-US): cannot read" in console.text

    def test_changelog_remote_error_names_the_version_code(self) -> None:
        console = MockConsole()
        error = ChangelogUploadFailed(language_code="en-US", reason="HTTP 500", version_code=42)

        print_publish_error(error, console)

        assert "version code 42" in console.text
        assert "step: attach_changelogs" in console.text

    def test_metadata_stage_is_reported(self) -> None:
        console = MockConsole()
        error = MetadataUploadFailed(
            language_code="fr-FR", stage="images", reason="too large", path=Path("icon.png")
        )

        print_publish_error(error, console)

        assert "metadata images failed for fr-FR (icon.png): too large" in console.text
        assert "step: attach_metadata" in console.text


    def test_invalid_config_happens_before_any_edit(self) -> None:
        console = MockConsole()

        print_publish_error(InvalidPublishConfig(reason="needs a fraction"), console)

        assert "invalid publish options: needs a fraction" in console.text
        assert "step: validate_config" in console.text
        assert "nothing was committed" not in console.text


class TestExitCodes:
    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (InvalidPublishConfig(reason="bad"), ErrorCode.USER_ERROR),
            (InvalidBinary(path=Path("x.apk"), reason="no match"), ErrorCode.USER_ERROR),
            (InvalidMetadataLayout(path=Path("meta"), reason="missing"), ErrorCode.USER_ERROR),
            (AuthFailed(reason="expired"), ErrorCode.AUTH_ERROR),
            (EditOpenFailed(package_name="p", reason="r"), ErrorCode.PUBLISH_ERROR),
            (BinaryUploadFailed(path=Path("x.apk"), reason="r"), ErrorCode.PUBLISH_ERROR),
            (TrackUpdateFailed(track="beta", reason="r"), ErrorCode.PUBLISH_ERROR),
            (ChangelogUploadFailed(language_code="en-US", reason="r"), ErrorCode.PUBLISH_ERROR),
            (
                ChangelogUploadFailed(language_code="en-US", reason="r", path=Path("c.txt")),
                ErrorCode.IO_ERROR,
            ),
            (
                MetadataUploadFailed(language_code="en-US", stage="listing", reason="r"),
                ErrorCode.PUBLISH_ERROR,
            ),
            (CommitFailed(edit_id="e", reason="r"), ErrorCode.PUBLISH_ERROR),
        ],
    )
    def test_mapping(self, error: PublishError, code: ErrorCode) -> None:
        assert publish_error_exit_code(error) == int(code)
