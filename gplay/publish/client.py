"""Remote edit client abstraction.

This module provides:
- EditClient: Protocol for the store calls a publish run needs (injectable for tests)
- MockEditClient: Recording implementation for testing

The Android Publisher implementation lives in gplay.publish.play_api.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from gplay.core.result import Err, Ok, Result
from gplay.publish.errors import AuthFailed, RemoteError
from gplay.publish.model import (
    BinaryFile,
    ChangelogEntry,
    Edit,
    EditRef,
    ImageAsset,
    LocalizedListing,
    ReleaseTrack,
)

__all__ = [
    "ClientConnector",
    "EditClient",
    "MockEditClient",
    "RecordedCall",
]


@runtime_checkable
class EditClient(Protocol):
    """Calls against one application's edits.

    Every call reports its own success or failure; none of them raise.
    """

    def open_edit(self, package_name: str) -> Result[Edit, RemoteError]: ...

    def upload_binary(self, edit: EditRef, binary: BinaryFile) -> Result[int, RemoteError]:
        """Upload an APK or app bundle and return the version code the store assigned."""
        ...

    def update_track(self, edit: EditRef, track: ReleaseTrack) -> Result[None, RemoteError]: ...

    def patch_listing(
        self, edit: EditRef, listing: LocalizedListing
    ) -> Result[None, RemoteError]: ...

    def update_changelog(
        self, edit: EditRef, entry: ChangelogEntry
    ) -> Result[None, RemoteError]: ...

    def upload_image(self, edit: EditRef, asset: ImageAsset) -> Result[None, RemoteError]: ...

    def commit(self, edit: EditRef) -> Result[None, RemoteError]: ...


class ClientConnector(Protocol):
    """Authenticates and returns a usable EditClient."""

    def connect(self) -> Result[EditClient, AuthFailed]: ...


@dataclass(frozen=True, slots=True)
class RecordedCall:
    operation: str
    args: tuple[object, ...]


class MockEditClient:
    """Edit client that records calls instead of talking to the store.

    Usage:
        client = MockEditClient(version_codes={Path("app.apk"): 7})
        client.fail("commit", "backend error")
        ...
        assert client.operations == ["open_edit", "upload_binary", ...]
    """

    def __init__(
        self,
        *,
        version_codes: dict[Path, int] | None = None,
        edit_id: str = "edit-1",
    ) -> None:
        self.edit_id = edit_id
        self._version_codes = dict(version_codes or {})
        self._next_version_code = 1
        self._failures: dict[str, tuple[str, Path | int | str | None]] = {}
        self._lock = threading.Lock()
        self.calls: list[RecordedCall] = []

    def fail(self, operation: str, message: str, *, only: Path | int | str | None = None) -> None:
        """Make an operation fail.

        Args:
            operation: EditClient method name.
            message: RemoteError message.
            only: Restrict the failure to one target (binary/image path,
                version code or language code).
        """
        self._failures[operation] = (message, only)

    def _record(self, operation: str, *args: object) -> None:
        with self._lock:
            self.calls.append(RecordedCall(operation, args))

    def _failure(self, operation: str, *targets: Path | int | str) -> RemoteError | None:
        failure = self._failures.get(operation)
        if failure is None:
            return None
        message, only = failure
        if only is not None and only not in targets:
            return None
        return RemoteError(operation=operation, message=message, status=500)

    @property
    def operations(self) -> list[str]:
        return [c.operation for c in self.calls]

    def calls_to(self, operation: str) -> list[RecordedCall]:
        return [c for c in self.calls if c.operation == operation]

    def open_edit(self, package_name: str) -> Result[Edit, RemoteError]:
        self._record("open_edit", package_name)
        error = self._failure("open_edit", package_name)
        if error is not None:
            return Err(error)
        return Ok(Edit(id=self.edit_id, expiry_seconds=3600))

    def upload_binary(self, edit: EditRef, binary: BinaryFile) -> Result[int, RemoteError]:
        self._record("upload_binary", edit, binary.path)
        error = self._failure("upload_binary", binary.path)
        if error is not None:
            return Err(error)
        with self._lock:
            code = self._version_codes.get(binary.path)
            if code is None:
                code = self._next_version_code
                self._next_version_code += 1
        return Ok(code)

    def update_track(self, edit: EditRef, track: ReleaseTrack) -> Result[None, RemoteError]:
        self._record("update_track", edit, track)
        error = self._failure("update_track", track.name)
        return Err(error) if error is not None else Ok(None)

    def patch_listing(self, edit: EditRef, listing: LocalizedListing) -> Result[None, RemoteError]:
        self._record("patch_listing", edit, listing)
        error = self._failure("patch_listing", listing.language_code)
        return Err(error) if error is not None else Ok(None)

    def update_changelog(self, edit: EditRef, entry: ChangelogEntry) -> Result[None, RemoteError]:
        self._record("update_changelog", edit, entry)
        error = self._failure("update_changelog", entry.version_code, entry.language_code)
        return Err(error) if error is not None else Ok(None)

    def upload_image(self, edit: EditRef, asset: ImageAsset) -> Result[None, RemoteError]:
        self._record("upload_image", edit, asset)
        error = self._failure("upload_image", asset.path)
        return Err(error) if error is not None else Ok(None)

    def commit(self, edit: EditRef) -> Result[None, RemoteError]:
        self._record("commit", edit)
        error = self._failure("commit", edit.edit_id)
        return Err(error) if error is not None else Ok(None)
