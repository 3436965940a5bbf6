"""Google Play Android Publisher v3 implementation of EditClient.

Notes on the v3 surface:
- There is no "rollout" track. A staged rollout is a production release with
  status "inProgress" and a userFraction.
- Changelogs are release notes stored inside a track release, so attaching
  one is a read-modify-write of the track that holds the version code.
- Version codes are int64 and travel as JSON strings.
"""

from __future__ import annotations

import threading
from urllib.parse import quote

from gplay.core.config import DEFAULT_TIMEOUT_SECONDS, DEFAULT_UPLOAD_TIMEOUT_SECONDS
from gplay.core.result import Err, Ok, Result
from gplay.core.structured import StrDict, as_str_dict, get_int, get_list, get_str
from gplay.publish.auth import TokenProvider
from gplay.publish.binaries import binary_mime_type
from gplay.publish.client import EditClient
from gplay.publish.errors import AuthFailed, RemoteError
from gplay.publish.http import HttpClient, HttpError, RealHttpClient
from gplay.publish.model import (
    ROLLOUT_TRACK,
    BinaryFile,
    ChangelogEntry,
    Edit,
    EditRef,
    ImageAsset,
    LocalizedListing,
    ReleaseTrack,
)

API_ROOT = "https://androidpublisher.googleapis.com"
API_BASE = f"{API_ROOT}/androidpublisher/v3/applications"
UPLOAD_BASE = f"{API_ROOT}/upload/androidpublisher/v3/applications"

PRODUCTION_TRACK = "production"


def api_track_name(track: str) -> str:
    return PRODUCTION_TRACK if track == ROLLOUT_TRACK else track


def track_body(track: ReleaseTrack) -> StrDict:
    release: StrDict = {"versionCodes": [str(code) for code in track.version_codes]}
    if track.user_fraction is not None:
        release["status"] = "inProgress"
        release["userFraction"] = track.user_fraction
    else:
        release["status"] = "completed"
    return {"track": api_track_name(track.name), "releases": [release]}


def listing_body(listing: LocalizedListing) -> StrDict:
    body: StrDict = {"language": listing.language_code}
    fields = {
        "title": listing.title,
        "shortDescription": listing.short_description,
        "fullDescription": listing.full_description,
        "video": listing.video,
    }
    for key, value in fields.items():
        if value is not None:
            body[key] = value
    return body


def merge_release_note(track: StrDict, entry: ChangelogEntry) -> bool:
    """Set the note for entry.language_code on the release holding entry.version_code.

    Returns False when no release of the track holds the version code.
    """
    wanted = str(entry.version_code)
    for release_obj in get_list(track, "releases") or []:
        release = as_str_dict(release_obj)
        if release is None:
            continue
        codes = [str(c) for c in get_list(release, "versionCodes") or []]
        if wanted not in codes:
            continue
        notes = [
            note
            for note in (as_str_dict(n) for n in get_list(release, "releaseNotes") or [])
            if note is not None and get_str(note, "language") != entry.language_code
        ]
        notes.append({"language": entry.language_code, "text": entry.text})
        release["releaseNotes"] = notes
        return True
    return False


def _remote(operation: str, error: HttpError) -> RemoteError:
    return RemoteError(operation=operation, message=error.message, status=error.status)


def _segment(value: str) -> str:
    return quote(value, safe="")


class AndroidPublisherClient:
    """EditClient backed by the Android Publisher REST API."""

    def __init__(
        self,
        *,
        access_token: str,
        http: HttpClient,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        upload_timeout: float = DEFAULT_UPLOAD_TIMEOUT_SECONDS,
    ) -> None:
        self._headers = {"Authorization": f"Bearer {access_token}"}
        self._http = http
        self.timeout = timeout
        self.upload_timeout = upload_timeout
        # Changelog updates rewrite whole tracks.
        self._tracks_lock = threading.Lock()

    def _edit_url(self, edit: EditRef, *parts: str, upload: bool = False) -> str:
        base = UPLOAD_BASE if upload else API_BASE
        path = "/".join(_segment(p) for p in parts)
        url = f"{base}/{_segment(edit.package_name)}/edits/{_segment(edit.edit_id)}"
        return f"{url}/{path}" if path else url

    def open_edit(self, package_name: str) -> Result[Edit, RemoteError]:
        url = f"{API_BASE}/{_segment(package_name)}/edits"
        result = self._http.request_json(
            "POST", url, headers=self._headers, body={}, timeout=self.timeout
        )
        if isinstance(result, Err):
            return Err(_remote("edits.insert", result.error))

        edit_id = get_str(result.value, "id")
        if edit_id is None:
            return Err(RemoteError(operation="edits.insert", message="response has no edit id"))
        return Ok(Edit(id=edit_id, expiry_seconds=get_int(result.value, "expiryTimeSeconds") or 0))

    def upload_binary(self, edit: EditRef, binary: BinaryFile) -> Result[int, RemoteError]:
        collection = "apks" if binary.kind == "apk" else "bundles"
        operation = f"edits.{collection}.upload"
        url = self._edit_url(edit, collection, upload=True) + "?uploadType=media"
        result = self._http.upload_file(
            url,
            binary.path,
            content_type=binary_mime_type(binary),
            headers=self._headers,
            timeout=self.upload_timeout,
        )
        if isinstance(result, Err):
            return Err(_remote(operation, result.error))

        version_code = get_int(result.value, "versionCode")
        if version_code is None:
            return Err(RemoteError(operation=operation, message="response has no versionCode"))
        return Ok(version_code)

    def update_track(self, edit: EditRef, track: ReleaseTrack) -> Result[None, RemoteError]:
        url = self._edit_url(edit, "tracks", api_track_name(track.name))
        with self._tracks_lock:
            result = self._http.request_json(
                "PUT", url, headers=self._headers, body=track_body(track), timeout=self.timeout
            )
        if isinstance(result, Err):
            return Err(_remote("edits.tracks.update", result.error))
        return Ok(None)

    def patch_listing(self, edit: EditRef, listing: LocalizedListing) -> Result[None, RemoteError]:
        url = self._edit_url(edit, "listings", listing.language_code)
        result = self._http.request_json(
            "PATCH", url, headers=self._headers, body=listing_body(listing), timeout=self.timeout
        )
        if isinstance(result, Err):
            return Err(_remote("edits.listings.patch", result.error))
        return Ok(None)

    def update_changelog(self, edit: EditRef, entry: ChangelogEntry) -> Result[None, RemoteError]:
        operation = "edits.tracks.update"
        with self._tracks_lock:
            listed = self._http.request_json(
                "GET", self._edit_url(edit, "tracks"), headers=self._headers, timeout=self.timeout
            )
            if isinstance(listed, Err):
                return Err(_remote("edits.tracks.list", listed.error))

            for track_obj in get_list(listed.value, "tracks") or []:
                track = as_str_dict(track_obj)
                if track is None or not merge_release_note(track, entry):
                    continue
                name = get_str(track, "track") or ""
                result = self._http.request_json(
                    "PUT",
                    self._edit_url(edit, "tracks", name),
                    headers=self._headers,
                    body=track,
                    timeout=self.timeout,
                )
                if isinstance(result, Err):
                    return Err(_remote(operation, result.error))
                return Ok(None)

        return Err(
            RemoteError(
                operation=operation,
                message=f"no track release holds version code {entry.version_code}",
            )
        )

    def upload_image(self, edit: EditRef, asset: ImageAsset) -> Result[None, RemoteError]:
        url = self._edit_url(
            edit, "listings", asset.language_code, str(asset.image_type), upload=True
        )
        result = self._http.upload_file(
            url + "?uploadType=media",
            asset.path,
            content_type=asset.mime_type,
            headers=self._headers,
            timeout=self.upload_timeout,
        )
        if isinstance(result, Err):
            return Err(_remote("edits.images.upload", result.error))
        return Ok(None)

    def commit(self, edit: EditRef) -> Result[None, RemoteError]:
        url = self._edit_url(edit) + ":commit"
        result = self._http.request_json("POST", url, headers=self._headers, timeout=self.timeout)
        if isinstance(result, Err):
            return Err(_remote("edits.commit", result.error))
        return Ok(None)


class PlayConnector:
    """Authenticate, then hand out an AndroidPublisherClient."""

    def __init__(
        self,
        *,
        tokens: TokenProvider,
        http: HttpClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        upload_timeout: float = DEFAULT_UPLOAD_TIMEOUT_SECONDS,
    ) -> None:
        self.tokens = tokens
        self.http = http or RealHttpClient()
        self.timeout = timeout
        self.upload_timeout = upload_timeout

    def connect(self) -> Result[EditClient, AuthFailed]:
        token = self.tokens.access_token()
        if isinstance(token, Err):
            return token
        return Ok(
            AndroidPublisherClient(
                access_token=token.value,
                http=self.http,
                timeout=self.timeout,
                upload_timeout=self.upload_timeout,
            )
        )
