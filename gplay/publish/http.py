"""HTTP transport for the Android Publisher adapter.

This module provides:
- HttpClient: Protocol for JSON and media requests (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Protocol, runtime_checkable

from gplay.core.result import Err, Ok, Result
from gplay.core.structured import StrDict, as_str_dict, get_str, get_table

__all__ = [
    "HttpClient",
    "RealHttpClient",
    "MockHttpClient",
    "HttpError",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        body: StrDict | None = None,
        timeout: float,
    ) -> Result[StrDict, HttpError]:
        """Send an optional JSON body and parse the JSON object response."""
        ...

    def upload_file(
        self,
        url: str,
        path: Path,
        *,
        content_type: str,
        headers: dict[str, str],
        timeout: float,
    ) -> Result[StrDict, HttpError]:
        """POST a file as the raw request body (media upload)."""
        ...


def _error_message(raw: bytes, fallback: str) -> str:
    # Google APIs wrap failures as {"error": {"code": 403, "message": "..."}}.
    try:
        data = as_str_dict(json.loads(raw.decode("utf-8")))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return fallback
    if data is None:
        return fallback
    error = get_table(data, "error") or {}
    return get_str(error, "message") or fallback


def _parse_object(url: str, raw: bytes) -> Result[StrDict, HttpError]:
    if not raw.strip():
        return Ok({})
    try:
        data = as_str_dict(json.loads(raw.decode("utf-8")))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))
    if data is None:
        return Err(HttpError(url=url, status=0, message="Expected JSON object"))
    return Ok(data)


class RealHttpClient:
    """Real HTTP client using urllib.

    Handles:
    - HTTPS with system certificates
    - JSON request/response bodies
    - Streaming file uploads (the file is never read fully into memory)
    - Google API error payloads
    """

    def __init__(self, user_agent: str = "gplay-release") -> None:
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _send(
        self,
        req: urllib.request.Request,
        *,
        timeout: float,
    ) -> Result[StrDict, HttpError]:
        url = req.full_url
        try:
            with urllib.request.urlopen(
                req, timeout=timeout, context=self._ssl_context
            ) as response:
                return _parse_object(url, response.read())
        except urllib.error.HTTPError as e:
            return Err(
                HttpError(url=url, status=e.code, message=_error_message(e.read(), str(e.reason)))
            )
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        body: StrDict | None = None,
        timeout: float,
    ) -> Result[StrDict, HttpError]:
        all_headers = {"User-Agent": self.user_agent, **headers}
        data: bytes | None = None
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            all_headers["Content-Type"] = "application/json; charset=utf-8"
        req = urllib.request.Request(url, data=data, headers=all_headers, method=method)
        return self._send(req, timeout=timeout)

    def upload_file(
        self,
        url: str,
        path: Path,
        *,
        content_type: str,
        headers: dict[str, str],
        timeout: float,
    ) -> Result[StrDict, HttpError]:
        try:
            size = path.stat().st_size
            stream: BinaryIO = path.open("rb")
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=f"cannot read {path}: {e}"))

        all_headers = {
            "User-Agent": self.user_agent,
            "Content-Type": content_type,
            "Content-Length": str(size),
            **headers,
        }
        with stream:
            req = urllib.request.Request(url, data=stream, headers=all_headers, method="POST")
            return self._send(req, timeout=timeout)


@dataclass(frozen=True, slots=True)
class MockRequest:
    method: str
    url: str
    body: StrDict | None
    path: Path | None = None
    content_type: str | None = None
    headers: dict[str, str] | None = None


class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are keyed by (method, url); unknown requests get a 404.

    Usage:
        http = MockHttpClient()
        http.set_json("POST", f"{BASE}/applications/com.example/edits", {"id": "e1"})
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], StrDict | HttpError] = {}
        self.requests: list[MockRequest] = []

    def set_json(self, method: str, url: str, response: StrDict | HttpError) -> None:
        self._responses[(method, url)] = response

    def _respond(self, method: str, url: str) -> Result[StrDict, HttpError]:
        response = self._responses.get((method, url))
        if response is None:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        body: StrDict | None = None,
        timeout: float,
    ) -> Result[StrDict, HttpError]:
        self.requests.append(MockRequest(method=method, url=url, body=body, headers=headers))
        return self._respond(method, url)

    def upload_file(
        self,
        url: str,
        path: Path,
        *,
        content_type: str,
        headers: dict[str, str],
        timeout: float,
    ) -> Result[StrDict, HttpError]:
        self.requests.append(
            MockRequest(
                method="POST",
                url=url,
                body=None,
                path=path,
                content_type=content_type,
                headers=headers,
            )
        )
        return self._respond("POST", url)
