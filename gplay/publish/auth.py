"""Access tokens for the Android Publisher API.

Exchanging credentials for a token is delegated to gcloud. The caller either
provides a token (typically from a CI secret), hands over a service-account
JSON key file, or relies on the account gcloud already has.
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Protocol

from gplay.core.result import Err, Ok, Result
from gplay.core.structured import as_str_dict, get_str
from gplay.platform.process import run as run_process
from gplay.publish.errors import AuthFailed

ANDROID_PUBLISHER_SCOPE = "https://www.googleapis.com/auth/androidpublisher"

GCLOUD_TIMEOUT_SECONDS = 60.0


class TokenProvider(Protocol):
    def access_token(self) -> Result[str, AuthFailed]: ...


class StaticTokenProvider:
    def __init__(self, token: str) -> None:
        self._token = token

    def access_token(self) -> Result[str, AuthFailed]:
        token = self._token.strip()
        if not token:
            return Err(AuthFailed(reason="empty access token"))
        return Ok(token)


class GcloudTokenProvider:
    """Ask the gcloud CLI for an access token of the active account.

    With `impersonate` set, gcloud mints the token for that service account,
    which needs the Android Publisher scope granted in the Play Console.
    """

    def __init__(self, *, impersonate: str | None = None, gcloud: str = "gcloud") -> None:
        self.impersonate = impersonate
        self.gcloud = gcloud

    def command(self) -> list[str]:
        cmd = [self.gcloud, "auth", "print-access-token"]
        if self.impersonate:
            cmd.append(f"--impersonate-service-account={self.impersonate}")
            cmd.append(f"--scopes={ANDROID_PUBLISHER_SCOPE}")
        return cmd

    def access_token(self) -> Result[str, AuthFailed]:
        result = run_process(self.command(), timeout=GCLOUD_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                AuthFailed(
                    reason=f"gcloud could not provide an access token: {result.error.detail}",
                    hint="Run: gcloud auth login, or set the access token environment variable",
                )
            )
        token = result.value.strip()
        if not token:
            return Err(AuthFailed(reason="gcloud returned an empty access token"))
        return Ok(token)


class ServiceAccountKeyProvider:
    """Mint a token from a service-account JSON key file.

    The key is activated in a throwaway gcloud config directory, so the
    user's own gcloud accounts and defaults are left untouched.
    """

    def __init__(self, key_file: Path, *, gcloud: str = "gcloud") -> None:
        self.key_file = key_file
        self.gcloud = gcloud

    def read_account(self) -> Result[str, AuthFailed]:
        """Return the key's client_email, checking it is a service-account key."""
        try:
            data = as_str_dict(json.loads(self.key_file.read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError) as e:
            return Err(AuthFailed(reason=f"cannot read key file {self.key_file}: {e}"))
        except json.JSONDecodeError as e:
            return Err(AuthFailed(reason=f"key file {self.key_file} is not JSON: {e}"))

        if data is None or get_str(data, "type") != "service_account":
            return Err(
                AuthFailed(
                    reason=f"{self.key_file} is not a service-account key",
                    hint="Download a JSON key for the service account from the Cloud console",
                )
            )
        account = get_str(data, "client_email")
        if not account:
            return Err(AuthFailed(reason=f"{self.key_file} has no client_email"))
        return Ok(account)

    def commands(self, account: str) -> list[list[str]]:
        return [
            [
                self.gcloud,
                "auth",
                "activate-service-account",
                account,
                f"--key-file={self.key_file}",
            ],
            [
                self.gcloud,
                "auth",
                "print-access-token",
                account,
                f"--scopes={ANDROID_PUBLISHER_SCOPE}",
            ],
        ]

    def access_token(self) -> Result[str, AuthFailed]:
        account = self.read_account()
        if isinstance(account, Err):
            return account

        with tempfile.TemporaryDirectory(prefix="gplay-gcloud-") as config_dir:
            output = ""
            for cmd in self.commands(account.value):
                result = run_process(
                    cmd,
                    env_overrides={"CLOUDSDK_CONFIG": config_dir},
                    timeout=GCLOUD_TIMEOUT_SECONDS,
                )
                if isinstance(result, Err):
                    return Err(
                        AuthFailed(
                            reason=f"service account {account.value}: {result.error.detail}",
                            hint="Check that the key is active and gcloud is installed",
                        )
                    )
                output = result.value

        token = output.strip()
        if not token:
            return Err(AuthFailed(reason="gcloud returned an empty access token"))
        return Ok(token)
