from __future__ import annotations

import os
from pathlib import Path

import typer

from gplay.cli.commands._helpers import exit_with_code, fail, unwrap_config
from gplay.cli.context import CLIContext, build_context
from gplay.core.result import Err
from gplay.output.console import Style
from gplay.output.errors import print_publish_error, publish_error_exit_code
from gplay.publish.auth import (
    GcloudTokenProvider,
    ServiceAccountKeyProvider,
    StaticTokenProvider,
    TokenProvider,
)
from gplay.publish.binaries import FixedPackageName, PackageReader, ToolPackageReader
from gplay.publish.contracts import PublishConfig
from gplay.publish.orchestrator import publish as run_publish
from gplay.publish.play_api import PlayConnector


def _token_provider(
    ctx: CLIContext,
    *,
    access_token: str | None,
    impersonate: str | None,
    key_file: Path | None = None,
) -> TokenProvider:
    """Pick credentials: options first, then the environment, then gplay.toml, then gcloud."""
    if access_token:
        return StaticTokenProvider(access_token)
    if key_file is not None:
        return ServiceAccountKeyProvider(key_file)
    env_token = os.environ.get(ctx.config.auth.access_token_env)
    if env_token:
        ctx.console.debug(f"using access token from ${ctx.config.auth.access_token_env}")
        return StaticTokenProvider(env_token)
    if ctx.config.auth.service_account_key is not None:
        ctx.console.debug(f"using service account key {ctx.config.auth.service_account_key}")
        return ServiceAccountKeyProvider(ctx.config.auth.service_account_key)
    account = impersonate or ctx.config.auth.impersonate_service_account
    return GcloudTokenProvider(impersonate=account)


def _package_reader(package_name: str | None) -> PackageReader:
    if package_name:
        return FixedPackageName(package_name)
    return ToolPackageReader()


def publish(
    binary: str = typer.Option(
        ..., "--binary", "-b", help="APK or AAB to publish (path or glob; first match wins)"
    ),
    additional_binaries: list[str] | None = typer.Option(
        None, "--additional-binary", help="Extra APK/AAB to upload with the primary (repeatable)"
    ),
    track: str | None = typer.Option(
        None, "--track", "-t", help="Track: internal|alpha|beta|production|rollout|<custom>"
    ),
    user_fraction: float | None = typer.Option(
        None, "--user-fraction", help="Share of users for the rollout track, in (0, 1]"
    ),
    changelog: Path | None = typer.Option(
        None, "--changelog", help="Changelog file attached to every uploaded version code"
    ),
    changelog_language: str | None = typer.Option(
        None, "--changelog-language", help="Language of --changelog (default: en-US)"
    ),
    metadata_root: Path | None = typer.Option(
        None, "--metadata", help="Fastlane-style metadata directory (one folder per language)"
    ),
    package_name: str | None = typer.Option(
        None, "--package-name", help="Application id (skips reading it from the binary)"
    ),
    access_token: str | None = typer.Option(
        None, "--access-token", help="OAuth access token (default: env, key file, gcloud)"
    ),
    service_account_key: Path | None = typer.Option(
        None, "--service-account-key", help="Service-account JSON key file used to get a token"
    ),
    impersonate: str | None = typer.Option(
        None, "--impersonate-service-account", help="Service account for gcloud tokens"
    ),
    max_workers: int | None = typer.Option(
        None, "--max-workers", help="Concurrent uploads per step (default: 4)"
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Timeout in seconds for non-upload API calls"
    ),
    config_path: Path | None = typer.Option(None, "--config", help="Path to gplay.toml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show diagnostic output"),
) -> None:
    """Upload binaries, update a track, attach metadata, and commit in one edit."""
    ctx = build_context(config_path=config_path, verbose=verbose)
    defaults = ctx.config.publish

    track_name = track or defaults.track
    if track_name is None:
        fail(ctx, "no track given", hint="pass --track or set publish.track in gplay.toml")

    config = PublishConfig(
        binary=binary,
        track=track_name,
        additional_binaries=tuple(additional_binaries or ()),
        user_fraction=user_fraction,
        changelog_path=changelog,
        metadata_root=metadata_root,
        changelog_language=changelog_language or defaults.changelog_language,
        package_name=package_name,
        max_workers=max_workers if max_workers is not None else defaults.max_workers,
    )
    unwrap_config(config.validate(), ctx)

    connector = PlayConnector(
        tokens=_token_provider(
            ctx,
            access_token=access_token,
            impersonate=impersonate,
            key_file=service_account_key,
        ),
        timeout=timeout if timeout is not None else ctx.config.remote.timeout_seconds,
        upload_timeout=ctx.config.remote.upload_timeout_seconds,
    )

    result = run_publish(
        config,
        connector=connector,
        package_reader=_package_reader(package_name),
        console=ctx.console,
    )
    if isinstance(result, Err):
        print_publish_error(result.error, ctx.console)
        exit_with_code(publish_error_exit_code(result.error))

    report = result.value
    codes = ", ".join(str(code) for code in report.version_codes)
    ctx.console.success(f"published {report.package_name} to {report.track} [{codes}]")
    for artifact in report.artifacts:
        ctx.console.print(
            f"  {artifact.path} -> {artifact.version_code} (sha256 {artifact.content_hash[:12]})",
            Style.DIM,
        )
    if report.languages:
        ctx.console.print(f"  metadata: {', '.join(report.languages)}", Style.DIM)
