"""Inspect command - show what a metadata tree would upload, without touching the store."""

from __future__ import annotations

from pathlib import Path

import typer

from gplay.cli.commands._helpers import exit_with_code, fail
from gplay.cli.context import build_context
from gplay.core.result import Err
from gplay.output.console import ConsoleProtocol, Style
from gplay.output.errors import publish_error_exit_code
from gplay.publish.images import group_by_type
from gplay.publish.metadata import LISTING_FILES, list_language_dirs, resolve_language
from gplay.publish.model import LanguageMetadata


def _print_language(metadata: LanguageMetadata, console: ConsoleProtocol) -> None:
    console.header(metadata.language_code)

    listing = metadata.listing
    for field_name in LISTING_FILES:
        value = getattr(listing, field_name)
        if value is None:
            continue
        first = value.splitlines()[0] if value else ""
        console.print(f"  {field_name}: {first}")
    if listing.is_empty:
        console.print("  listing: (none)", Style.DIM)

    for image_type, assets in group_by_type(metadata.images).items():
        names = ", ".join(asset.path.name for asset in assets)
        console.print(f"  {image_type}: {names}")

    match metadata.changelog_mode:
        case "none":
            console.print("  changelogs: (none)", Style.DIM)
        case mode if not metadata.changelogs:
            console.print(f"  changelogs: {mode}, nothing matched", Style.DIM)
        case mode:
            for entry in metadata.changelogs:
                source = entry.path.name if entry.path is not None else "?"
                console.print(f"  changelog {entry.version_code}: {source} ({mode})")


def inspect(
    metadata_root: Path = typer.Argument(..., help="Fastlane-style metadata directory"),
    version_codes: list[int] | None = typer.Option(
        None, "--version-code", help="Version code to match changelogs against (repeatable)"
    ),
    config_path: Path | None = typer.Option(None, "--config", help="Path to gplay.toml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show diagnostic output"),
) -> None:
    """Resolve a metadata tree offline and print listings, images and changelogs per language."""
    ctx = build_context(config_path=config_path, verbose=verbose)
    codes = tuple(version_codes or ())

    languages = list_language_dirs(metadata_root)
    if isinstance(languages, Err):
        ctx.console.error(f"{languages.error.path}: {languages.error.reason}")
        exit_with_code(publish_error_exit_code(languages.error))

    if not languages.value:
        ctx.console.warning(f"no language directories under {metadata_root}")
        return

    failures = 0
    for language_code, language_dir in languages.value:
        resolved = resolve_language(language_code, language_dir, codes)
        if isinstance(resolved, Err):
            error = resolved.error
            where = f" ({error.path})" if error.path is not None else ""
            ctx.console.error(f"{language_code} {error.stage}{where}: {error.reason}")
            failures += 1
            continue
        _print_language(resolved.value, ctx.console)

    ctx.console.newline()
    if failures:
        fail(ctx, f"{failures} language(s) could not be resolved")
    ctx.console.success(f"{len(languages.value)} language(s) resolved")
