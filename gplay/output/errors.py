"""Error presentation utilities.

Centralized failure reporting and exit code mapping, so every failed run ends
with one report naming the step and the offending artifact.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from gplay.core.errors import ErrorCode
from gplay.output.console import Style
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
    error_step,
)

if TYPE_CHECKING:
    from gplay.output.console import ConsoleProtocol

__all__ = ["print_publish_error", "publish_error_exit_code"]


def print_publish_error(error: PublishError, console: ConsoleProtocol) -> None:
    """Print a publish error to console with appropriate formatting."""
    match error:
        case InvalidPublishConfig(reason=reason):
            console.error(f"invalid publish options: {reason}")
        case InvalidBinary(path=path, reason=reason):
            console.error(f"invalid binary {path}: {reason}")
        case AuthFailed(reason=reason, hint=hint):
            console.error(f"authentication failed: {reason}")
            if hint:
                console.print(f"hint: {hint}", Style.DIM)
        case EditOpenFailed(package_name=package_name, reason=reason):
            console.error(f"could not open an edit for {package_name}: {reason}")
        case BinaryUploadFailed(path=path, reason=reason):
            console.error(f"upload failed for {path}: {reason}")
        case TrackUpdateFailed(track=track, reason=reason):
            console.error(f"could not update track {track}: {reason}")
        case ChangelogUploadFailed(
            language_code=language, version_code=version_code, path=path, reason=reason
        ):
            if path is not None:
                console.error(f"changelog {path} ({language}): {reason}")
            else:
                console.error(
                    f"changelog for version code {version_code} ({language}) failed: {reason}"
                )
        case MetadataUploadFailed(language_code=language, stage=stage, path=path, reason=reason):
            target = f" ({path})" if path is not None else ""
            console.error(f"metadata {stage} failed for {language}{target}: {reason}")
        case CommitFailed(edit_id=edit_id, reason=reason):
            console.error(f"commit of edit {edit_id} failed: {reason}")
        case InvalidMetadataLayout(path=path, reason=reason):
            console.error(f"invalid metadata layout at {path}: {reason}")

    step = error_step(error)
    console.print(f"step: {step}", Style.DIM)
    if step not in ("validate_config", "resolve_binaries", "authenticate", "open_edit"):
        console.print("nothing was committed; the open edit will expire", Style.DIM)


def publish_error_exit_code(error: PublishError) -> int:
    """Get exit code for a publish error."""
    match error:
        case InvalidPublishConfig() | InvalidBinary() | InvalidMetadataLayout():
            return int(ErrorCode.USER_ERROR)
        case AuthFailed():
            return int(ErrorCode.AUTH_ERROR)
        case ChangelogUploadFailed(path=path) if path is not None:
            return int(ErrorCode.IO_ERROR)
        case _:
            return int(ErrorCode.PUBLISH_ERROR)
