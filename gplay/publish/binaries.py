from __future__ import annotations

import glob
import hashlib
import re
from pathlib import Path
from typing import Protocol

from gplay.core.result import Err, Ok, Result
from gplay.platform.process import run as run_process
from gplay.publish.errors import InvalidBinary
from gplay.publish.model import BinaryFile, BinaryKind

APK_MIME_TYPE = "application/vnd.android.package-archive"
AAB_MIME_TYPE = "application/octet-stream"

PACKAGE_TOOL_TIMEOUT_SECONDS = 60.0

_PACKAGE_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*(\.[A-Za-z][A-Za-z0-9_]*)+$")


def resolve_glob_path(pattern: str) -> Path:
    """Resolve a path that may be a glob pattern; the first match wins.

    CI systems sometimes pass paths wrapped in quotes, which would never
    match, so quotes are stripped first. Without a match the literal path is
    returned and validated by the caller.
    """
    cleaned = pattern.replace('"', "").strip()
    matches = sorted(glob.glob(cleaned))
    if matches:
        return Path(matches[0])
    return Path(cleaned)


def binary_kind(path: Path) -> BinaryKind | None:
    match path.suffix.lower():
        case ".apk":
            return "apk"
        case ".aab":
            return "aab"
        case _:
            return None


def binary_mime_type(binary: BinaryFile) -> str:
    return APK_MIME_TYPE if binary.kind == "apk" else AAB_MIME_TYPE


def _check_binary(path: Path) -> Result[BinaryFile, InvalidBinary]:
    kind = binary_kind(path)
    if kind is None:
        return Err(InvalidBinary(path=path, reason="expected an .apk or .aab file"))
    try:
        if not path.is_file():
            return Err(InvalidBinary(path=path, reason="file not found"))
    except OSError as e:
        return Err(InvalidBinary(path=path, reason=str(e)))
    return Ok(BinaryFile(path=path, kind=kind))


def resolve_binaries(
    primary: str, additional: tuple[str, ...]
) -> Result[tuple[BinaryFile, ...], InvalidBinary]:
    """Resolve the primary and additional binaries, primary first, without duplicates."""
    binaries: list[BinaryFile] = []
    seen: set[Path] = set()
    for pattern in (primary, *additional):
        checked = _check_binary(resolve_glob_path(pattern))
        if isinstance(checked, Err):
            return checked
        key = checked.value.path.resolve()
        if key in seen:
            continue
        seen.add(key)
        binaries.append(checked.value)
    return Ok(tuple(binaries))


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


class PackageReader(Protocol):
    def read_package_name(self, binary: BinaryFile) -> Result[str, InvalidBinary]: ...


class FixedPackageName:
    """Package name given explicitly (no manifest parsing)."""

    def __init__(self, package_name: str) -> None:
        self.package_name = package_name

    def read_package_name(self, binary: BinaryFile) -> Result[str, InvalidBinary]:
        if not _PACKAGE_NAME_RE.match(self.package_name):
            return Err(
                InvalidBinary(
                    path=binary.path, reason=f"invalid package name: {self.package_name!r}"
                )
            )
        return Ok(self.package_name)


class ToolPackageReader:
    """Read the package name from the binary's manifest with the Android SDK tools.

    APKs go through `aapt2 dump packagename`, app bundles through
    `bundletool dump manifest`.
    """

    def __init__(self, *, aapt2: str = "aapt2", bundletool: str = "bundletool") -> None:
        self.aapt2 = aapt2
        self.bundletool = bundletool

    def command(self, binary: BinaryFile) -> list[str]:
        if binary.kind == "apk":
            return [self.aapt2, "dump", "packagename", str(binary.path)]
        return [
            self.bundletool,
            "dump",
            "manifest",
            "--bundle",
            str(binary.path),
            "--xpath",
            "/manifest/@package",
        ]

    def read_package_name(self, binary: BinaryFile) -> Result[str, InvalidBinary]:
        result = run_process(self.command(binary), timeout=PACKAGE_TOOL_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                InvalidBinary(
                    path=binary.path,
                    reason=f"package name extraction failed: {result.error.detail}",
                )
            )

        package_name = result.value.strip()
        if not _PACKAGE_NAME_RE.match(package_name):
            return Err(
                InvalidBinary(
                    path=binary.path,
                    reason=f"unexpected package name output: {package_name!r}",
                )
            )
        return Ok(package_name)
