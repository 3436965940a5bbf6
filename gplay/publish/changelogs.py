"""Match changelog files to the version codes uploaded in this run.

Rules, applied to the regular files directly inside <language>/changelogs/:
1. A file whose name without extension is a known version code ("100.txt")
   becomes the changelog of that version code.
2. Only when rule 1 matched nothing and the directory holds exactly one file,
   that file is applied to every known version code.
3. Otherwise nothing is attached for the language.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from gplay.core.result import Err, Ok, Result
from gplay.publish.errors import LayoutError
from gplay.publish.model import ChangelogEntry, ChangelogMatchMode

CHANGELOGS_DIR = "changelogs"


@dataclass(frozen=True, slots=True)
class ChangelogMatch:
    entries: tuple[ChangelogEntry, ...]
    mode: ChangelogMatchMode
    # Files that matched no version code (always empty for apply_to_all).
    unmatched: tuple[Path, ...] = ()


def read_changelog(path: Path) -> Result[str, LayoutError]:
    try:
        return Ok(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        return Err(LayoutError(path=path, message=f"cannot read changelog: {e}"))


def parse_version_code(path: Path) -> int | None:
    stem = path.stem
    if not stem.isdecimal():
        return None
    return int(stem)


def list_changelog_files(changelog_dir: Path) -> Result[tuple[Path, ...], LayoutError]:
    try:
        if not changelog_dir.is_dir():
            return Ok(())
        names = os.listdir(changelog_dir)
    except OSError as e:
        return Err(LayoutError(path=changelog_dir, message=f"cannot list directory: {e}"))

    files: list[Path] = []
    for name in names:
        path = changelog_dir / name
        try:
            if path.is_file():
                files.append(path)
        except OSError:
            continue
    return Ok(tuple(files))


def match_changelogs(
    language_code: str,
    changelog_dir: Path,
    known_version_codes: tuple[int, ...],
) -> Result[ChangelogMatch, LayoutError]:
    listed = list_changelog_files(changelog_dir)
    if isinstance(listed, Err):
        return listed
    files = listed.value

    known = set(known_version_codes)
    matched: dict[int, Path] = {}
    unmatched: list[Path] = []
    for path in files:
        version_code = parse_version_code(path)
        if version_code is None or version_code not in known:
            unmatched.append(path)
            continue
        # 100.txt and 100.md both name version 100: the first listed wins.
        matched.setdefault(version_code, path)

    if matched:
        entries: list[ChangelogEntry] = []
        for version_code, path in matched.items():
            text = read_changelog(path)
            if isinstance(text, Err):
                return text
            entries.append(
                ChangelogEntry(
                    language_code=language_code,
                    version_code=version_code,
                    text=text.value,
                    path=path,
                )
            )
        return Ok(
            ChangelogMatch(
                entries=tuple(entries), mode="by_version_code", unmatched=tuple(unmatched)
            )
        )

    if len(files) == 1:
        only = files[0]
        text = read_changelog(only)
        if isinstance(text, Err):
            return text
        entries = [
            ChangelogEntry(
                language_code=language_code,
                version_code=version_code,
                text=text.value,
                path=only,
            )
            for version_code in known_version_codes
        ]
        return Ok(ChangelogMatch(entries=tuple(entries), mode="apply_to_all"))

    return Ok(ChangelogMatch(entries=(), mode="none", unmatched=tuple(unmatched)))
