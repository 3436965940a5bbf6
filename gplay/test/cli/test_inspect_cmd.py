from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from gplay.cli.app import app
from gplay.cli.context import CLIContext
from gplay.core.config import Config
from gplay.core.errors import ErrorCode
from gplay.output.console import MockConsole

runner = CliRunner()


def _patch(monkeypatch: pytest.MonkeyPatch) -> MockConsole:
    import gplay.cli.commands.inspect_cmd as inspect_cmd

    console = MockConsole()
    ctx = CLIContext(config=Config(), console=console)
    monkeypatch.setattr(inspect_cmd, "build_context", lambda **_: ctx)
    return console


def _write(path: Path, content: str | bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")


def test_inspect_prints_each_language(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    console = _patch(monkeypatch)
    _write(tmp_path / "en-US" / "title.txt", "My App\n")
    _write(tmp_path / "en-US" / "full_description.txt", "First line\nSecond line\n")
    _write(tmp_path / "en-US" / "changelogs" / "7.txt", "fixes")
    _write(tmp_path / "en-US" / "images" / "phoneScreenshots" / "1.png", b"png")
    (tmp_path / "fr-FR").mkdir()

    result = runner.invoke(app, ["inspect", str(tmp_path), "--version-code", "7"])

    assert result.exit_code == 0, result.output
    assert console.messages[0] == "en-US"
    assert "  title: My App" in console.messages
    assert "  full_description: First line" in console.messages
    assert "  phoneScreenshots: 1.png" in console.messages
    assert "  changelog 7: 7.txt (by_version_code)" in console.messages
    assert "fr-FR" in console.messages
    assert "  listing: (none)" in console.messages
    assert "OK 2 language(s) resolved" in console.messages


def test_inspect_without_version_codes(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    console = _patch(monkeypatch)
    _write(tmp_path / "en-US" / "changelogs" / "default.txt", "notes")

    result = runner.invoke(app, ["inspect", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "  changelogs: apply_to_all, nothing matched" in console.messages


def test_inspect_missing_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    console = _patch(monkeypatch)

    result = runner.invoke(app, ["inspect", str(tmp_path / "metadata")])

    assert result.exit_code == int(ErrorCode.USER_ERROR)
    assert console.has_error()


def test_inspect_empty_root_warns(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    console = _patch(monkeypatch)

    result = runner.invoke(app, ["inspect", str(tmp_path)])

    assert result.exit_code == 0
    assert console.find("no language directories")


def test_inspect_reports_broken_language(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    console = _patch(monkeypatch)
    _write(tmp_path / "en-US" / "changelogs" / "7.txt", b"\xff\xfe\xfa")
    _write(tmp_path / "fr-FR" / "title.txt", "Titre")

    result = runner.invoke(app, ["inspect", str(tmp_path), "--version-code", "7"])

    assert result.exit_code == int(ErrorCode.USER_ERROR)
    assert console.find("en-US changelog")
    assert "  title: Titre" in console.messages
