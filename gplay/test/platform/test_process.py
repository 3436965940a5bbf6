"""Tests for gplay.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from gplay.core.result import Err, Ok
from gplay.platform.process import ProcessError, run


class TestProcessError:
    """Test ProcessError dataclass."""

    def test_str_short_command(self) -> None:
        error = ProcessError(
            command=("gcloud", "auth"), returncode=1, stdout="", stderr="not logged in"
        )
        assert str(error) == "gcloud auth failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("aapt2", "dump", "packagename", "app.apk"),
            returncode=1,
            stdout="",
            stderr="",
        )
        assert str(error) == "aapt2 dump packagename ... failed (exit 1)"

    def test_detail_prefers_last_stderr_line(self) -> None:
        error = ProcessError(("x",), 1, "out", "warning: a\nERROR: no credentials\n")
        assert error.detail == "ERROR: no credentials"

    def test_detail_falls_back_to_stdout_then_str(self) -> None:
        assert ProcessError(("x",), 1, "only stdout\n", "").detail == "only stdout"
        assert ProcessError(("x",), 2, "", "").detail == "x failed (exit 2)"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    """Test run function."""

    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('com.example.app')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert result.value.strip() == "com.example.app"

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import sys; sys.stderr.write('bad apk'); sys.exit(3)"],
            cwd=tmp_path,
        )

        assert isinstance(result, Err)
        assert result.error.returncode == 3
        assert "bad apk" in result.error.stderr

    def test_command_not_found(self) -> None:
        result = run(["nonexistent_command_12345"])

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert len(result.error.stderr) > 0

    def test_timeout(self) -> None:
        result = run([sys.executable, "-c", "import time; time.sleep(5)"], timeout=0.2)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert "timed out" in result.error.stderr

    def test_env_overrides_keep_inherited_environment(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GPLAY_INHERITED", "kept")
        script = "import os; print(os.environ['GPLAY_INHERITED'], os.environ['CLOUDSDK_CONFIG'])"

        result = run([sys.executable, "-c", script], env_overrides={"CLOUDSDK_CONFIG": "/tmp/x"})

        assert result == Ok("kept /tmp/x\n")
