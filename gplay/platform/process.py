"""Run the external Android and Google Cloud tools (aapt2, bundletool, gcloud).

A tool that fails, cannot be started or runs past its timeout comes back as
Err(ProcessError); `run` itself never raises for those.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from gplay.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run"]

# Return code used when the tool never produced an exit status.
NOT_RUN = -1


@dataclass(frozen=True, slots=True)
class ProcessError:
    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        shown = " ".join(self.command[:3])
        if len(self.command) > 3:
            shown += " ..."
        return f"{shown} failed (exit {self.returncode})"

    @property
    def detail(self) -> str:
        """Last line of the tool's own diagnostics, for one-line reports."""
        text = self.stderr.strip() or self.stdout.strip()
        return text.splitlines()[-1] if text else str(self)


def _environment(overrides: Mapping[str, str] | None) -> dict[str, str] | None:
    if not overrides:
        return None
    return {**os.environ, **overrides}


def run(
    cmd: Sequence[str],
    *,
    cwd: Path | None = None,
    env_overrides: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run `cmd` to completion and return its stdout.

    `env_overrides` is layered over the inherited environment, so a caller can
    point a tool at private state (e.g. CLOUDSDK_CONFIG) without losing PATH.
    """
    command = tuple(cmd)
    try:
        proc = subprocess.run(
            command,
            cwd=cwd,
            env=_environment(env_overrides),
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return Err(ProcessError(command, NOT_RUN, partial, f"timed out after {timeout}s"))
    except OSError as e:
        return Err(ProcessError(command, NOT_RUN, "", str(e)))

    if proc.returncode != 0:
        return Err(ProcessError(command, proc.returncode, proc.stdout, proc.stderr))
    return Ok(proc.stdout)
