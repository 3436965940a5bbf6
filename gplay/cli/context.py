from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from gplay.core.config import CONFIG_FILE_NAME, Config, load_config, load_config_if_present
from gplay.core.errors import ErrorCode
from gplay.core.result import Err
from gplay.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol


def build_context(*, config_path: Path | None = None, verbose: bool = False) -> CLIContext:
    """Load gplay.toml (explicit path, or the current directory) and set up output.

    An explicit --config path must exist; the implicit one is optional.
    """
    if config_path is not None:
        config_result = load_config(config_path)
    else:
        config_result = load_config_if_present(Path.cwd() / CONFIG_FILE_NAME)

    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(config=config_result.value, console=RichConsole(verbose=verbose))
