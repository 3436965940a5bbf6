"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from gplay.core.config import ConfigError
from gplay.core.errors import ErrorCode
from gplay.core.result import Err, Result
from gplay.output.console import Style

if TYPE_CHECKING:
    from gplay.cli.context import CLIContext


def fail(
    ctx: CLIContext,
    message: str,
    *,
    hint: str | None = None,
    code: ErrorCode = ErrorCode.USER_ERROR,
) -> NoReturn:
    """Report a command-level failure (bad options, unusable input) and exit."""
    ctx.console.error(message)
    if hint:
        ctx.console.print(f"hint: {hint}", Style.DIM)
    raise typer.Exit(code=int(code))


def unwrap_config[T](result: Result[T, ConfigError], ctx: CLIContext) -> T:
    """Return the value of a config Result, or exit as a user error."""
    if isinstance(result, Err):
        error = result.error
        hint = f"check {error.path}" if error.path is not None else None
        fail(ctx, error.message, hint=hint)
    return result.value


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)
