"""Typer application and CLI entry point for workers-login.

This module builds the top-level Typer application and registers the
built-in commands (``login``, ``logout``, ``status``, ``scopes`` and the
``config`` group).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app. :class:`~workers_login.exceptions.WorkersLoginError`
is reported on stderr and mapped to its exit code; anything else is
written to a crash log under the data directory.

See Also:
    :mod:`workers_login.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from workers_login import __version__
from workers_login.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="workers-login",
    help="Log in to the Workers platform with OAuth2 from the command line.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"workers-login {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip confirmations."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~workers_login.output.OutputManager` and
    stores shared options in ``ctx.obj``.
    """
    from workers_login.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
        )
    )

    ctx.ensure_object(dict)
    ctx.obj["force"] = force
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback to disk and return the log file path."""
    from workers_login.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #

from workers_login.commands.config import config_app  # noqa: E402
from workers_login.commands.login import (  # noqa: E402
    login_command,
    logout_command,
    scopes_command,
    status_command,
)

app.command("login")(login_command)
app.command("logout")(logout_command)
app.command("status")(status_command)
app.command("scopes")(scopes_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point invoked by the ``workers-login`` console script.

    Commands report their own :class:`~workers_login.exceptions.WorkersLoginError`
    failures; anything that escapes them is handled here.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app(args=argv)
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from workers_login.exceptions import WorkersLoginError
        from workers_login.output import error

        if isinstance(exc, WorkersLoginError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
