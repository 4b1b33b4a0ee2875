"""Config commands -- view and modify the user configuration.

Provides the ``workers-login config`` sub-command group for reading and
updating :class:`~workers_login.models.LoginConfig`. Settings are stored in
the workers-login config directory and supply the client id, endpoints and
callback address used by ``workers-login login``.
"""

from __future__ import annotations

import typer

from workers_login.output import error, get_output, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration.

    Prints the config file path followed by every setting after project
    and user files have been merged. The client secret is masked.

    Example::

        workers-login config show
        workers-login config show --json
    """
    from workers_login.config import config_path, resolve_config
    from workers_login.exceptions import WorkersLoginError

    try:
        config = resolve_config()
    except WorkersLoginError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    info(f"Config file: {config_path()}")
    rows = []
    for key, value in config.model_dump(mode="json").items():
        if key == "client_secret" and value:
            value = "********"
        rows.append([key, "" if value is None else str(value)])
    get_output().print_table(["Key", "Value"], rows, title="Configuration")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key, e.g. 'client_id'."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    The value is coerced to the field's type and validated before saving.

    Example::

        workers-login config set client_id 54d11594-84e4-41aa-b438-e81b8fa78ee7
        workers-login config set callback_timeout 300
    """
    from workers_login.config import set_config_value
    from workers_login.exceptions import WorkersLoginError

    try:
        set_config_value(key, value)
    except WorkersLoginError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success(f"Set {key} = {value if key != 'client_secret' else '********'}")
