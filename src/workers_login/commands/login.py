"""Login commands -- obtain, inspect and remove the stored OAuth credential.

Typical workflow::

    workers-login login                       # request every allowed scope
    workers-login login -s user:read -s zone:read
    workers-login status                      # show the stored credential
    workers-login logout                      # forget it
"""

from __future__ import annotations

from typing import List, Optional

import typer

from workers_login.output import error, get_output, info, success, suggest


def login_command(
    ctx: typer.Context,
    scopes: Optional[List[str]] = typer.Option(
        None,
        "--scope",
        "-s",
        help="Scope to request (repeatable). Defaults to every allowed scope.",
    ),
    client_id: Optional[str] = typer.Option(
        None, "--client-id", help="OAuth client id (overrides config)."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Seconds to wait for the browser redirect."
    ),
    port: Optional[int] = typer.Option(
        None, "--port", help="Local callback port (must match the registered redirect URI)."
    ),
) -> None:
    """Log in through the browser and store the resulting token.

    Opens the consent page, waits for the redirect on a localhost listener,
    exchanges the authorization code and saves the access token.

    Example::

        workers-login login --scope user:read
    """
    from workers_login.auth import CredentialStore, LoginOrchestrator
    from workers_login.config import resolve_config
    from workers_login.exceptions import WorkersLoginError
    from workers_login.output import debug

    force = ctx.obj.get("force", False) if ctx.obj else False

    try:
        config = resolve_config(
            cli_client_id=client_id, cli_timeout=timeout, cli_port=port
        )
        store = CredentialStore()
        orchestrator = LoginOrchestrator(config, store, assume_yes=force)
        debug(f"Redirect URI: {config.redirect_uri}")
        credential = orchestrator.run(scopes or None)
    except WorkersLoginError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success(f"Logged in. Granted scopes: {', '.join(credential.scopes)}")
    suggest(f"Credential saved to {store.path}")


def logout_command(ctx: typer.Context) -> None:
    """Remove the stored credential.

    Asks for confirmation unless ``--force`` is active.
    """
    from workers_login.auth import CredentialStore

    store = CredentialStore()
    if not store.path.is_file():
        info("Not logged in.")
        return

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Remove the stored credential?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    store.clear()
    success("Logged out.")


def status_command() -> None:
    """Show the stored credential without revealing the token."""
    from workers_login.auth import CredentialStore

    store = CredentialStore()
    credential = store.load()
    if credential is None:
        info("Not logged in.")
        suggest("Log in: workers-login login")
        return

    rows = [
        ["Token Type", credential.token_type.value],
        ["Token", credential.masked_secret()],
        ["Scopes", " ".join(credential.scopes) or "-"],
        ["Created At", credential.created_at.isoformat()],
        ["File", str(store.path)],
    ]
    get_output().print_table(["Field", "Value"], rows, title="Stored Credential")


def scopes_command() -> None:
    """List the scopes that may be requested."""
    from workers_login.auth import ALLOWED_SCOPES

    output = get_output()
    output.print_table(["Scope"], [[scope] for scope in ALLOWED_SCOPES], title="Allowed Scopes")
