"""workers-login -- interactive OAuth2 login for the command line.

Opens the authorization server's consent page in a browser, receives the
redirect on a short-lived localhost listener, verifies the CSRF ``state``,
exchanges the authorization code (with its PKCE verifier) for an access
token and stores the resulting credential.

Typical workflow::

    workers-login config set client_id <id>
    workers-login login --scope user:read --scope workers:write
    workers-login status

Modules:
    app: Typer application and CLI entry point.
    auth: The login flow and its components.
    models: Pydantic models for configuration and credentials.
    config: XDG-aware configuration loading and precedence.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr formatting with Rich support.
"""

__version__ = "0.1.0"
