"""Exception hierarchy for workers-login.

All exceptions inherit from :class:`WorkersLoginError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`workers_login.exit_codes`.
The top-level error handler in :func:`workers_login.app.main` catches
``WorkersLoginError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Every failure of a login attempt is terminal for that attempt. Messages are
meant for the user and never contain the PKCE verifier, the CSRF token, the
authorization code or the access token.

Subclass hierarchy::

    WorkersLoginError (exit 1)
    +-- ConfigError                    (exit 1)
    +-- InvalidUsageError              (exit 2)
    |   +-- InvalidScopeError          (exit 2)
    +-- LoginError                     (exit 3)
        +-- BrowserPromptDeclinedError (exit 3)
        +-- ConsentDeniedError         (exit 3)
        +-- MalformedCallbackError     (exit 3)
        +-- CsrfMismatchError          (exit 3)
        +-- CallbackTimeoutError       (exit 4)
        +-- ListenerBindError          (exit 5)
        +-- TokenExchangeError         (exit 6)
        +-- PersistenceError           (exit 7)
"""

from __future__ import annotations

from workers_login.exit_codes import (
    EXIT_CALLBACK_TIMEOUT,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_LISTENER_ERROR,
    EXIT_LOGIN_FAILURE,
    EXIT_PERSISTENCE_FAILURE,
    EXIT_TOKEN_EXCHANGE_FAILURE,
)


class WorkersLoginError(Exception):
    """Base exception for all workers-login errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`workers_login.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(WorkersLoginError):
    """Raised for configuration problems (invalid JSON, failed validation, missing client id)."""

    exit_code = EXIT_GENERIC_FAILURE


class InvalidUsageError(WorkersLoginError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class InvalidScopeError(InvalidUsageError):
    """Raised when a requested scope is not on the allow-list.

    Args:
        scope: The first requested scope that did not match.
    """

    def __init__(self, scope: str):
        super().__init__(f"Invalid scope has been provided: {scope}")
        self.scope = scope


class LoginError(WorkersLoginError):
    """Base class for failures of an interactive login attempt."""

    exit_code = EXIT_LOGIN_FAILURE


class BrowserPromptDeclinedError(LoginError):
    """Raised when the user refuses to let the tool open a browser."""

    def __init__(self) -> None:
        super().__init__(
            "In order to log in you must allow workers-login to open your browser."
        )


class ConsentDeniedError(LoginError):
    """Raised when the user declines consent on the authorization page.

    Args:
        error: Optional ``error`` code reported by the authorization server
            (e.g. ``access_denied``).
    """

    def __init__(self, error: str | None = None):
        message = "Consent denied. You must grant consent in order to log in."
        if error:
            printable = "".join(ch if ch.isprintable() else "?" for ch in error)
            message += f" (authorization server reported: {printable})"
        super().__init__(message)
        self.error = error


class MalformedCallbackError(LoginError):
    """Raised when the redirect carries only one of ``code`` and ``state``.

    Args:
        missing: Name of the query parameter that was absent.
    """

    def __init__(self, missing: str):
        super().__init__(
            "Failed to receive authorization code and/or CSRF state from the "
            f"local callback server (missing '{missing}')"
        )
        self.missing = missing


class CsrfMismatchError(LoginError):
    """Raised when the returned ``state`` differs from the session's CSRF token."""

    def __init__(self) -> None:
        super().__init__(
            "Redirect CSRF state check failed. The callback did not originate "
            "from this login attempt."
        )


class CallbackTimeoutError(LoginError):
    """Raised when no redirect reaches the local listener in time.

    Args:
        timeout: The wait bound in seconds.
    """

    exit_code = EXIT_CALLBACK_TIMEOUT

    def __init__(self, timeout: float):
        super().__init__(
            f"Timed out after {timeout:g}s waiting for the authorization redirect"
        )
        self.timeout = timeout


class ListenerBindError(LoginError):
    """Raised when the local callback listener cannot bind its address.

    Args:
        host: Host the listener tried to bind.
        port: Port the listener tried to bind.
        reason: The underlying OS error text.
    """

    exit_code = EXIT_LISTENER_ERROR

    def __init__(self, host: str, port: int, reason: str):
        super().__init__(
            f"Could not start the local callback server on {host}:{port}: {reason}"
        )
        self.host = host
        self.port = port


class TokenExchangeError(LoginError):
    """Raised when the authorization code cannot be exchanged for a token."""

    exit_code = EXIT_TOKEN_EXCHANGE_FAILURE


class PersistenceError(LoginError):
    """Raised when the credential store fails to save the new credential."""

    exit_code = EXIT_PERSISTENCE_FAILURE
