"""Interactive OAuth2 Authorization Code login with PKCE.

:class:`LoginOrchestrator` runs one login attempt through these states::

    IDLE -> SCOPES_RESOLVED -> SESSION_BUILT -> SERVER_LISTENING
         -> AWAITING_CALLBACK -> GRANTED -> CSRF_CHECKED
         -> TOKEN_EXCHANGED -> PERSISTED

Terminal failures are ``DENIED``, ``MALFORMED``, ``TIMED_OUT`` and
``FAILED``. Any error ends the attempt and is re-raised with its own
exception type; a new :meth:`LoginOrchestrator.run` starts over with fresh
secrets.

The callback is checked in a fixed order: denial, then structure, then the
CSRF ``state``, and only then is the code exchanged. The local listener is
bound before the browser is opened and is released as soon as the wait
ends, whether an outcome arrived or the timeout fired.
"""

from __future__ import annotations

import enum
import logging
import webbrowser
from typing import Callable, Iterable, Optional

import httpx
import typer

from workers_login.auth.callback_server import CallbackServer
from workers_login.auth.channel import ResultChannel
from workers_login.auth.credential_store import CredentialSink
from workers_login.auth.csrf import verify_state
from workers_login.auth.exchange import TokenExchanger
from workers_login.auth.outcome import Denied, Granted, Malformed
from workers_login.auth.scopes import resolve_scopes
from workers_login.auth.session import AuthorizationRequestBuilder, AuthorizationSession
from workers_login.exceptions import (
    BrowserPromptDeclinedError,
    CallbackTimeoutError,
    ConfigError,
    ConsentDeniedError,
    MalformedCallbackError,
    PersistenceError,
)
from workers_login.models import Credential, LoginConfig, TokenType
from workers_login.output import info

logger = logging.getLogger(__name__)

BROWSER_PROMPT = "Allow workers-login to open a page in your browser?"


class LoginState(str, enum.Enum):
    IDLE = "idle"
    SCOPES_RESOLVED = "scopes_resolved"
    SESSION_BUILT = "session_built"
    SERVER_LISTENING = "server_listening"
    AWAITING_CALLBACK = "awaiting_callback"
    GRANTED = "granted"
    CSRF_CHECKED = "csrf_checked"
    TOKEN_EXCHANGED = "token_exchanged"
    PERSISTED = "persisted"
    DENIED = "denied"
    MALFORMED = "malformed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


_TERMINAL_FAILURES = frozenset(
    {LoginState.DENIED, LoginState.MALFORMED, LoginState.TIMED_OUT, LoginState.FAILED}
)


def _confirm(question: str) -> bool:
    return typer.confirm(question, default=True)


def _show_url(url: str) -> None:
    info("Could not open a browser. Open this URL to continue logging in:")
    info(url)


class LoginOrchestrator:
    """Sequences one interactive login and hands the credential to a store.

    Args:
        config: Resolved configuration; must carry a ``client_id``.
        store: Receives the new :class:`~workers_login.models.Credential`.
        confirm: Asks the user a yes/no question. Defaults to
            :func:`typer.confirm`.
        open_browser: Opens a URL, returning ``False`` when no browser could
            be launched. Defaults to :func:`webbrowser.open`.
        notify: Shows the authorization URL when the browser could not be
            opened.
        assume_yes: Skip the browser confirmation prompt.
        transport: Optional httpx transport for the token request.

    Raises:
        ConfigError: If ``config.client_id`` is not set.
    """

    def __init__(
        self,
        config: LoginConfig,
        store: CredentialSink,
        confirm: Callable[[str], bool] = _confirm,
        open_browser: Callable[[str], bool] = webbrowser.open,
        notify: Callable[[str], None] = _show_url,
        assume_yes: bool = False,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if not config.client_id:
            raise ConfigError(
                "No client id configured. Pass --client-id or run "
                "'workers-login config set client_id <id>'."
            )
        self._config = config
        self._client_id: str = config.client_id
        self._store = store
        self._confirm = confirm
        self._open_browser = open_browser
        self._notify = notify
        self._assume_yes = assume_yes
        self._transport = transport
        self.state = LoginState.IDLE

    def run(self, scopes: Optional[Iterable[str]] = None) -> Credential:
        """Perform a login attempt.

        Args:
            scopes: Scope names to request; ``None`` requests every allowed
                scope.

        Returns:
            The credential that was saved to the store.

        Raises:
            InvalidScopeError: A requested scope is not allowed.
            BrowserPromptDeclinedError: The user refused the browser prompt.
            ListenerBindError: The callback port is unavailable.
            CallbackTimeoutError: No redirect arrived in time.
            ConsentDeniedError: The user declined consent.
            MalformedCallbackError: The redirect lacked ``code`` or ``state``.
            CsrfMismatchError: The redirect's ``state`` is not ours.
            TokenExchangeError: The code could not be exchanged.
            PersistenceError: The store could not save the credential.
        """
        self._enter(LoginState.IDLE)
        try:
            return self._run(scopes)
        except Exception:
            if self.state not in _TERMINAL_FAILURES:
                self._enter(LoginState.FAILED)
            raise

    def _run(self, scopes: Optional[Iterable[str]]) -> Credential:
        resolved = resolve_scopes(scopes)
        self._enter(LoginState.SCOPES_RESOLVED)

        session = AuthorizationRequestBuilder(
            self._client_id,
            self._config.redirect_uri,
            self._config.authorization_url,
        ).build(resolved)
        self._enter(LoginState.SESSION_BUILT)

        if not self._assume_yes and not self._confirm(BROWSER_PROMPT):
            raise BrowserPromptDeclinedError()

        channel = ResultChannel()
        with CallbackServer(
            channel,
            host=self._config.callback_host,
            port=self._config.callback_port,
            callback_path=self._config.callback_path,
            granted_url=self._config.consent_granted_url,
            denied_url=self._config.consent_denied_url,
        ):
            self._enter(LoginState.SERVER_LISTENING)
            self._launch_browser(session.authorization_url)
            self._enter(LoginState.AWAITING_CALLBACK)
            info("Waiting for the authorization redirect from your browser...")
            try:
                outcome = channel.receive(self._config.callback_timeout)
            except CallbackTimeoutError:
                self._enter(LoginState.TIMED_OUT)
                raise

        if isinstance(outcome, Denied):
            self._enter(LoginState.DENIED)
            raise ConsentDeniedError(outcome.error)
        if isinstance(outcome, Malformed):
            self._enter(LoginState.MALFORMED)
            raise MalformedCallbackError(outcome.missing)
        assert isinstance(outcome, Granted)
        self._enter(LoginState.GRANTED)

        verify_state(session.csrf_token, outcome.state)
        self._enter(LoginState.CSRF_CHECKED)

        result = self._exchanger(session).exchange(outcome.code, session.pkce_verifier)
        self._enter(LoginState.TOKEN_EXCHANGED)

        credential = Credential(
            token_type=TokenType.OAUTH,
            secret=result.access_token,
            scopes=list(resolved),
        )
        try:
            self._store.save(credential)
        except OSError as exc:
            raise PersistenceError(f"Could not save the credential: {exc}") from exc
        self._enter(LoginState.PERSISTED)
        return credential

    def _exchanger(self, session: AuthorizationSession) -> TokenExchanger:
        return TokenExchanger(
            client_id=self._client_id,
            token_url=self._config.token_url,
            redirect_uri=session.redirect_uri,
            client_secret=self._config.client_secret,
            timeout=self._config.token_timeout,
            transport=self._transport,
        )

    def _launch_browser(self, url: str) -> None:
        try:
            opened = self._open_browser(url)
        except Exception as exc:  # launcher failures only cost the automatic open
            logger.debug("Browser launch failed: %s", exc)
            opened = False
        if not opened:
            self._notify(url)

    def _enter(self, state: LoginState) -> None:
        logger.debug("Login state: %s -> %s", self.state.value, state.value)
        self.state = state
