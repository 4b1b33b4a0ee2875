"""Interactive OAuth2 Authorization Code + PKCE login.

The main entry point is :class:`LoginOrchestrator`, which wires together:

- :func:`resolve_scopes` -- scope allow-list validation.
- :class:`AuthorizationRequestBuilder` -- per-attempt PKCE verifier, CSRF
  token and authorization URL.
- :class:`CallbackServer` and :class:`ResultChannel` -- the localhost
  listener and the single-slot handoff to the waiting flow.
- :func:`verify_state` -- the CSRF check.
- :class:`TokenExchanger` -- the code-for-token exchange.
- :class:`CredentialStore` -- the default credential persistence.

Typical usage::

    from workers_login.auth import CredentialStore, LoginOrchestrator

    credential = LoginOrchestrator(config, CredentialStore()).run(["user:read"])
"""

from workers_login.auth.callback_server import CallbackServer
from workers_login.auth.channel import ResultChannel
from workers_login.auth.credential_store import CredentialSink, CredentialStore
from workers_login.auth.csrf import verify_state
from workers_login.auth.exchange import ExchangeResult, TokenExchanger
from workers_login.auth.login import LoginOrchestrator, LoginState
from workers_login.auth.outcome import (
    CallbackOutcome,
    Denied,
    Granted,
    Malformed,
    Unmatched,
    classify_request,
)
from workers_login.auth.scopes import ALLOWED_SCOPES, resolve_scopes
from workers_login.auth.session import (
    AuthorizationRequestBuilder,
    AuthorizationSession,
    derive_challenge,
)

__all__ = [
    "ALLOWED_SCOPES",
    "AuthorizationRequestBuilder",
    "AuthorizationSession",
    "CallbackOutcome",
    "CallbackServer",
    "CredentialSink",
    "CredentialStore",
    "Denied",
    "ExchangeResult",
    "Granted",
    "LoginOrchestrator",
    "LoginState",
    "Malformed",
    "ResultChannel",
    "TokenExchanger",
    "Unmatched",
    "classify_request",
    "derive_challenge",
    "resolve_scopes",
    "verify_state",
]
