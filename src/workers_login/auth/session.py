"""Per-attempt authorization session and the authorization URL it produces.

An :class:`AuthorizationSession` owns the two secrets of one login attempt:
the PKCE code verifier and the CSRF token sent as ``state``. Both are drawn
fresh from a cryptographically secure source by
:meth:`AuthorizationRequestBuilder.build`; a session is never persisted and
never reused for a second attempt.

URL construction and challenge derivation are delegated to authlib
(:rfc:`7636` S256).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from authlib.common.security import generate_token
from authlib.integrations.httpx_client import OAuth2Client
from authlib.oauth2.rfc7636 import create_s256_code_challenge

CODE_CHALLENGE_METHOD = "S256"

# 62-symbol alphabet: ~5.95 bits per character.
VERIFIER_LENGTH = 64
CSRF_TOKEN_LENGTH = 48


def derive_challenge(verifier: str) -> str:
    """Return the S256 code challenge for *verifier*."""
    return create_s256_code_challenge(verifier)


@dataclass(frozen=True)
class AuthorizationSession:
    """Secrets and parameters of a single login attempt.

    ``pkce_verifier`` and ``csrf_token`` are left out of ``repr``.
    """

    client_id: str
    redirect_uri: str
    scopes: tuple[str, ...]
    pkce_verifier: str = field(repr=False)
    pkce_challenge: str
    csrf_token: str = field(repr=False)
    authorization_url: str = field(repr=False)


class AuthorizationRequestBuilder:
    """Builds an :class:`AuthorizationSession` for a resolved scope set.

    Args:
        client_id: OAuth client identifier.
        redirect_uri: The local callback URI registered for the client.
        authorization_url: The authorization endpoint.
    """

    def __init__(self, client_id: str, redirect_uri: str, authorization_url: str) -> None:
        self._client_id = client_id
        self._redirect_uri = redirect_uri
        self._authorization_url = authorization_url

    def build(self, scopes: Sequence[str]) -> AuthorizationSession:
        """Generate fresh secrets and the URL to open in the browser.

        No network request is made.
        """
        verifier = generate_token(VERIFIER_LENGTH)
        csrf_token = generate_token(CSRF_TOKEN_LENGTH)

        with OAuth2Client(
            client_id=self._client_id,
            redirect_uri=self._redirect_uri,
            scope=list(scopes),
            code_challenge_method=CODE_CHALLENGE_METHOD,
        ) as client:
            url, state = client.create_authorization_url(
                self._authorization_url,
                state=csrf_token,
                code_verifier=verifier,
            )

        return AuthorizationSession(
            client_id=self._client_id,
            redirect_uri=self._redirect_uri,
            scopes=tuple(scopes),
            pkce_verifier=verifier,
            pkce_challenge=derive_challenge(verifier),
            csrf_token=state,
            authorization_url=url,
        )
