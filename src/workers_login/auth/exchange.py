"""Authorization-code-for-token exchange against the token endpoint.

Uses authlib's httpx :class:`~authlib.integrations.httpx_client.OAuth2Client`.
The client id (and the secret, when one is configured) travel in the form
body and never in a Basic ``Authorization`` header. The PKCE
verifier is sent as ``code_verifier``.

A code is single-use, so a failed exchange is never retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
from authlib.integrations.httpx_client import OAuth2Client, OAuthError

from workers_login.exceptions import TokenExchangeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExchangeResult:
    access_token: str = field(repr=False)
    token_type: str


class TokenExchanger:
    """Trades an authorization code plus PKCE verifier for an access token.

    Args:
        client_id: OAuth client identifier.
        token_url: The token endpoint.
        redirect_uri: The redirect URI used in the authorization request.
        client_secret: Optional client secret; sent in the body.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests pass an
            :class:`httpx.MockTransport`).
    """

    def __init__(
        self,
        client_id: str,
        token_url: str,
        redirect_uri: str,
        client_secret: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._token_url = token_url
        self._redirect_uri = redirect_uri
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> OAuth2Client:
        kwargs: dict[str, Any] = {"timeout": self._timeout}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return OAuth2Client(
            client_id=self._client_id,
            client_secret=self._client_secret,
            token_endpoint_auth_method=(
                "client_secret_post" if self._client_secret else "none"
            ),
            redirect_uri=self._redirect_uri,
            **kwargs,
        )

    def exchange(self, code: str, verifier: str) -> ExchangeResult:
        """Perform the exchange.

        Raises:
            TokenExchangeError: On network failure, an OAuth error response,
                an unparseable body, or a response without ``access_token``.
        """
        logger.debug("Exchanging authorization code at %s", self._token_url)
        try:
            with self._client() as client:
                token = client.fetch_token(
                    self._token_url,
                    grant_type="authorization_code",
                    code=code,
                    code_verifier=verifier,
                    redirect_uri=self._redirect_uri,
                )
        except OAuthError as exc:
            detail = exc.error
            if exc.description:
                detail = f"{detail}: {exc.description}"
            raise TokenExchangeError(f"Token exchange failed: {detail}") from exc
        except httpx.HTTPStatusError as exc:
            raise TokenExchangeError(
                f"Token exchange failed with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TokenExchangeError(f"Token exchange failed: {exc}") from exc
        except ValueError as exc:
            raise TokenExchangeError(
                "Token exchange failed: the token endpoint returned an unreadable response"
            ) from exc

        access_token = token.get("access_token")
        if not access_token:
            raise TokenExchangeError("Token response missing 'access_token' field")

        return ExchangeResult(
            access_token=str(access_token),
            token_type=str(token.get("token_type", "bearer")),
        )
