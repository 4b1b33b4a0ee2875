"""Canonical Pydantic models shared across workers-login modules.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`LoginConfig`.

**Credential models** -- produced by a successful login and handed to the
credential store:
    :class:`TokenType` and :class:`Credential`.

All models use Pydantic v2. Secret-bearing fields are excluded from
``repr`` so that a stray log line or traceback never prints them.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_AUTHORIZATION_URL = "https://dash.cloudflare.com/oauth2/auth"
DEFAULT_TOKEN_URL = "https://dash.cloudflare.com/oauth2/token"
DEFAULT_CONSENT_GRANTED_URL = (
    "https://welcome.developers.workers.dev/wrangler-oauth-consent-granted"
)
DEFAULT_CONSENT_DENIED_URL = (
    "https://welcome.developers.workers.dev/wrangler-oauth-consent-denied"
)


# --- Login Config ---


class LoginConfig(BaseModel):
    """Everything the interactive login needs besides the user's scope choice.

    The client identifier is plain configuration: it comes from the
    ``--client-id`` flag or a config file and is injected into the login
    flow at construction time.

    Example::

        LoginConfig(client_id="54d11594-84e4-41aa-b438-e81b8fa78ee7")
    """

    model_config = ConfigDict(validate_assignment=True)

    client_id: Optional[str] = Field(
        default=None, description="OAuth client identifier registered with the authorization server"
    )
    client_secret: Optional[str] = Field(
        default=None,
        repr=False,
        description="Client secret sent in the token request body, if the client has one",
    )
    authorization_url: str = Field(
        default=DEFAULT_AUTHORIZATION_URL, description="Authorization endpoint"
    )
    token_url: str = Field(default=DEFAULT_TOKEN_URL, description="Token endpoint")
    callback_host: str = Field(
        default="localhost", description="Host the local callback listener binds"
    )
    callback_port: int = Field(
        default=8976, ge=1, le=65535, description="Port the local callback listener binds"
    )
    callback_path: str = Field(
        default="/oauth/callback", description="Path registered as the redirect target"
    )
    consent_granted_url: str = Field(
        default=DEFAULT_CONSENT_GRANTED_URL,
        description="Page the browser is sent to after consent is granted",
    )
    consent_denied_url: str = Field(
        default=DEFAULT_CONSENT_DENIED_URL,
        description="Page the browser is sent to after consent is denied",
    )
    callback_timeout: float = Field(
        default=120.0, gt=0, description="Seconds to wait for the authorization redirect"
    )
    token_timeout: float = Field(
        default=30.0, gt=0, description="Seconds before the token request times out"
    )

    @field_validator("callback_path")
    @classmethod
    def _path_is_absolute(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("callback_path must start with '/'")
        return value

    @property
    def redirect_uri(self) -> str:
        """The redirect URI registered for this client."""
        return f"http://{self.callback_host}:{self.callback_port}{self.callback_path}"


# --- Credentials ---


class TokenType(str, enum.Enum):
    """Kind of token held by a :class:`Credential`."""

    OAUTH = "oauth"


class Credential(BaseModel):
    """The result of a successful login, ready for the credential store.

    Attributes:
        token_type: Always :attr:`TokenType.OAUTH` for interactive logins.
        secret: The access token. Hidden from ``repr``.
        scopes: Scopes requested for the token.
        created_at: UTC time the token was obtained.
    """

    token_type: TokenType = Field(default=TokenType.OAUTH)
    secret: str = Field(repr=False, description="The access token")
    scopes: list[str] = Field(default_factory=list)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the token was obtained",
    )

    def masked_secret(self) -> str:
        """Return a short preview of the secret suitable for display."""
        if len(self.secret) > 8:
            return self.secret[:4] + "..." + self.secret[-4:]
        return "*" * len(self.secret)
