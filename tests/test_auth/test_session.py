"""Tests for authorization session building and PKCE derivation."""

from __future__ import annotations

import base64
import hashlib
import string
from urllib.parse import parse_qs, urlsplit

import pytest

from workers_login.auth.session import (
    CODE_CHALLENGE_METHOD,
    CSRF_TOKEN_LENGTH,
    VERIFIER_LENGTH,
    AuthorizationRequestBuilder,
    derive_challenge,
)

_AUTH_URL = "https://auth.example.com/oauth2/auth"
_REDIRECT = "http://localhost:8976/oauth/callback"
_ALPHANUMERIC = set(string.ascii_letters + string.digits)


@pytest.fixture()
def builder() -> AuthorizationRequestBuilder:
    return AuthorizationRequestBuilder("client-123", _REDIRECT, _AUTH_URL)


def _query(url: str) -> dict[str, list[str]]:
    return parse_qs(urlsplit(url).query)


class TestDeriveChallenge:
    def test_rfc7636_appendix_b_vector(self) -> None:
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        assert derive_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"

    def test_matches_sha256_base64url(self) -> None:
        verifier = "a" * 64
        digest = hashlib.sha256(verifier.encode("ascii")).digest()
        expected = base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")
        assert derive_challenge(verifier) == expected
        assert "=" not in derive_challenge(verifier)

    def test_deterministic(self) -> None:
        assert derive_challenge("same-verifier") == derive_challenge("same-verifier")


class TestAuthorizationRequestBuilder:
    def test_session_fields(self, builder: AuthorizationRequestBuilder) -> None:
        session = builder.build(["user:read", "zone:read"])
        assert session.client_id == "client-123"
        assert session.redirect_uri == _REDIRECT
        assert session.scopes == ("user:read", "zone:read")
        assert session.pkce_challenge == derive_challenge(session.pkce_verifier)

    def test_secret_lengths_and_alphabet(self, builder: AuthorizationRequestBuilder) -> None:
        session = builder.build(["user:read"])
        assert len(session.pkce_verifier) == VERIFIER_LENGTH
        assert 43 <= len(session.pkce_verifier) <= 128
        assert len(session.csrf_token) == CSRF_TOKEN_LENGTH
        assert set(session.pkce_verifier) <= _ALPHANUMERIC
        assert set(session.csrf_token) <= _ALPHANUMERIC

    def test_fresh_secrets_per_build(self, builder: AuthorizationRequestBuilder) -> None:
        first = builder.build(["user:read"])
        second = builder.build(["user:read"])
        assert first.pkce_verifier != second.pkce_verifier
        assert first.csrf_token != second.csrf_token
        assert first.pkce_verifier != first.csrf_token

    def test_authorization_url_parameters(self, builder: AuthorizationRequestBuilder) -> None:
        session = builder.build(["user:read", "workers:write"])
        parts = urlsplit(session.authorization_url)
        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == _AUTH_URL

        query = _query(session.authorization_url)
        assert query["response_type"] == ["code"]
        assert query["client_id"] == ["client-123"]
        assert query["redirect_uri"] == [_REDIRECT]
        assert query["scope"] == ["user:read workers:write"]
        assert query["state"] == [session.csrf_token]
        assert query["code_challenge"] == [session.pkce_challenge]
        assert query["code_challenge_method"] == [CODE_CHALLENGE_METHOD]

    def test_verifier_never_in_url(self, builder: AuthorizationRequestBuilder) -> None:
        session = builder.build(["user:read"])
        assert session.pkce_verifier not in session.authorization_url

    def test_repr_hides_secrets(self, builder: AuthorizationRequestBuilder) -> None:
        session = builder.build(["user:read"])
        text = repr(session)
        assert session.pkce_verifier not in text
        assert session.csrf_token not in text
        assert "client-123" in text
