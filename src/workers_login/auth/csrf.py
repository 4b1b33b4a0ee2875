"""Anti-forgery check of the ``state`` value returned in the redirect."""

from __future__ import annotations

import hmac

from workers_login.exceptions import CsrfMismatchError


def verify_state(expected: str, received: str) -> None:
    """Check the returned ``state`` against the session's CSRF token.

    The comparison is exact and constant-time. Neither value is included in
    the raised error.

    Raises:
        CsrfMismatchError: If the values differ.
    """
    if not hmac.compare_digest(expected.encode("utf-8"), received.encode("utf-8")):
        raise CsrfMismatchError()
