"""Classification of requests reaching the local callback listener.

Each inbound request becomes exactly one :data:`CallbackOutcome`:

* :class:`Granted` -- the redirect carries both ``code`` and ``state``.
* :class:`Denied` -- the redirect carries neither (the user declined).
* :class:`Malformed` -- the redirect carries only one of the two.
* :class:`Unmatched` -- the request was for some other path (favicon,
  probes); it never reaches the login flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union
from urllib.parse import parse_qs, urlsplit


@dataclass(frozen=True)
class Granted:
    code: str = field(repr=False)
    state: str = field(repr=False)


@dataclass(frozen=True)
class Denied:
    # RFC 6749 section 4.1.2.1 error code, when the server sent one.
    error: Optional[str] = None


@dataclass(frozen=True)
class Malformed:
    missing: str


@dataclass(frozen=True)
class Unmatched:
    path: str


CallbackOutcome = Union[Granted, Denied, Malformed, Unmatched]


def classify_request(target: str, callback_path: str) -> CallbackOutcome:
    """Classify a request target (path plus query string).

    Blank parameter values count as absent.

    Args:
        target: The raw request target, e.g. ``/oauth/callback?code=abc&state=xyz``.
        callback_path: The registered callback path.
    """
    parts = urlsplit(target)
    if parts.path != callback_path:
        return Unmatched(parts.path)

    params = parse_qs(parts.query)
    code = params.get("code", [None])[0]
    state = params.get("state", [None])[0]

    if code and state:
        return Granted(code=code, state=state)
    if not code and not state:
        return Denied(error=params.get("error", [None])[0])
    return Malformed(missing="state" if code else "code")
