"""Scope allow-list and validation of user-requested scopes."""

from __future__ import annotations

from typing import Iterable, Optional

from workers_login.exceptions import InvalidScopeError

ALLOWED_SCOPES: tuple[str, ...] = (
    "account:read",
    "user:read",
    "workers:write",
    "workers_kv:write",
    "workers_routes:write",
    "workers_scripts:write",
    "workers_tail:read",
    "zone:read",
)


def resolve_scopes(
    requested: Optional[Iterable[str]] = None,
    allowed: Iterable[str] = ALLOWED_SCOPES,
) -> list[str]:
    """Return the scopes to request from the authorization server.

    With nothing requested the whole allow-list is returned. Otherwise every
    requested scope must match an allowed one exactly (case-sensitive);
    repeated scopes are kept once, in first-seen order.

    Args:
        requested: Scope names given by the user, or ``None``.
        allowed: The allow-list. Defaults to :data:`ALLOWED_SCOPES`.

    Returns:
        The resolved scope list.

    Raises:
        InvalidScopeError: For the first scope not on the allow-list. Nothing
            is returned for the valid ones.
    """
    allowed = tuple(allowed)
    if not requested:
        return list(allowed)

    allowed_set = frozenset(allowed)
    resolved: list[str] = []
    for scope in requested:
        if scope not in allowed_set:
            raise InvalidScopeError(scope)
        if scope not in resolved:
            resolved.append(scope)
    return resolved
