"""Persistent store for the credential obtained by ``workers-login login``.

Stores the credential in ``~/.local/share/workers-login/credentials.json``
(XDG) or the platform-equivalent directory. The file is written atomically
(temp file, fsync, ``os.replace``) with ``0o600`` permissions applied before
any content is written, so the token is never world-readable, even
momentarily.

The login flow only depends on the :class:`CredentialSink` protocol; any
object with a ``save(credential)`` method can stand in for the default
:class:`CredentialStore`.

See Also:
    :class:`~workers_login.auth.login.LoginOrchestrator` -- the producer.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, Protocol

from pydantic import ValidationError

from workers_login.config import atomic_write, get_data_dir
from workers_login.models import Credential

_CREDENTIALS_FILENAME = "credentials.json"


class CredentialSink(Protocol):
    """Anything that can persist a :class:`~workers_login.models.Credential`."""

    def save(self, credential: Credential) -> None: ...


class CredentialStore:
    """Read/write the stored credential.

    Args:
        path: Override for the credentials file. Defaults to
            ``get_data_dir() / "credentials.json"``.

    Example::

        store = CredentialStore()
        store.save(Credential(secret="tok123"))
        assert store.load().secret == "tok123"
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path if path is not None else get_data_dir() / _CREDENTIALS_FILENAME

    @property
    def path(self) -> Path:
        """The filesystem path of the credentials file."""
        return self._path

    def save(self, credential: Credential) -> None:
        """Persist *credential* atomically with ``0o600`` permissions.

        Raises:
            OSError: If the file cannot be written (permissions, disk full, etc.).
        """
        data = credential.model_dump(mode="json")
        atomic_write(self._path, json.dumps(data, indent=2) + "\n", mode=0o600)

    def load(self) -> Optional[Credential]:
        """Load the stored credential.

        Returns:
            The :class:`~workers_login.models.Credential`, or ``None`` if the
            file does not exist or cannot be parsed.
        """
        if not self._path.is_file():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return Credential.model_validate(data)
        except (json.JSONDecodeError, ValidationError, OSError):
            return None

    def clear(self) -> bool:
        """Delete the stored credential.

        Returns:
            ``True`` if a file was removed, ``False`` if there was none.
        """
        if self._path.is_file():
            self._path.unlink()
            return True
        return False
