"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific failure category and is referenced by the
corresponding :class:`~workers_login.exceptions.WorkersLoginError` subclass.
Shell wrappers can inspect the exit code to tell a declined consent from a
busy port without parsing stderr.

Example::

    $ workers-login login
    $ echo $?
    4   # EXIT_CALLBACK_TIMEOUT -- no redirect reached the local listener
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (including configuration problems)."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments, e.g. an unknown scope."""

EXIT_LOGIN_FAILURE = 3
"""The login was refused: prompt declined, consent denied, bad callback or CSRF mismatch."""

EXIT_CALLBACK_TIMEOUT = 4
"""No authorization redirect arrived before the callback timeout."""

EXIT_LISTENER_ERROR = 5
"""The local callback listener could not bind its port."""

EXIT_TOKEN_EXCHANGE_FAILURE = 6
"""The token endpoint rejected the authorization code or could not be reached."""

EXIT_PERSISTENCE_FAILURE = 7
"""The credential could not be written to the credential store."""
