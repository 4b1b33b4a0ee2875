"""Built-in CLI sub-commands for workers-login.

* :mod:`~workers_login.commands.login` -- ``login``, ``logout``,
  ``status`` and ``scopes``, registered directly on the root app.
* :mod:`~workers_login.commands.config` -- the ``config`` group for
  viewing and modifying the user configuration.
"""
