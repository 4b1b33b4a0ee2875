"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for workers-login:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.workers-login/`` on macOS and Windows. See :func:`get_config_dir`
  and :func:`get_data_dir`.
* **User config** -- A single :class:`~workers_login.models.LoginConfig`
  JSON file (client id, endpoints, callback address, timeouts).
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  project-local config and user config into the effective
  :class:`~workers_login.models.LoginConfig`.

The login flow itself never reads configuration from the environment; it
receives the resolved :class:`~workers_login.models.LoginConfig` as a
constructor argument.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from workers_login.exceptions import ConfigError
from workers_login.models import LoginConfig

_APP_NAME = "workers-login"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "workers-login.json"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/workers-login/`` (default
    ``~/.config/workers-login/``). On macOS/Windows: ``~/.workers-login/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (credentials, crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/workers-login/`` (default
    ``~/.local/share/workers-login/``). On macOS/Windows:
    ``~/.workers-login/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. When *mode* is
    given, permissions are applied before any content is written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        if mode is not None:
            os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- User config ---


def config_path() -> Path:
    """Path to the user config file."""
    return get_config_dir() / _CONFIG_FILENAME


def _read_json(path: Path, label: str) -> Optional[dict[str, Any]]:
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} at {path}: expected a JSON object")
    return data


def load_config() -> LoginConfig:
    """Load the user configuration.

    Returns:
        The deserialised :class:`~workers_login.models.LoginConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = config_path()
    data = _read_json(path, "config")
    if data is None:
        return LoginConfig()
    try:
        return LoginConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_config(config: LoginConfig) -> None:
    """Persist the user configuration atomically.

    The file may hold a client secret, so it is written with ``0o600``.
    """
    data = config.model_dump(mode="json", exclude_none=True)
    atomic_write(config_path(), json.dumps(data, indent=2) + "\n", mode=0o600)


def set_config_value(key: str, value: str) -> LoginConfig:
    """Set a single field of the user config and save it.

    Args:
        key: A :class:`~workers_login.models.LoginConfig` field name.
        value: The new value as typed on the command line; Pydantic
            coerces it to the field's type.

    Returns:
        The updated configuration.

    Raises:
        ConfigError: If *key* is unknown or *value* fails validation.
    """
    if key not in LoginConfig.model_fields:
        known = ", ".join(sorted(LoginConfig.model_fields))
        raise ConfigError(f"Unknown config key '{key}'. Known keys: {known}")
    config = load_config()
    data = config.model_dump()
    data[key] = value
    try:
        updated = LoginConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid value for '{key}': {exc}") from exc
    save_config(updated)
    return updated


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./workers-login.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON.
    """
    return _read_json(Path.cwd() / _PROJECT_CONFIG_FILENAME, "project config")


# --- Precedence resolution ---


def resolve_config(
    cli_client_id: Optional[str] = None,
    cli_timeout: Optional[float] = None,
    cli_port: Optional[int] = None,
) -> LoginConfig:
    """Resolve the effective login configuration.

    Precedence (high to low):
        1. CLI flags (``cli_client_id``, ``cli_timeout``, ``cli_port``)
        2. Project config (``./workers-login.json``)
        3. User config (``~/.config/workers-login/config.json``)
        4. Defaults

    Raises:
        ConfigError: If any layer is invalid.
    """
    data = load_config().model_dump(exclude_unset=True)

    project = load_project_config()
    if project is not None:
        data.update(project)

    if cli_client_id is not None:
        data["client_id"] = cli_client_id
    if cli_timeout is not None:
        data["callback_timeout"] = cli_timeout
    if cli_port is not None:
        data["callback_port"] = cli_port

    try:
        return LoginConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
