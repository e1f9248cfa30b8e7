"""Configuration management with XDG paths, atomic writes, and key resolution.

This module handles all persistent configuration for ahrefs-cli:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.ahrefs/`` on macOS and Windows.  See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Stored config** -- a single :class:`~ahrefs_cli.models.StoredConfig`
  JSON file holding the API key, written with owner-only permissions.
* **Precedence resolution** -- :func:`resolve_api_key` picks the key from
  the ``--api-key`` flag, the ``AHREFS_API_KEY`` environment variable or
  the stored config, in that order.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import logging
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ahrefs_cli.exceptions import ConfigError
from ahrefs_cli.models import DEFAULT_BASE_URL, StoredConfig

logger = logging.getLogger(__name__)

_APP_NAME = "ahrefs"
_CONFIG_FILENAME = "config.json"

API_KEY_ENV = "AHREFS_API_KEY"
BASE_URL_ENV = "AHREFS_BASE_URL"


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

    On Linux/BSD: ``$XDG_CONFIG_HOME/ahrefs/`` (default ``~/.config/ahrefs/``).
    On macOS/Windows: ``~/.ahrefs/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_CONFIG_HOME", (".config",))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/ahrefs/`` (default ``~/.local/share/ahrefs/``).
    On macOS/Windows: ``~/.ahrefs/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def config_path() -> Path:
    """Path to the stored config file."""
    return get_config_dir() / _CONFIG_FILENAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str, mode: int = 0o600) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    Permissions are set on the temp file before the rename, so the secret
    is never readable by other users.  On any failure the temp file is
    cleaned up.
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
        os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Stored config ---


def load_config() -> StoredConfig:
    """Load the stored configuration.

    Returns:
        The deserialised :class:`~ahrefs_cli.models.StoredConfig`.  If the
        file does not exist, a default (empty) instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = config_path()
    if not path.is_file():
        return StoredConfig()
    try:
        text = path.read_text(encoding="utf-8")
        return StoredConfig.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ConfigError(
            f"Invalid config at {path}: {exc}",
            suggestion="Run 'ahrefs config set-key <your-key>' to rewrite it",
        ) from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read config at {path}: {exc}") from exc


def save_config(config: StoredConfig) -> Path:
    """Persist *config* atomically with ``0600`` permissions.

    Returns:
        The path written.
    """
    path = config_path()
    data = config.model_dump(mode="json")
    try:
        _atomic_write(path, json.dumps(data, indent=2) + "\n")
    except OSError as exc:
        raise ConfigError(f"Cannot write config at {path}: {exc}") from exc
    logger.debug("Saved config to %s", path)
    return path


def load_api_key() -> str:
    """Return the stored API key, or ``""`` when none is configured."""
    return load_config().api_key


def save_api_key(api_key: str) -> Path:
    """Store *api_key*, keeping any other keys already in the config file.

    Raises:
        ConfigError: If *api_key* is empty or the file cannot be written.
    """
    api_key = api_key.strip()
    if not api_key:
        raise ConfigError("API key must not be empty")
    config = load_config()
    config.api_key = api_key
    return save_config(config)


def clear_api_key() -> bool:
    """Remove the stored API key.

    Returns:
        ``True`` if a key was removed, ``False`` if none was stored.
    """
    config = load_config()
    if not config.api_key:
        return False
    config.api_key = ""
    save_config(config)
    return True


# --- Precedence resolution ---


def resolve_api_key(override: Optional[str] = None) -> str:
    """Resolve the API key with full precedence chain.

    Precedence (high to low):
        1. ``override`` (the ``--api-key`` flag)
        2. ``AHREFS_API_KEY`` environment variable
        3. Stored config (``~/.config/ahrefs/config.json``)

    Returns:
        The key, or ``""`` when none is configured anywhere.

    Raises:
        ConfigError: If the stored config has to be read and is invalid.
    """
    if override:
        return override
    env_key = os.environ.get(API_KEY_ENV, "")
    if env_key:
        logger.debug("Using API key from %s", API_KEY_ENV)
        return env_key
    return load_api_key()


def resolve_base_url() -> str:
    """Return the API base URL, honouring ``AHREFS_BASE_URL``."""
    return os.environ.get(BASE_URL_ENV, "") or DEFAULT_BASE_URL


def mask_api_key(api_key: str) -> str:
    """Mask a key for display.

    Keys of eight characters or fewer become ``****``; longer keys keep
    their first and last four characters::

        >>> mask_api_key("sk_live_abcdef123456")
        'sk_l****3456'
    """
    if len(api_key) <= 8:
        return "****"
    return f"{api_key[:4]}****{api_key[-4:]}"
