"""Configuration management with XDG paths and precedence resolution.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.openrpc-schema-utils/`` on macOS and Windows. See
  :func:`get_config_dir` and :func:`get_cache_dir`.
* **User config** -- An optional
  :class:`~openrpc_schema_utils.models.SchemaUtilsConfig` JSON file.
* **Precedence resolution** -- :func:`load_config` layers environment
  variables over the user config file over the model defaults.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from openrpc_schema_utils.exceptions import ConfigError
from openrpc_schema_utils.models import SchemaUtilsConfig

_APP_NAME = "openrpc-schema-utils"
_CONFIG_FILENAME = "config.json"

ENV_DEFAULT_DOCUMENT = "OPENRPC_UTILS_DEFAULT_DOCUMENT"
ENV_HTTP_TIMEOUT = "OPENRPC_UTILS_HTTP_TIMEOUT"
ENV_CACHE = "OPENRPC_UTILS_CACHE"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory standard (Linux/FreeBSD)."""
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
    """Return the configuration directory.

    On Linux/BSD: ``$XDG_CONFIG_HOME/openrpc-schema-utils/`` (default
    ``~/.config/openrpc-schema-utils/``).  On macOS/Windows:
    ``~/.openrpc-schema-utils/``.

    The directory is not created; the library only ever reads from it.
    """
    if _is_xdg_platform():
        return _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    return _fallback_base_dir()


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    Used to store fetched document bodies. Cached data can be safely
    deleted at any time.

    On Linux/BSD: ``$XDG_CACHE_HOME/openrpc-schema-utils/`` (default
    ``~/.cache/openrpc-schema-utils/``).  On macOS/Windows:
    ``~/.openrpc-schema-utils/cache/``.

    Returns:
        Absolute path to the cache directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Loading ---


def _config_path() -> Path:
    """Path to the user config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_user_config() -> SchemaUtilsConfig:
    """Load the user configuration file.

    Returns:
        The deserialised :class:`~openrpc_schema_utils.models.SchemaUtilsConfig`.
        If the file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _config_path()
    if not path.is_file():
        return SchemaUtilsConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return SchemaUtilsConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def _parse_bool(var: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ConfigError(f"{var} must be a boolean (got {value!r})")


def load_config() -> SchemaUtilsConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. Environment variables (``OPENRPC_UTILS_DEFAULT_DOCUMENT``,
           ``OPENRPC_UTILS_HTTP_TIMEOUT``, ``OPENRPC_UTILS_CACHE``)
        2. User config (``~/.config/openrpc-schema-utils/config.json``)
        3. Defaults

    Raises:
        ConfigError: If the config file or an environment variable holds
            an invalid value.
    """
    config = load_user_config()
    data = config.model_dump()

    default_document = os.environ.get(ENV_DEFAULT_DOCUMENT)
    if default_document:
        data["default_document"] = default_document

    timeout = os.environ.get(ENV_HTTP_TIMEOUT)
    if timeout:
        data["http"]["timeout"] = timeout

    cache = os.environ.get(ENV_CACHE)
    if cache:
        data["cache"]["enabled"] = _parse_bool(ENV_CACHE, cache)

    try:
        return SchemaUtilsConfig.model_validate(data)
    except PydanticValidationError as exc:
        raise ConfigError(f"Invalid environment configuration: {exc}") from exc
