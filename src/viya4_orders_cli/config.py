"""Layered configuration with precedence resolution.

Settings come from three sources, highest precedence first:

1. Command-line flags (``--file-path``, ``--file-name``, ``--output``).
2. Environment variables -- the upper-cased setting name with dashes
   replaced by underscores (``CLIENTCREDENTIALSID``,
   ``CLIENTCREDENTIALSSECRET``, ``FILE_PATH``, ``FILE_NAME``, ``OUTPUT``).
3. A YAML config file, ``--config`` or ``~/.viya4-orders-cli`` by default::

       clientCredentialsId: "<base64 client id>"
       clientCredentialsSecret: "<base64 client secret>"
       file-path: /home/me/sas
       output: json

:func:`resolve_settings` merges them into a
:class:`~viya4_orders_cli.models.Settings` and validates the option values.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml

from viya4_orders_cli.exceptions import ConfigError, InvalidUsageError
from viya4_orders_cli.models import Settings
from viya4_orders_cli.output import VALID_FORMATS

_CONFIG_FILENAME = ".viya4-orders-cli"

# Config-file key -> Settings field
_KEYS: dict[str, str] = {
    "clientCredentialsId": "client_credentials_id",
    "clientCredentialsSecret": "client_credentials_secret",
    "file-path": "file_path",
    "file-name": "file_name",
    "output": "output",
}


def default_config_path() -> Path:
    """Return the default config file location (``~/.viya4-orders-cli``)."""
    return Path.home() / _CONFIG_FILENAME


def env_var_name(key: str) -> str:
    """Return the environment variable consulted for config *key*.

    Example::

        >>> env_var_name("clientCredentialsId")
        'CLIENTCREDENTIALSID'
        >>> env_var_name("file-path")
        'FILE_PATH'
    """
    return key.upper().replace("-", "_")


def load_config_file(path: Optional[Path] = None) -> tuple[dict[str, Any], Optional[Path]]:
    """Load the YAML config file.

    Args:
        path: Explicit config file. When ``None`` the default location is
            used and a missing file is not an error.

    Returns:
        A tuple of ``(values, path_used)``. ``path_used`` is ``None`` when
        no file was read.

    Raises:
        ConfigError: If an explicit file does not exist, or any file cannot
            be read or parsed, or its top level is not a mapping.
    """
    explicit = path is not None
    target = path if path is not None else default_config_path()
    if not target.is_file():
        if explicit:
            raise ConfigError(f"Config file not found: {target}")
        return {}, None

    try:
        data = yaml.safe_load(target.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"problem parsing config file {target}: {exc}") from exc

    if data is None:
        return {}, target
    if not isinstance(data, dict):
        raise ConfigError(
            f"problem parsing config file {target}: expected a mapping at the top level"
        )
    return data, target


def resolve_settings(
    config_file: Optional[str] = None,
    file_path: Optional[str] = None,
    file_name: Optional[str] = None,
    output: Optional[str] = None,
) -> Settings:
    """Resolve settings with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (the keyword arguments of this function)
        2. Environment variables
        3. Config file
        4. Defaults

    Args:
        config_file: ``--config`` value, or ``None`` for the default file.
        file_path: ``--file-path`` value.
        file_name: ``--file-name`` value.
        output: ``--output`` value.

    Returns:
        The effective :class:`~viya4_orders_cli.models.Settings`.

    Raises:
        ConfigError: If the config file cannot be read.
        InvalidUsageError: If ``file-path`` is not an existing directory or
            ``output`` is not a recognised format.
    """
    file_values, used = load_config_file(Path(config_file).expanduser() if config_file else None)

    values: dict[str, Any] = {}
    # 3. Config file
    for key, field in _KEYS.items():
        if file_values.get(key) is not None:
            values[field] = str(file_values[key])
    # 2. Environment
    for key, field in _KEYS.items():
        env_value = os.environ.get(env_var_name(key))
        if env_value:
            values[field] = env_value
    # 1. Flags
    flags = {"file_path": file_path, "file_name": file_name, "output": output}
    for field, flag_value in flags.items():
        if flag_value is not None:
            values[field] = flag_value

    settings = Settings(config_file=str(used) if used else None, **values)
    _validate(settings)
    return settings


def _validate(settings: Settings) -> None:
    """Check ``file-path`` and ``output`` values."""
    if settings.file_path:
        path = Path(settings.file_path)
        if not path.exists():
            raise InvalidUsageError(
                f"{settings.file_path} does not exist and therefore is not a valid value "
                "for -p, --file-path!"
            )
        if not path.is_dir():
            raise InvalidUsageError(
                f"{settings.file_path} is not a directory and therefore is not a valid value "
                "for -p, --file-path!"
            )

    if settings.output not in VALID_FORMATS:
        raise InvalidUsageError(
            f"invalid value {settings.output} specified for -o, --output option!"
        )
