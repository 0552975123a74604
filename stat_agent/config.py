"""
Agent configuration: .env loading, optional config.yml, destination lookup.

Configuration is resolved once at process start into an AgentConfig, which is
then handed to the components that need it.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

import yaml
from dotenv import load_dotenv

from stat_agent.errors import ConfigLoadError
from stat_agent.readers import DEFAULT_CPU_INTERVAL


DEFAULT_DESTINATION_ENV = 'PLOT_KEY'
DEFAULT_ENV_FILE = '.env'


@dataclass(frozen=True)
class AgentConfig:
    destination_url: Optional[str] = None
    destination_env: str = DEFAULT_DESTINATION_ENV
    timeout: Optional[float] = None
    cpu_interval: float = DEFAULT_CPU_INTERVAL


def load_env_file(path: Union[str, Path] = DEFAULT_ENV_FILE) -> None:
    """
    Load KEY=value pairs from an env file into os.environ.

    Variables already present in the environment win over the file.

    Raises:
        ConfigLoadError: file is missing, unreadable, or not valid text
    """
    env_path = Path(path)
    if not env_path.is_file():
        raise ConfigLoadError(f"open {env_path}: no such file")

    try:
        load_dotenv(env_path, override=False)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigLoadError(f"{env_path}: {e}") from e


def load_config_file(path: Union[str, Path]) -> dict:
    """
    Read the `reporting` section of a YAML config file.

    Raises:
        ConfigLoadError: file cannot be read or is not a YAML mapping
    """
    config_path = Path(path)
    try:
        with config_path.open() as f:
            config_data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigLoadError(f"{config_path}: {e}") from e

    if not isinstance(config_data, dict):
        raise ConfigLoadError(f"{config_path}: expected a mapping at top level")

    reporting = config_data.get('reporting') or {}
    if not isinstance(reporting, dict):
        raise ConfigLoadError(f"{config_path}: 'reporting' must be a mapping")
    return reporting


def load_config(
    file_settings: Optional[Mapping] = None,
    environ: Optional[Mapping[str, str]] = None,
    destination_url: Optional[str] = None,
    destination_env: Optional[str] = None,
    timeout: Optional[float] = None,
    cpu_interval: Optional[float] = None
) -> AgentConfig:
    """
    Resolve the final configuration.

    Explicit arguments (CLI options) win, then the environment, then the
    config file. The destination is looked up in the environment under
    `destination_env` (PLOT_KEY unless overridden).

    Raises:
        ConfigLoadError: a config file setting has the wrong type
    """
    settings = dict(file_settings or {})
    env = os.environ if environ is None else environ

    env_name = destination_env or settings.get('destination_env') or DEFAULT_DESTINATION_ENV

    url = destination_url or env.get(env_name)
    if not url and settings.get('destination_url'):
        url = os.path.expandvars(str(settings['destination_url']))

    try:
        if timeout is None and settings.get('timeout') is not None:
            timeout = float(settings['timeout'])
        if cpu_interval is None:
            cpu_interval = float(settings.get('cpu_interval', DEFAULT_CPU_INTERVAL))
    except (TypeError, ValueError) as e:
        raise ConfigLoadError(f"invalid reporting setting: {e}") from e

    if timeout is not None and timeout <= 0:
        raise ConfigLoadError(f"timeout must be positive (got {timeout})")
    if cpu_interval < 0:
        raise ConfigLoadError(f"cpu_interval must not be negative (got {cpu_interval})")

    return AgentConfig(
        destination_url=url or None,
        destination_env=env_name,
        timeout=timeout,
        cpu_interval=cpu_interval
    )
