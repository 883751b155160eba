"""Configuration loader for nimbus."""
import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml

from ..errors import NimbusError
from . import preferences

logger = logging.getLogger(__name__)

AUTH_SERVICE_ACCOUNT = "service_account"
AUTH_APPLICATION_DEFAULT = "application_default"
SUPPORTED_AUTH_TYPES = (AUTH_SERVICE_ACCOUNT, AUTH_APPLICATION_DEFAULT)


class ConfigError(NimbusError):
    """Configuration error exception."""
    pass


def default_config_path() -> Path:
    return preferences.CONFIG_DIR / "config.yml"


def _get_config_path() -> str:
    """
    Resolve the config file path.

    Priority order:
    1. config_path preference (set with 'nimbus config set-path')
    2. ~/.config/nimbus/config.yml

    Resolved on every call so preference changes apply without a restart.

    Returns:
        Absolute path to config file

    Raises:
        FileNotFoundError: If no config file exists in either location
    """
    config_path_pref = preferences.get_preference(preferences.CONFIG_PATH_KEY)
    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            logger.debug(f"Using config from preference: {config_path}")
            return str(config_path)
        logger.warning(f"Config path from preference doesn't exist: {config_path}")

    default_config = default_config_path()
    if default_config.exists():
        logger.debug(f"Using default config location: {default_config}")
        return str(default_config)

    raise FileNotFoundError(
        "Configuration file not found. Set one up with one of:\n\n"
        "1. The default location:\n"
        f"   mkdir -p {default_config.parent}\n"
        f"   cp /path/to/your/config.yml {default_config}\n\n"
        "2. An existing config file elsewhere:\n"
        "   nimbus config set-path /path/to/your/config.yml\n\n"
        "3. Interactive setup:\n"
        "   nimbus config init\n"
    )


def _validate_authentication(auth: Any, config_path: str) -> None:
    if not isinstance(auth, dict) or 'type' not in auth:
        raise ConfigError("Missing 'authentication.type' in config")

    if auth['type'] not in SUPPORTED_AUTH_TYPES:
        raise ConfigError(
            f"Unsupported authentication type: {auth['type']}\n"
            f"Supported types: {', '.join(SUPPORTED_AUTH_TYPES)}"
        )

    if auth['type'] != AUTH_SERVICE_ACCOUNT:
        return

    if 'service_account_path' not in auth:
        raise ConfigError(
            "Missing 'authentication.service_account_path' in config\n"
            "Please specify the absolute path to your service account JSON file."
        )

    service_account_path = auth['service_account_path']
    if not os.path.exists(service_account_path):
        raise ConfigError(
            f"Service account file not found at: {service_account_path}\n"
            f"Please ensure the file exists or update the path in {config_path}"
        )
    if not os.path.isfile(service_account_path):
        raise ConfigError(f"Service account path is not a file: {service_account_path}")


def load_config() -> Dict[str, Any]:
    """
    Load and validate configuration from YAML file.

    Returns:
        Dict containing configuration with keys:
        - authentication: dict with type and, for service_account, service_account_path
        - gcp: dict with project_id and optional location

    Raises:
        FileNotFoundError: If no config file can be located
        ConfigError: If the config file is unreadable or invalid
    """
    config_path = _get_config_path()

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}")

    if not config:
        raise ConfigError(f"Config file at {config_path} is empty")
    if not isinstance(config, dict):
        raise ConfigError(f"Config file at {config_path} must contain a mapping")

    if 'authentication' not in config:
        raise ConfigError(
            f"Missing 'authentication' section in config at {config_path}\n"
            f"Required format:\n"
            f"authentication:\n"
            f"  type: service_account\n"
            f"  service_account_path: /path/to/service-account.json"
        )
    _validate_authentication(config['authentication'], config_path)

    if 'gcp' not in config:
        raise ConfigError(
            f"Missing 'gcp' section in config at {config_path}\n"
            f"Required format:\n"
            f"gcp:\n"
            f"  project_id: your-project-id\n"
            f"  location: us-central1"
        )
    if not isinstance(config['gcp'], dict) or 'project_id' not in config['gcp']:
        raise ConfigError("Missing 'gcp.project_id' in config")

    logger.info(f"Configuration loaded from {config_path}")
    logger.debug(f"Using project ID: {config['gcp']['project_id']}")

    return config
