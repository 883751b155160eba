"""Google auth credentials for the wrapped clients."""
import logging
from typing import Any, Dict, Optional

import google.auth
from google.auth.credentials import Credentials
from google.oauth2 import service_account

from .config_loader import AUTH_SERVICE_ACCOUNT

logger = logging.getLogger(__name__)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


def load_credentials(config: Optional[Dict[str, Any]] = None) -> Credentials:
    """
    Create credentials from a loaded nimbus config.

    Args:
        config: Result of load_config(), or None to use Application Default Credentials

    Returns:
        Service account credentials when the config asks for them,
        Application Default Credentials otherwise
    """
    auth = (config or {}).get("authentication", {})

    if auth.get("type") == AUTH_SERVICE_ACCOUNT:
        path = auth["service_account_path"]
        logger.debug(f"Loading service account credentials from {path}")
        return service_account.Credentials.from_service_account_file(
            path, scopes=[CLOUD_PLATFORM_SCOPE]
        )

    logger.debug("Using Application Default Credentials")
    credentials, _project = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])
    return credentials
