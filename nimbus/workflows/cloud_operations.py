"""Config-driven operations over the nimbus helpers.

These resolve project, location and credentials from the environment and
the nimbus config file, then delegate to the helper classes. The helpers
themselves never read either.
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from google.cloud import tasks_v2

from ..domains.config_loader import ConfigError, load_config
from ..domains.credentials import load_credentials
from ..domains.secret_helper import SecretManagerHelper
from ..domains.storage_helper import StorageHelper
from ..domains.task_helper import CloudTaskHelper

logger = logging.getLogger(__name__)


def _load_config_or_none() -> Optional[Dict[str, Any]]:
    """Load the config file; a missing file means ADC plus environment overrides."""
    try:
        return load_config()
    except FileNotFoundError:
        logger.debug("No nimbus config file found, using Application Default Credentials")
        return None


def resolve_project_id(project_id: Optional[str] = None,
                       config: Optional[Dict[str, Any]] = None) -> str:
    """
    Resolve the GCP project ID.

    Priority order:
    1. Explicit project_id argument
    2. GCP_PROJECT environment variable
    3. gcp.project_id in the config file

    Raises:
        ConfigError: If no source provides a project ID
    """
    if project_id:
        return project_id

    gcp_project_env = os.getenv("GCP_PROJECT")
    if gcp_project_env:
        logger.debug(f"Using GCP_PROJECT from environment: {gcp_project_env}")
        return gcp_project_env

    if config and config.get('gcp', {}).get('project_id'):
        project_id = config['gcp']['project_id']
        logger.debug(f"Using project_id from config: {project_id}")
        return project_id

    raise ConfigError(
        "Project ID not found. Pass --project-id, set GCP_PROJECT, "
        "or configure gcp.project_id in the config file"
    )


def resolve_location(location: Optional[str] = None,
                     config: Optional[Dict[str, Any]] = None) -> str:
    """
    Resolve the Cloud Tasks location.

    Same priority order as resolve_project_id, using GCP_LOCATION and
    gcp.location.
    """
    if location:
        return location

    gcp_location_env = os.getenv("GCP_LOCATION")
    if gcp_location_env:
        logger.debug(f"Using GCP_LOCATION from environment: {gcp_location_env}")
        return gcp_location_env

    if config and config.get('gcp', {}).get('location'):
        return config['gcp']['location']

    raise ConfigError(
        "Location not found. Pass --location, set GCP_LOCATION, "
        "or configure gcp.location in the config file"
    )


async def fetch_secret(secret_name: str, project_id: Optional[str] = None,
                       version: str = "latest") -> bytes:
    """Fetch a secret version as raw bytes."""
    config = _load_config_or_none()
    project_id = resolve_project_id(project_id, config)

    helper = SecretManagerHelper.with_credentials(load_credentials(config))
    if version == "latest":
        return await helper.get_secret(project_id, secret_name)
    return await helper.get_secret_version(project_id, secret_name, version)


async def store_secret(secret_name: str, secret_value: str,
                       project_id: Optional[str] = None) -> None:
    """Create a new secret holding secret_value."""
    config = _load_config_or_none()
    project_id = resolve_project_id(project_id, config)

    helper = SecretManagerHelper.with_credentials(load_credentials(config))
    await helper.create_secret(project_id, secret_name, secret_value)


def _storage_helper() -> StorageHelper:
    config = _load_config_or_none()
    project_id = None
    try:
        project_id = resolve_project_id(None, config)
    except ConfigError:
        # storage.Client falls back to the project of the credentials
        logger.debug("No project ID configured for Cloud Storage client")
    return StorageHelper.with_credentials(load_credentials(config), project=project_id)


async def upload_object(bucket: str, key: str, path: Path,
                        content_type: Optional[str] = None) -> None:
    """Upload a local file to bucket/key."""
    await _storage_helper().upload_file(bucket, key, path, content_type)


async def download_object(bucket: str, key: str) -> bytes:
    """Download bucket/key as bytes."""
    return await _storage_helper().download_to_bytes(bucket, key)


async def download_object_to(bucket: str, key: str, path_dir: Path) -> Path:
    """Download bucket/key into path_dir and return the written path."""
    return await _storage_helper().download_file(bucket, key, path_dir)


async def delete_object(bucket: str, key: str) -> None:
    """Delete bucket/key."""
    await _storage_helper().delete_file(bucket, key)


async def push_http_task(
    queue: str,
    url: str,
    method: str,
    body: Optional[bytes] = None,
    headers: Optional[Dict[str, str]] = None,
    project_id: Optional[str] = None,
    location: Optional[str] = None,
) -> Tuple[tasks_v2.Task, tasks_v2.Task]:
    """
    Push an HTTP task.

    Args:
        queue: Queue ID, or a fully qualified queue name
            (projects/.../locations/.../queues/...)
        url: Target URL
        method: HTTP verb
        body: Request body
        headers: Request headers
        project_id: Project owning the queue, resolved when a queue ID is given
        location: Queue location, resolved when a queue ID is given
    """
    config = _load_config_or_none()
    if not queue.startswith("projects/"):
        queue = CloudTaskHelper.queue_path(
            resolve_project_id(project_id, config),
            resolve_location(location, config),
            queue,
        )

    helper = CloudTaskHelper.with_credentials(load_credentials(config))
    return await helper.push(queue, url, method, body=body, headers=headers)
