"""GCP Secret Manager helper."""
import logging
from typing import Optional

from google.auth.credentials import Credentials
from google.cloud import secretmanager

from ..errors import SecretNoDataError, SecretNoPayloadError

logger = logging.getLogger(__name__)


def secret_version_path(project: str, secret: str, version: str = "latest") -> str:
    """Build the resource name of a secret version."""
    return f"projects/{project}/secrets/{secret}/versions/{version}"


class SecretManagerHelper:
    """Wrapper around the async Secret Manager client."""

    def __init__(self, client: secretmanager.SecretManagerServiceAsyncClient):
        self.client = client

    @classmethod
    def with_credentials(cls, credentials: Optional[Credentials] = None) -> "SecretManagerHelper":
        """
        Create a helper backed by a new SecretManagerServiceAsyncClient.

        Must be called while an event loop is running.

        Args:
            credentials: Google auth credentials (Application Default Credentials if None)
        """
        logger.debug("Creating Secret Manager async client")
        return cls(secretmanager.SecretManagerServiceAsyncClient(credentials=credentials))

    async def get_secret(self, project: str, secret: str) -> bytes:
        """
        Fetch the latest version of a secret.

        Args:
            project: GCP project ID
            secret: Name of the secret

        Returns:
            Raw payload bytes; decoding is left to the caller

        Raises:
            ValueError: If project or secret is empty
            SecretNoPayloadError: If the response has no payload
            SecretNoDataError: If the payload has no data
        """
        return await self.get_secret_version(project, secret, "latest")

    async def get_secret_version(self, project: str, secret: str, version: str) -> bytes:
        """
        Fetch a specific version of a secret.

        Args:
            project: GCP project ID
            secret: Name of the secret
            version: Version ID, or an alias such as "latest"

        Returns:
            Raw payload bytes
        """
        if not project or not secret or not version:
            raise ValueError("project, secret and version must be non-empty")

        name = secret_version_path(project, secret, version)
        logger.debug(f"Accessing secret version {name}")
        response = await self.client.access_secret_version(request={"name": name})

        if "payload" not in response:
            raise SecretNoPayloadError(name)
        if not response.payload.data:
            raise SecretNoDataError(name)

        return response.payload.data

    async def create_secret(self, project: str, secret_name: str, secret_value: str) -> None:
        """
        Create a secret with automatic replication and add its first version.

        Args:
            project: GCP project ID
            secret_name: ID of the new secret
            secret_value: Value stored as the first version, UTF-8 encoded
        """
        if not project or not secret_name:
            raise ValueError("project and secret_name must be non-empty")

        parent = f"projects/{project}"
        await self.client.create_secret(
            request={
                "parent": parent,
                "secret_id": secret_name,
                "secret": {"replication": {"automatic": {}}},
            }
        )
        logger.info(f"Created secret {secret_name} in project {project}")

        await self.client.add_secret_version(
            request={
                "parent": f"{parent}/secrets/{secret_name}",
                "payload": {"data": secret_value.encode("UTF-8")},
            }
        )
        logger.info(f"Added first version to secret {secret_name}")
