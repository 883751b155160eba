"""Error types raised by nimbus itself.

Errors raised by the wrapped Google Cloud clients (``google.api_core.exceptions``)
are never translated; they reach the caller unchanged.
"""


class NimbusError(Exception):
    """Base class for nimbus errors."""
    pass


class SecretError(NimbusError):
    """Secret Manager returned a response nimbus cannot unpack."""
    pass


class SecretNoPayloadError(SecretError):
    """AccessSecretVersionResponse carried no payload."""

    def __init__(self, name: str):
        super().__init__(f"No payload in AccessSecretVersionResponse for {name}")
        self.name = name


class SecretNoDataError(SecretError):
    """AccessSecretVersionResponse payload carried no data."""

    def __init__(self, name: str):
        super().__init__(f"No data in payload from AccessSecretVersionResponse for {name}")
        self.name = name


class StorageError(NimbusError):
    """Local failure around a Cloud Storage transfer."""
    pass
