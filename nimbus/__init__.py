"""nimbus: helpers for Google Cloud Secret Manager, Cloud Storage and Cloud Tasks.

The wrapped client modules are re-exported so request types can be built
without a second import::

    from nimbus import CloudTaskHelper, TaskHelper, tasks_v2
"""
from google.cloud import secretmanager, storage, tasks_v2

from .domains.secret_helper import SecretManagerHelper
from .domains.storage_helper import StorageHelper
from .domains.task_helper import CloudTaskHelper, TaskHelper
from .errors import NimbusError, SecretError, SecretNoDataError, SecretNoPayloadError, StorageError

__version__ = "0.1.0"

__all__ = [
    "CloudTaskHelper",
    "NimbusError",
    "SecretError",
    "SecretManagerHelper",
    "SecretNoDataError",
    "SecretNoPayloadError",
    "StorageError",
    "StorageHelper",
    "TaskHelper",
    "secretmanager",
    "storage",
    "tasks_v2",
]
