"""In-memory doubles of the wrapped Google Cloud clients."""
import json
from pathlib import Path

import pytest
from google.api_core.exceptions import AlreadyExists, NotFound
from google.cloud import secretmanager, tasks_v2

from nimbus.domains import preferences


class FakeBlob:
    def __init__(self, store, bucket_name, name):
        self._store = store
        self._key = (bucket_name, name)
        self.name = name

    def upload_from_string(self, data, content_type=None):
        if isinstance(data, str):
            data = data.encode("UTF-8")
        self._store[self._key] = (data, content_type or "application/octet-stream")

    def download_as_bytes(self):
        if self._key not in self._store:
            raise NotFound(f"No such object: {self._key[0]}/{self._key[1]}")
        return self._store[self._key][0]

    def delete(self):
        if self._key not in self._store:
            raise NotFound(f"No such object: {self._key[0]}/{self._key[1]}")
        del self._store[self._key]


class FakeBucket:
    def __init__(self, store, name):
        self._store = store
        self.name = name

    def blob(self, name):
        return FakeBlob(self._store, self.name, name)


class FakeStorageClient:
    """Mimics storage.Client for the calls StorageHelper makes."""

    def __init__(self):
        # {(bucket, key): (data, content_type)}
        self.objects = {}

    def bucket(self, name):
        return FakeBucket(self.objects, name)


class FakeSecretManagerClient:
    """Mimics SecretManagerServiceAsyncClient for the calls SecretManagerHelper makes."""

    def __init__(self):
        # {projects/p/secrets/s: [payload, ...]}
        self.secrets = {}
        self.requests = []

    def add(self, project, secret, *payloads):
        self.secrets.setdefault(f"projects/{project}/secrets/{secret}", []).extend(payloads)

    async def access_secret_version(self, request):
        self.requests.append(request)
        name = request["name"]
        parent, _, version = name.rpartition("/versions/")
        versions = self.secrets.get(parent)
        if not versions:
            raise NotFound(f"Secret [{parent}] not found")

        if version == "latest":
            data = versions[-1]
        else:
            index = int(version) - 1
            if index < 0 or index >= len(versions):
                raise NotFound(f"Secret Version [{name}] not found")
            data = versions[index]

        return secretmanager.AccessSecretVersionResponse(
            name=name,
            payload=secretmanager.SecretPayload(data=data),
        )

    async def create_secret(self, request):
        self.requests.append(request)
        name = f"{request['parent']}/secrets/{request['secret_id']}"
        if name in self.secrets:
            raise AlreadyExists(f"Secret [{name}] already exists")
        self.secrets[name] = []
        return secretmanager.Secret(name=name)

    async def add_secret_version(self, request):
        self.requests.append(request)
        parent = request["parent"]
        if parent not in self.secrets:
            raise NotFound(f"Secret [{parent}] not found")
        self.secrets[parent].append(request["payload"]["data"])
        return secretmanager.SecretVersion(name=f"{parent}/versions/{len(self.secrets[parent])}")


class FakeCloudTasksClient:
    """Mimics CloudTasksAsyncClient.create_task."""

    def __init__(self, *queues):
        self.queues = set(queues)
        self.requests = []

    async def create_task(self, request):
        self.requests.append(request)
        if request.parent not in self.queues:
            raise NotFound(f"Requested entity was not found: {request.parent}")

        created = tasks_v2.Task.deserialize(tasks_v2.Task.serialize(request.task))
        if not created.name:
            created.name = f"{request.parent}/tasks/{len(self.requests)}"
        return created


TEST_QUEUE = "projects/test-project/locations/us-central1/queues/test-queue"


@pytest.fixture
def storage_client():
    return FakeStorageClient()


@pytest.fixture
def secret_client():
    return FakeSecretManagerClient()


@pytest.fixture
def tasks_client():
    return FakeCloudTasksClient(TEST_QUEUE)


@pytest.fixture
def temp_home(tmp_path, monkeypatch):
    """Point nimbus preferences and default config at a temporary home directory."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setattr(Path, "home", lambda: fake_home)

    fake_config_dir = fake_home / ".config" / "nimbus"
    monkeypatch.setattr(preferences, "CONFIG_DIR", fake_config_dir)
    monkeypatch.setattr(preferences, "PREFERENCES_FILE", fake_config_dir / "preferences.json")
    monkeypatch.delenv("GCP_PROJECT", raising=False)
    monkeypatch.delenv("GCP_LOCATION", raising=False)

    return fake_home


@pytest.fixture
def service_account_file(tmp_path):
    sa_file = tmp_path / "test-sa.json"
    sa_file.write_text(json.dumps({"type": "service_account"}))
    return sa_file


@pytest.fixture
def queue_name():
    return TEST_QUEUE
