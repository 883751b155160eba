"""Tests for credential loading."""
from unittest import mock

from nimbus.domains import credentials


def test_service_account_config_loads_key_file(service_account_file):
    config = {
        "authentication": {
            "type": "service_account",
            "service_account_path": str(service_account_file),
        },
        "gcp": {"project_id": "test-project"},
    }

    with mock.patch.object(credentials.service_account.Credentials,
                           "from_service_account_file") as from_file:
        result = credentials.load_credentials(config)

    from_file.assert_called_once_with(
        str(service_account_file), scopes=[credentials.CLOUD_PLATFORM_SCOPE]
    )
    assert result is from_file.return_value


def test_application_default_config_uses_adc():
    config = {"authentication": {"type": "application_default"}, "gcp": {"project_id": "p"}}

    with mock.patch.object(credentials.google.auth, "default",
                           return_value=(mock.sentinel.adc, "p")) as default:
        assert credentials.load_credentials(config) is mock.sentinel.adc

    default.assert_called_once_with(scopes=[credentials.CLOUD_PLATFORM_SCOPE])


def test_no_config_uses_adc():
    with mock.patch.object(credentials.google.auth, "default",
                           return_value=(mock.sentinel.adc, None)):
        assert credentials.load_credentials(None) is mock.sentinel.adc
