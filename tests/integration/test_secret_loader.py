import json

import pytest

from core.config import ApplicationConfig
from core.exceptions import ConfigurationError, SecretFileError
from integrations.analytics_reporting import (
    ANALYTICS_SCOPES,
    ReportingClient,
    build_credentials,
    load_client,
    load_secret,
)


def test_load_secret_reads_all_fields(secret_file):
    secret = load_secret(secret_file)

    assert secret.view_id == "123456"
    assert secret.client_id == "client-id.apps.googleusercontent.com"
    assert secret.client_secret == "client-secret"
    assert secret.refresh_token == "refresh-token"


def test_secret_repr_hides_credentials(secret_file):
    secret = load_secret(secret_file)

    assert "client-secret" not in repr(secret)
    assert "refresh-token" not in repr(secret)


def test_missing_file_is_a_configuration_error(tmp_path):
    with pytest.raises(SecretFileError) as exc_info:
        load_secret(tmp_path / "nope.json")

    assert isinstance(exc_info.value, ConfigurationError)
    assert "does not exist" in str(exc_info.value)


@pytest.mark.parametrize("content,expected", [
    ("{not json", "invalid JSON"),
    ("[1, 2, 3]", "expected a JSON object"),
    (json.dumps({"viewId": "1", "clientId": "c", "clientSecret": "s"}), "refreshToken"),
    (json.dumps({"viewId": "", "clientId": "c", "clientSecret": "s", "refreshToken": "r"}), "viewId"),
    (json.dumps({"viewId": 123, "clientId": "c", "clientSecret": "s", "refreshToken": "r"}), "viewId"),
])
def test_malformed_secret_files_are_rejected(tmp_path, content, expected):
    path = tmp_path / "secret.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(SecretFileError) as exc_info:
        load_secret(path)

    assert expected in str(exc_info.value)
    assert exc_info.value.exit_code == 2


def test_build_credentials_uses_refresh_token_flow(secret):
    credentials = build_credentials(secret, "https://oauth2.example.test/token")

    assert credentials.token is None
    assert not credentials.valid
    assert credentials.refresh_token == "refresh-token"
    assert credentials.client_id == secret.client_id
    assert credentials.client_secret == secret.client_secret
    assert credentials.token_uri == "https://oauth2.example.test/token"
    assert list(credentials.scopes) == ANALYTICS_SCOPES


def test_load_client_wires_config_into_client(secret_file):
    app_config = ApplicationConfig(
        request_timeout=12.5,
        quota_user="team-bucket",
        reporting_endpoint="https://reporting.example.test",
    )

    client, secret = load_client(secret_file, app_config)

    assert isinstance(client, ReportingClient)
    assert secret.view_id == "123456"
    assert client.quota_user == "team-bucket"
    assert client.endpoint == "https://reporting.example.test"
    assert client.timeout == 12.5
    assert client.client_id == secret.client_id


def test_load_client_quota_user_override(secret_file):
    client, _ = load_client(secret_file, ApplicationConfig(), quota_user="override")

    assert client.quota_user == "override"
