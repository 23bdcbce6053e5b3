"""Tests for settings and logging helpers."""

import pytest

from ords_adapter.config import Settings
from ords_adapter.errors import ConfigurationError
from ords_adapter.logging import redact_payload


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("OPENAPI_URL", "https://host/ords/hr/open-api-catalog/")
    monkeypatch.setenv("CLIENT_ID", "abc")
    monkeypatch.setenv("WORKING_SCHEMA", "hr")

    settings = Settings(_env_file=None)

    assert settings.openapi_url == "https://host/ords/hr/open-api-catalog/"
    assert settings.client_id == "abc"
    assert settings.working_schema == "hr"
    assert settings.adapter_token_margin_seconds == 300


@pytest.mark.parametrize("client_id, client_secret", [(None, "s"), ("id", None), ("", "")])
def test_require_credentials_fails_without_id_or_secret(client_id, client_secret):
    settings = Settings(_env_file=None, client_id=client_id, client_secret=client_secret)

    with pytest.raises(ConfigurationError):
        settings.require_credentials()


def test_require_credentials_passes():
    Settings(_env_file=None, client_id="id", client_secret="secret").require_credentials()


def test_comma_separated_lists():
    settings = Settings(
        _env_file=None,
        adapter_operation_allowlist="get_hr_emp, post_hr_emp,,",
        adapter_catalog_exclude="internal",
    )

    assert settings.operation_allowlist() == {"get_hr_emp", "post_hr_emp"}
    assert settings.catalog_exclude() == {"internal"}
    assert Settings(_env_file=None).operation_allowlist() == set()


def test_redact_payload_masks_nested_secrets():
    payload = {
        "headers": {"Authorization": "Bearer abc", "X-Trace": "1"},
        "body": {"password": "hunter2", "name": "Ada"},
        "params": {"id": 7},
    }

    assert redact_payload(payload) == {
        "headers": {"Authorization": "***REDACTED***", "X-Trace": "1"},
        "body": {"password": "***REDACTED***", "name": "Ada"},
        "params": {"id": 7},
    }


@pytest.mark.asyncio
async def test_startup_exits_when_credentials_missing(monkeypatch):
    from ords_adapter import main

    monkeypatch.setattr(
        main, "get_settings", lambda: Settings(_env_file=None, client_id=None, client_secret=None)
    )

    with pytest.raises(SystemExit) as excinfo:
        await main._run()
    assert excinfo.value.code == 1


def test_redact_payload_masks_sensitive_headers_by_name():
    payload = {
        "headers": {"Cookie": "session=1", "X-API-Key": "k", "Accept": "application/json"},
        "query": {"access_token": "t", "limit": 5},
        "body": [{"client_secret": "s", "id": 1}],
    }

    assert redact_payload(payload) == {
        "headers": {
            "Cookie": "***REDACTED***",
            "X-API-Key": "***REDACTED***",
            "Accept": "application/json",
        },
        "query": {"access_token": "***REDACTED***", "limit": 5},
        "body": [{"client_secret": "***REDACTED***", "id": 1}],
    }
