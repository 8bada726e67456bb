from datetime import date

import pytest
from pydantic import ValidationError

from token_table.config import DEFAULT_DEPLOY_DATE_OVERRIDES, Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("TOKEN_TABLE_DEPLOY_DATE_OVERRIDES", raising=False)
    settings = Settings(_env_file=None)
    assert settings.refresh_interval_sec == 60
    assert settings.deploy_date_overrides == DEFAULT_DEPLOY_DATE_OVERRIDES
    assert settings.feed_url.endswith("/spot.json")


def test_overrides_from_json_env(monkeypatch):
    monkeypatch.setenv("TOKEN_TABLE_DEPLOY_DATE_OVERRIDES", '{"0xaa": "2024-01-02"}')
    settings = Settings(_env_file=None)
    assert settings.deploy_date_overrides == {"0xaa": date(2024, 1, 2)}


def test_overrides_from_pairs(monkeypatch):
    monkeypatch.setenv("TOKEN_TABLE_DEPLOY_DATE_OVERRIDES", "0xaa=2024-01-02, 0xbb=2023-12-31")
    settings = Settings(_env_file=None)
    assert settings.deploy_date_overrides == {"0xaa": date(2024, 1, 2), "0xbb": date(2023, 12, 31)}


def test_interval_from_env(monkeypatch):
    monkeypatch.setenv("TOKEN_TABLE_REFRESH_INTERVAL_SEC", "15")
    assert Settings(_env_file=None).refresh_interval_sec == 15


def test_rejects_bad_log_level():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, log_level="LOUD")
