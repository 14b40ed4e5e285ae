import pytest
from pydantic import ValidationError

from cronsync.config import CronSyncSettings


def test_defaults(monkeypatch) -> None:
    monkeypatch.delenv("CRONSYNC_LOCK_TIMEOUT", raising=False)

    settings = CronSyncSettings()

    assert settings.redis_url == "redis://localhost:6379"
    assert settings.lock_timeout == 300000
    assert settings.log_level == "INFO"
    assert settings.key_prefix == ""
    assert settings.instance_id


def test_instance_ids_differ_per_instance() -> None:
    assert CronSyncSettings().instance_id != CronSyncSettings().instance_id


def test_environment(monkeypatch) -> None:
    monkeypatch.setenv("CRONSYNC_REDIS_URL", "redis://custom:6380")
    monkeypatch.setenv("CRONSYNC_LOCK_TIMEOUT", "60000")
    monkeypatch.setenv("CRONSYNC_INSTANCE_ID", "test-instance")
    monkeypatch.setenv("CRONSYNC_LOG_LEVEL", "debug")

    settings = CronSyncSettings()

    assert settings.redis_url == "redis://custom:6380"
    assert settings.lock_timeout == 60000
    assert settings.instance_id == "test-instance"
    assert settings.log_level == "DEBUG"


def test_key_prefix_trailing_colon_stripped() -> None:
    assert CronSyncSettings(key_prefix="cronsync:").key_prefix == "cronsync"


@pytest.mark.parametrize("overrides", [{"lock_timeout": 0}, {"log_level": "loud"}])
def test_invalid_values(overrides) -> None:
    with pytest.raises(ValidationError):
        CronSyncSettings(**overrides)
