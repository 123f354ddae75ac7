import pytest
from pydantic import ValidationError

from apiexecutor.config import ExecutorConfig


def test_defaults():
    config = ExecutorConfig(_env_file=None)

    assert config.BASE_URL == "https://api.vk.com/method/"
    assert config.MAX_REQUEST_TRIES == 50
    assert config.LIMITER_RPS == 3.0
    assert config.LIMITER_EXPIRATION == 600.0
    assert config.LIMITER_CLEANUP_INTERVAL == 3600.0
    assert config.VERIFY_SSL is True


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("MAX_REQUEST_TRIES", "3")
    monkeypatch.setenv("LIMITER_RPS", "20")
    monkeypatch.setenv("VERIFY_SSL", "false")

    config = ExecutorConfig(_env_file=None)

    assert config.MAX_REQUEST_TRIES == 3
    assert config.LIMITER_RPS == 20.0
    assert config.VERIFY_SSL is False


def test_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("BASE_URL=https://example.test/method/\n", encoding="utf-8")

    config = ExecutorConfig(_env_file=str(env_file))

    assert config.BASE_URL == "https://example.test/method/"


def test_negative_tries_rejected():
    with pytest.raises(ValidationError):
        ExecutorConfig(_env_file=None, MAX_REQUEST_TRIES=-1)


def test_zero_rps_rejected():
    with pytest.raises(ValidationError):
        ExecutorConfig(_env_file=None, LIMITER_RPS=0)
