import pytest

from core.config import (
    AccountServiceSettings,
    WebApiServiceSettings,
    get_config_by_key,
)
from core.exceptions import ConfigurationError
from core.logging_config import get_renderer


def test_account_section_from_env(monkeypatch):
    monkeypatch.setenv("ACCOUNT_SERVICE__GRPC_PORT", "6001")
    monkeypatch.setenv("ACCOUNT_SERVICE__REDIS__URL", "redis://cache:6379/2")

    cfg = get_config_by_key("account_service")

    assert isinstance(cfg, AccountServiceSettings)
    assert cfg.grpc_port == 6001
    assert cfg.grpc_address == "0.0.0.0:6001"
    assert cfg.redis.url == "redis://cache:6379/2"
    assert cfg.secret_key == "test-secret-key"


def test_web_api_section_defaults():
    cfg = get_config_by_key("web_api_service")

    assert isinstance(cfg, WebApiServiceSettings)
    assert cfg.grpc_port == 50052
    assert cfg.account_target == "localhost:50051"


def test_unknown_section_fails_fast():
    with pytest.raises(ConfigurationError) as ei:
        get_config_by_key("billing_service")
    assert ei.value.exit_code == 1
    assert ei.value.during == "Config"


def test_missing_secret_fails_fast(monkeypatch):
    monkeypatch.delenv("ACCOUNT_SERVICE__SECRET_KEY", raising=False)
    with pytest.raises(ConfigurationError):
        get_config_by_key("account_service", _env_file=None)


def test_invalid_port_fails_fast(monkeypatch):
    monkeypatch.setenv("ACCOUNT_SERVICE__GRPC_PORT", "70000")
    with pytest.raises(ConfigurationError):
        get_config_by_key("account_service")


def test_non_numeric_timeout_fails_fast(monkeypatch):
    monkeypatch.setenv("ACCOUNT_SERVICE__CONNECT_TIMEOUT", "soon")
    with pytest.raises(ConfigurationError):
        get_config_by_key("account_service")


def test_config_is_immutable():
    cfg = get_config_by_key("account_service")
    with pytest.raises(Exception):
        cfg.grpc_port = 1  # type: ignore[misc]


def test_renderer_selection():
    assert type(get_renderer("json")).__name__ == "JSONRenderer"
    assert type(get_renderer("logfmt")).__name__ == "LogfmtRenderer"
    assert type(get_renderer("console")).__name__ == "ConsoleRenderer"
