import pytest
from pydantic import ValidationError

from awslabs.nfw_rule_group_mcp_server.config import RuleGroupSettings, get_settings, reset_settings
from awslabs.nfw_rule_group_mcp_server.consts import DEFAULT_AWS_REGION, DEFAULT_LOG_LEVEL


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("NFW_POLL_INTERVAL_SECONDS")
    monkeypatch.delenv("NFW_DELETE_TIMEOUT_SECONDS")
    cfg = RuleGroupSettings()
    assert cfg.default_region == DEFAULT_AWS_REGION
    assert cfg.log_level == DEFAULT_LOG_LEVEL
    assert cfg.delete_timeout_seconds == 600
    assert cfg.poll_interval_seconds == 5.0
    assert cfg.list_page_size == 100
    assert cfg.default_tags == {}
    # Profile defaults to None
    assert cfg.aws_profile is None


def test_settings_env_override(monkeypatch):
    monkeypatch.setenv("NFW_DEFAULT_REGION", "us-west-2")
    monkeypatch.setenv("NFW_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("NFW_DEFAULT_TAGS", '{"Owner": "network"}')
    cfg = RuleGroupSettings()
    assert cfg.default_region == "us-west-2"
    assert cfg.log_level == "DEBUG"
    assert cfg.default_tags == {"Owner": "network"}


def test_page_size_bounds():
    with pytest.raises(ValidationError):
        RuleGroupSettings(list_page_size=101)


def test_get_settings_is_cached_until_reset(monkeypatch):
    first = get_settings()
    assert get_settings() is first

    monkeypatch.setenv("NFW_DEFAULT_REGION", "eu-west-1")
    assert get_settings().default_region == first.default_region
    reset_settings()
    assert get_settings().default_region == "eu-west-1"
