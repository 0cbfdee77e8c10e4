"""Pytest configuration and shared fixtures for Network Firewall Rule Group MCP Server tests."""

import pytest
from unittest.mock import patch

from awslabs.nfw_rule_group_mcp_server.config.settings import get_settings, reset_settings
from awslabs.nfw_rule_group_mcp_server.resources.rule_group_manager import RuleGroupManager
from tests.mocking.fake_network_firewall import FakeNetworkFirewallClient


@pytest.fixture(autouse=True)
def fast_lifecycle_settings(monkeypatch):
    """Poll without sleeping and keep host configuration out of the tests."""
    for name in ("NFW_AWS_PROFILE", "NFW_DEFAULT_REGION", "NFW_DEFAULT_TAGS", "NFW_LIST_PAGE_SIZE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("NFW_POLL_INTERVAL_SECONDS", "0")
    monkeypatch.setenv("NFW_DELETE_TIMEOUT_SECONDS", "5")
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def fake_client():
    """In-memory Network Firewall client in us-east-1."""
    return FakeNetworkFirewallClient(region="us-east-1")


@pytest.fixture
def manager(fake_client):
    return RuleGroupManager(client=fake_client, region="us-east-1", settings=get_settings())


@pytest.fixture
def mock_get_aws_client(fake_client):
    """Route the server's boto3 clients to the fake."""
    with patch("awslabs.nfw_rule_group_mcp_server.server.get_aws_client", return_value=fake_client) as mock:
        yield mock

