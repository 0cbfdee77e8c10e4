import pytest
from unittest.mock import patch

from awslabs.nfw_rule_group_mcp_server.utils.aws_client_factory import (
    clear_client_cache,
    create_network_firewall_client,
    get_aws_client,
)


@pytest.fixture(autouse=True)
def empty_cache():
    clear_client_cache()
    yield
    clear_client_cache()


@patch("boto3.client")
def test_cache_hit(mock_boto):
    client1 = get_aws_client("network-firewall", "us-east-1")
    client2 = get_aws_client("network-firewall", "us-east-1")
    assert client1 is client2
    assert mock_boto.call_count == 1


@patch("boto3.client")
def test_regions_are_cached_separately(mock_boto):
    get_aws_client("network-firewall", "us-east-1")
    get_aws_client("network-firewall", "eu-west-1")
    assert mock_boto.call_count == 2
    assert mock_boto.call_args.kwargs["region_name"] == "eu-west-1"


@patch("boto3.client")
def test_default_region_from_settings(mock_boto):
    create_network_firewall_client()
    args, kwargs = mock_boto.call_args
    assert args == ("network-firewall",)
    assert kwargs["region_name"] == "us-east-1"
    assert kwargs["config"].retries == {"max_attempts": 3, "mode": "standard"}


@patch("boto3.Session")
def test_profile_uses_session(mock_session):
    get_aws_client("network-firewall", "us-west-2", "secure-profile")  # pragma: allowlist secret
    mock_session.assert_called_once_with(profile_name="secure-profile")
    mock_session.return_value.client.assert_called_once()
