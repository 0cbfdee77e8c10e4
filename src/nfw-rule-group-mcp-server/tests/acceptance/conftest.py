"""Acceptance fixtures.

Scenarios run against the in-memory Network Firewall fake unless
``NFW_ACC_LIVE`` is set, in which case they create and destroy real rule
groups in ``NFW_ACC_REGION`` with the ambient AWS credentials.
"""

import os

import pytest

from awslabs.nfw_rule_group_mcp_server.config.settings import RuleGroupSettings
from awslabs.nfw_rule_group_mcp_server.resources.rule_group_manager import RuleGroupManager


@pytest.fixture
def acc_manager(manager):
    if not os.environ.get("NFW_ACC_LIVE"):
        return manager
    settings = RuleGroupSettings(poll_interval_seconds=5, delete_timeout_seconds=600)
    return RuleGroupManager(region=os.environ.get("NFW_ACC_REGION"), settings=settings)
