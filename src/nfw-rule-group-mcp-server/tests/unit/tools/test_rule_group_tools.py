import pytest
import json
from unittest.mock import patch

from awslabs.nfw_rule_group_mcp_server import server
from awslabs.nfw_rule_group_mcp_server.server import (
    apply_rule_group_configuration,
    delete_rule_group,
    describe_rule_group,
    import_rule_group,
    list_rule_groups,
    plan_rule_group,
    sweep_rule_groups,
    validate_rule_group_configuration,
)

CONFIG = """
resource "aws_networkfirewall_rule_group" "example" {
  capacity = 100
  name     = "example"
  type     = "STATEFUL"
  rule_group {
    rules_source {
      rules_source_list {
        generated_rules_type = "ALLOWLIST"
        target_types         = ["HTTP_HOST"]
        targets              = ["test.example.com"]
      }
    }
  }
}
"""

RULES_CONFIG = """
resource "aws_networkfirewall_rule_group" "rules" {
  capacity = 10
  name     = "tf-acc-test-rules"
  type     = "STATEFUL"
  rules    = "pass ip any any -> any any (sid:1;)"
}
"""


@pytest.mark.asyncio
class TestValidateTool:
    async def test_valid_configuration(self):
        data = json.loads(await validate_rule_group_configuration(CONFIG + RULES_CONFIG))
        assert data["success"]
        assert data["resource_count"] == 2
        assert data["resources"]["aws_networkfirewall_rule_group.example"] == {
            "name": "example",
            "type": "STATEFUL",
            "capacity": 100,
            "uses_rules_string": False,
        }
        assert data["resources"]["aws_networkfirewall_rule_group.rules"]["uses_rules_string"]

    async def test_parse_error(self):
        data = json.loads(await validate_rule_group_configuration('resource "aws_networkfirewall_rule_group" "x" {'))
        assert data["success"] is False
        assert data["error"]["code"] == "CONFIGURATION_PARSE_ERROR"
        assert data["error"]["operation"] == "validate_rule_group_configuration"

    async def test_validation_error(self):
        data = json.loads(await validate_rule_group_configuration(CONFIG.replace("capacity = 100", "capacity = 0")))
        assert data["success"] is False
        assert data["error"]["code"] == "INVALID_INPUT"
        assert "capacity" in data["error"]["message"]


@pytest.mark.asyncio
class TestLifecycleTools:
    async def test_plan_create(self, mock_get_aws_client):
        data = json.loads(await plan_rule_group(CONFIG))
        assert data["success"]
        assert data["region"] == "us-east-1"
        assert data["plan"]["action"] == "create"
        assert data["plan"]["address"] == "aws_networkfirewall_rule_group.example"
        mock_get_aws_client.assert_called_with("network-firewall", "us-east-1")

    async def test_apply_then_plan_is_empty(self, mock_get_aws_client, fake_client):
        data = json.loads(await apply_rule_group_configuration(CONFIG))
        assert data["success"]
        assert data["plan"]["action"] == "create"
        arn = data["attributes"]["arn"]
        assert arn == fake_client.arn_for("example")
        assert data["flatmap"]["rule_group.0.rules_source.0.rules_source_list.0.targets.0"] == "test.example.com"

        data = json.loads(await plan_rule_group(CONFIG, rule_group_arn=arn))
        assert data["plan"]["action"] == "no-op"

    async def test_apply_update(self, mock_get_aws_client, fake_client):
        arn = json.loads(await apply_rule_group_configuration(CONFIG))["attributes"]["arn"]
        updated = CONFIG.replace('"test.example.com"', '"test.example.com", "other.example.com"')

        data = json.loads(await apply_rule_group_configuration(updated, rule_group_arn=arn))
        assert data["success"]
        assert data["plan"]["action"] == "update"
        assert data["flatmap"]["rule_group.0.rules_source.0.rules_source_list.0.targets.#"] == "2"
        assert len(fake_client.calls_to("UpdateRuleGroup")) == 1

    async def test_apply_selects_address(self, mock_get_aws_client):
        data = json.loads(await apply_rule_group_configuration(CONFIG + RULES_CONFIG))
        assert data["success"] is False
        assert "pass address to choose one" in data["error"]["message"]

        data = json.loads(
            await apply_rule_group_configuration(CONFIG + RULES_CONFIG, address="aws_networkfirewall_rule_group.rules")
        )
        assert data["success"]
        assert data["attributes"]["rules"] == "pass ip any any -> any any (sid:1;)"

    async def test_unknown_address(self, mock_get_aws_client):
        data = json.loads(await plan_rule_group(CONFIG, address="aws_networkfirewall_rule_group.missing"))
        assert data["success"] is False
        assert "is not declared in the configuration" in data["error"]["message"]

    async def test_describe_and_import(self, mock_get_aws_client):
        arn = json.loads(await apply_rule_group_configuration(RULES_CONFIG))["attributes"]["arn"]

        described = json.loads(await describe_rule_group(arn))
        assert described["success"]
        assert described["attributes"]["name"] == "tf-acc-test-rules"
        assert described["flatmap"]["rule_group.0.rules_source.0.rules_string"] == "pass ip any any -> any any (sid:1;)"

        imported = json.loads(await import_rule_group(arn))
        assert imported["id"] == arn
        assert "rules" not in imported["attributes"]

    async def test_describe_missing(self, mock_get_aws_client, fake_client):
        data = json.loads(await describe_rule_group(fake_client.arn_for("missing")))
        assert data["success"] is False
        assert data["error"]["code"] == "RESOURCE_NOT_FOUND"
        assert "[ARN_REDACTED]" in data["error"]["message"]

    async def test_invalid_arn(self, mock_get_aws_client):
        data = json.loads(await describe_rule_group("not-an-arn"))
        assert data["success"] is False
        assert data["error"]["code"] == "INVALID_INPUT"
        mock_get_aws_client.assert_not_called()

    async def test_invalid_region(self, mock_get_aws_client):
        data = json.loads(await list_rule_groups(region="nowhere"))
        assert data["success"] is False
        assert "Invalid AWS region" in data["error"]["message"]

    async def test_delete(self, mock_get_aws_client, fake_client):
        arn = json.loads(await apply_rule_group_configuration(CONFIG))["attributes"]["arn"]
        data = json.loads(await delete_rule_group(arn))
        assert data["success"]
        assert data["waited"] is True
        assert fake_client.rule_groups == {}

    async def test_aws_error_code_is_reported(self, mock_get_aws_client, fake_client):
        fake_client.fail_next("CreateRuleGroup", "AccessDeniedException", "not authorized")
        data = json.loads(await apply_rule_group_configuration(CONFIG))
        assert data["success"] is False
        assert data["error"]["code"] == "AWS_ACCESS_DENIED"
        assert data["error"]["aws_error_code"] == "AccessDeniedException"


@pytest.mark.asyncio
class TestListAndSweepTools:
    async def test_list_with_prefix(self, mock_get_aws_client):
        await apply_rule_group_configuration(CONFIG)
        await apply_rule_group_configuration(RULES_CONFIG)

        data = json.loads(await list_rule_groups())
        assert data["total_count"] == 2

        data = json.loads(await list_rule_groups(name_prefix="tf-acc-test"))
        assert [group["Name"] for group in data["rule_groups"]] == ["tf-acc-test-rules"]

    async def test_sweep_defaults_to_dry_run(self, mock_get_aws_client, fake_client):
        await apply_rule_group_configuration(RULES_CONFIG)

        data = json.loads(await sweep_rule_groups(name_prefix="tf-acc-test"))
        assert data["dry_run"] is True
        assert data["total_count"] == 1
        assert len(fake_client.rule_groups) == 1

        data = json.loads(await sweep_rule_groups(name_prefix="tf-acc-test", dry_run=False))
        assert data["total_count"] == 1
        assert fake_client.rule_groups == {}

    async def test_sweep_failures(self, mock_get_aws_client, fake_client):
        await apply_rule_group_configuration(RULES_CONFIG)
        fake_client.fail_next("DeleteRuleGroup", "InvalidOperationException", "in use by a firewall policy")

        data = json.loads(await sweep_rule_groups(dry_run=False))
        assert data["success"] is False
        assert data["error"]["code"] == "SWEEP_FAILED"
        assert len(data["error"]["failures"]) == 1


def test_handle_unknown_error():
    data = json.loads(server.handle_aws_error(RuntimeError("boom"), "op"))
    assert data == {"success": False, "error": {"code": "UNKNOWN_ERROR", "message": "boom", "operation": "op"}}


def test_main_runs_server():
    with patch.object(server.mcp, "run") as mock_run:
        server.main()
    mock_run.assert_called_once()


def test_main_exits_on_error():
    with patch.object(server.mcp, "run", side_effect=RuntimeError("boom")):
        with pytest.raises(SystemExit):
            server.main()
