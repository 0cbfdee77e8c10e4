# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""AWS Network Firewall Rule Group MCP Server with all tools using @mcp.tool decorators."""

import json
import sys
from typing import Dict, Optional, Tuple

from botocore.exceptions import ClientError
from mcp.server.fastmcp import FastMCP

from .acceptance.flatmap import to_flatmap
from .config.settings import get_settings
from .consts import MCP_SERVER_DESCRIPTION, NETWORK_FIREWALL_SERVICE, ErrorCode, sanitize_error_message
from .exceptions import RuleGroupError, RuleGroupValidationError, SweepError, aws_error_code
from .iac.loader import load_configuration
from .models.rule_group_models import RuleGroupResource
from .resources.rule_group_manager import RuleGroupManager
from .resources.sweeper import sweep_rule_groups as sweep
from .utils.aws_client_factory import get_aws_client
from .utils.logger import configure_logging, get_logger
from .utils.validation import validate_aws_region, validate_rule_group_arn

# Initialize FastMCP server
mcp = FastMCP(MCP_SERVER_DESCRIPTION)

# Configure security logger
security_logger = get_logger("nfw_rule_group_mcp_server")


def safe_json_dumps(obj, **kwargs):
    """Safely serialize object to JSON."""
    return json.dumps(obj, default=str, **kwargs)


def handle_aws_error(e: Exception, operation: str) -> str:
    """Handle AWS errors with security logging and proper sanitization."""
    error_msg = sanitize_error_message(str(e))

    if isinstance(e, RuleGroupError):
        code = e.error_code
    elif isinstance(e, ClientError):
        code = ErrorCode.AWS_ERROR
    else:
        code = ErrorCode.UNKNOWN_ERROR

    # Log the error with security logger
    security_logger.bind(operation=operation, error_type=type(e).__name__).error(
        f"AWS error in {operation}: {error_msg}"
    )

    result = {
        "success": False,
        "error": {"code": code.value, "message": error_msg, "operation": operation},
    }
    aws_code = getattr(e, "aws_code", None) or aws_error_code(e)
    if aws_code:
        result["error"]["aws_error_code"] = aws_code
    if isinstance(e, SweepError):
        result["error"]["failures"] = [sanitize_error_message(str(error)) for error in e.errors]

    return safe_json_dumps(result, indent=2)


def get_manager(region: Optional[str] = None) -> RuleGroupManager:
    """Build a rule group manager for ``region`` (default region when None)."""
    region = region or get_settings().default_region
    if not validate_aws_region(region):
        raise RuleGroupValidationError(f"Invalid AWS region: {region}")
    return RuleGroupManager(client=get_aws_client(NETWORK_FIREWALL_SERVICE, region), region=region)


def _check_arn(rule_group_arn: str) -> None:
    if not validate_rule_group_arn(rule_group_arn):
        raise RuleGroupValidationError(f"Invalid rule group ARN: {rule_group_arn}")


def _select_resource(resources: Dict[str, RuleGroupResource], address: Optional[str]) -> Tuple[str, RuleGroupResource]:
    if address:
        if address not in resources:
            raise RuleGroupValidationError(f"Resource {address} is not declared in the configuration")
        return address, resources[address]
    if len(resources) != 1:
        raise RuleGroupValidationError(
            f"Configuration declares {len(resources)} rule groups, pass address to choose one: {sorted(resources)}"
        )
    return next(iter(resources.items()))


def _state_summary(state: RuleGroupResource) -> Dict:
    return {"attributes": state.attributes(), "flatmap": to_flatmap(state)}


# =============================================================================
# RULE GROUP TOOLS
# =============================================================================


@mcp.tool(name="validate_rule_group_configuration")
async def validate_rule_group_configuration(configuration: str) -> str:
    """Parse and validate rule group configuration text without calling AWS."""
    try:
        resources = load_configuration(configuration)
        result = {
            "success": True,
            "resource_count": len(resources),
            "resources": {
                address: {"name": r.name, "type": r.type, "capacity": r.capacity, "uses_rules_string": bool(r.rules)}
                for address, r in resources.items()
            },
        }
        return safe_json_dumps(result, indent=2)
    except Exception as e:
        return handle_aws_error(e, "validate_rule_group_configuration")


@mcp.tool(name="plan_rule_group")
async def plan_rule_group(
    configuration: str,
    rule_group_arn: str | None = None,
    address: str | None = None,
    region: str | None = None,
) -> str:
    """Plan the changes that would bring a rule group (or nothing) to the configuration."""
    try:
        address, config = _select_resource(load_configuration(configuration), address)
        manager = get_manager(region)
        state = None
        if rule_group_arn:
            _check_arn(rule_group_arn)
            state = manager.read(rule_group_arn, prior=config)

        plan = manager.plan(config, state, address=address)
        return safe_json_dumps({"success": True, "region": manager.region, "plan": plan.to_dict()}, indent=2)
    except Exception as e:
        return handle_aws_error(e, "plan_rule_group")


@mcp.tool(name="apply_rule_group_configuration")
async def apply_rule_group_configuration(
    configuration: str,
    rule_group_arn: str | None = None,
    address: str | None = None,
    region: str | None = None,
) -> str:
    """Create, update or replace a rule group so it matches the configuration."""
    try:
        address, config = _select_resource(load_configuration(configuration), address)
        manager = get_manager(region)
        state = None
        if rule_group_arn:
            _check_arn(rule_group_arn)
            state = manager.read(rule_group_arn, prior=config)

        plan = manager.plan(config, state, address=address)
        new_state = manager.apply(config, state, plan)
        security_logger.info(f"Applied {address}: {plan.action.value}")

        result = {"success": True, "region": manager.region, "plan": plan.to_dict(), **_state_summary(new_state)}
        return safe_json_dumps(result, indent=2)
    except Exception as e:
        return handle_aws_error(e, "apply_rule_group_configuration")


@mcp.tool(name="describe_rule_group")
async def describe_rule_group(rule_group_arn: str, region: str | None = None) -> str:
    """Describe a rule group as a resource attribute tree."""
    try:
        _check_arn(rule_group_arn)
        manager = get_manager(region)
        state = manager.find(rule_group_arn)
        return safe_json_dumps({"success": True, "region": manager.region, **_state_summary(state)}, indent=2)
    except Exception as e:
        return handle_aws_error(e, "describe_rule_group")


@mcp.tool(name="import_rule_group")
async def import_rule_group(rule_group_arn: str, region: str | None = None) -> str:
    """Import an existing rule group by ARN into a fresh resource state."""
    try:
        _check_arn(rule_group_arn)
        manager = get_manager(region)
        state = manager.import_resource(rule_group_arn)
        return safe_json_dumps(
            {"success": True, "region": manager.region, "id": state.id, **_state_summary(state)}, indent=2
        )
    except Exception as e:
        return handle_aws_error(e, "import_rule_group")


@mcp.tool(name="delete_rule_group")
async def delete_rule_group(rule_group_arn: str, region: str | None = None, wait: bool = True) -> str:
    """Delete a rule group, optionally waiting until it is gone."""
    try:
        _check_arn(rule_group_arn)
        manager = get_manager(region)
        manager.delete(rule_group_arn, wait=wait)
        return safe_json_dumps(
            {"success": True, "region": manager.region, "rule_group_arn": rule_group_arn, "waited": wait}, indent=2
        )
    except Exception as e:
        return handle_aws_error(e, "delete_rule_group")


@mcp.tool(name="list_rule_groups")
async def list_rule_groups(region: str | None = None, name_prefix: str | None = None) -> str:
    """List the rule groups in a region."""
    try:
        manager = get_manager(region)
        rule_groups = [
            group
            for group in manager.list_rule_groups()
            if not name_prefix or group.get("Name", "").startswith(name_prefix)
        ]
        result = {"success": True, "region": manager.region, "total_count": len(rule_groups), "rule_groups": rule_groups}
        return safe_json_dumps(result, indent=2)
    except Exception as e:
        return handle_aws_error(e, "list_rule_groups")


@mcp.tool(name="sweep_rule_groups")
async def sweep_rule_groups(region: str | None = None, name_prefix: str | None = None, dry_run: bool = True) -> str:
    """Delete every rule group in a region whose name starts with name_prefix (dry run by default)."""
    try:
        manager = get_manager(region)
        arns = sweep(manager, name_prefix=name_prefix, dry_run=dry_run)
        result = {
            "success": True,
            "region": manager.region,
            "dry_run": dry_run,
            "rule_group_arns": arns,
            "total_count": len(arns),
        }
        return safe_json_dumps(result, indent=2)
    except Exception as e:
        return handle_aws_error(e, "sweep_rule_groups")


def main() -> None:
    """Main entry point for the Network Firewall Rule Group MCP server."""
    configure_logging(get_settings().log_level)
    security_logger.info("Starting Network Firewall Rule Group MCP Server")

    try:
        mcp.run()
    except KeyboardInterrupt:
        security_logger.info("Network Firewall Rule Group MCP Server shutting down...")
    except Exception as e:
        security_logger.error(f"Server error: {sanitize_error_message(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    main()
