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

"""Lifecycle management of Network Firewall rule groups.

``RuleGroupManager`` wraps a boto3 ``network-firewall`` client and exposes
the resource operations: create, read, update, delete (with a wait until the
group is gone), list, import, plan and apply. Every state it returns is a
``RuleGroupResource`` flattened from ``DescribeRuleGroup``.
"""

import time
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError

from ..config.settings import RuleGroupSettings, get_settings
from ..consts import RuleGroupStatus
from ..exceptions import (
    RuleGroupNotFoundError,
    RuleGroupTimeoutError,
    aws_error_code,
    from_client_error,
    is_not_found,
)
from ..models.rule_group_models import RuleGroupResource
from ..utils.aws_client_factory import create_network_firewall_client
from ..utils.logger import get_logger
from .diff import Plan, PlanAction, plan_resource
from .mapping import expand_rule_group, expand_tags, flatten_rule_group_output
from .schema import canonicalize

logger = get_logger(__name__)


def _canonical(block: Any) -> Any:
    return canonicalize(block.model_dump(exclude_none=True)) if block is not None else None


class RuleGroupManager:
    """Create, read, update and delete ``aws_networkfirewall_rule_group`` resources."""

    def __init__(
        self,
        client: Any = None,
        region: Optional[str] = None,
        settings: Optional[RuleGroupSettings] = None,
    ):
        self.settings = settings or get_settings()
        self.region = region or self.settings.default_region
        self.client = client or create_network_firewall_client(self.region, self.settings.aws_profile)

    # Read

    def describe(self, arn: str) -> Dict[str, Any]:
        """Raw ``DescribeRuleGroup`` output; raises RuleGroupNotFoundError."""
        logger.debug(f"DescribeRuleGroup {arn}")
        try:
            return self.client.describe_rule_group(RuleGroupArn=arn)
        except ClientError as e:
            if is_not_found(e):
                raise RuleGroupNotFoundError(arn) from e
            raise from_client_error(e, "DescribeRuleGroup") from e

    def find(self, arn: str) -> RuleGroupResource:
        """Describe ``arn`` and flatten it; raises RuleGroupNotFoundError."""
        output = self.describe(arn)
        if output["RuleGroupResponse"].get("RuleGroupStatus") == RuleGroupStatus.DELETING.value:
            raise RuleGroupNotFoundError(arn)
        return RuleGroupResource.model_validate(flatten_rule_group_output(output))

    def read(self, arn: str, prior: Optional[RuleGroupResource] = None) -> Optional[RuleGroupResource]:
        """Refresh the state of ``arn``.

        Returns None when the group no longer exists, so that the next plan
        becomes a create. ``rules`` is never returned by the service and is
        carried over from ``prior``. Provider default tags are split out of
        ``tags_all`` to rebuild ``tags``, except for keys ``prior`` declares.
        """
        try:
            state = self.find(arn)
        except RuleGroupNotFoundError:
            logger.warning(f"NetworkFirewall Rule Group ({arn}) not found, removing from state")
            return None

        configured = prior.tags if prior is not None else {}
        updates: Dict[str, Any] = {"tags": self._resource_tags(state.tags_all, configured)}
        if prior is not None and prior.rules:
            updates["rules"] = prior.rules
        return state.model_copy(update=updates)

    def _resource_tags(self, tags_all: Dict[str, str], configured: Dict[str, str]) -> Dict[str, str]:
        defaults = self.settings.default_tags
        return {key: value for key, value in tags_all.items() if key in configured or defaults.get(key) != value}

    def _all_tags(self, tags: Dict[str, str]) -> Dict[str, str]:
        merged = dict(self.settings.default_tags)
        merged.update(tags)
        return merged

    # Create

    def create(self, config: RuleGroupResource) -> RuleGroupResource:
        params: Dict[str, Any] = {
            "RuleGroupName": config.name,
            "Type": config.type,
            "Capacity": config.capacity,
        }
        if config.description:
            params["Description"] = config.description
        if config.rules:
            params["Rules"] = config.rules
        elif config.rule_group is not None:
            params["RuleGroup"] = expand_rule_group(config.rule_group)
        tags = self._all_tags(config.tags)
        if tags:
            params["Tags"] = expand_tags(tags)

        logger.info(f"Creating NetworkFirewall Rule Group: {config.name}")
        try:
            output = self.client.create_rule_group(**params)
        except ClientError as e:
            raise from_client_error(e, f"CreateRuleGroup ({config.name})") from e

        arn = output["RuleGroupResponse"]["RuleGroupArn"]
        state = self.read(arn, prior=config)
        if state is None:
            raise RuleGroupNotFoundError(arn)
        return state

    # Update

    def update(self, state: RuleGroupResource, config: RuleGroupResource) -> RuleGroupResource:
        """Update ``state`` in place to match ``config``.

        ``UpdateRuleGroup`` carries exactly one of ``Rules`` (whenever ``rules``
        is configured) or ``RuleGroup``. An ``InvalidTokenException`` is
        retried once with a fresh update token.
        """
        arn = state.arn
        if config.rules:
            source_changed = config.rules != self._current_rules(state)
        else:
            source_changed = config.rule_group is not None and _canonical(config.rule_group) != _canonical(
                state.rule_group
            )
        body_changed = source_changed or (config.description or "") != (state.description or "")

        if body_changed:
            params: Dict[str, Any] = {
                "RuleGroupArn": arn,
                "Type": config.type,
                "Description": config.description or "",
            }
            if config.rules or config.rule_group is None:
                params["Rules"] = config.rules
            else:
                params["RuleGroup"] = expand_rule_group(config.rule_group)
            self._update_rule_group(arn, params)

        self._update_tags(arn, state.tags_all, self._all_tags(config.tags))

        refreshed = self.read(arn, prior=config)
        if refreshed is None:
            raise RuleGroupNotFoundError(arn)
        return refreshed

    @staticmethod
    def _current_rules(state: RuleGroupResource) -> Optional[str]:
        if state.rule_group is not None and state.rule_group.rules_source.rules_string:
            return state.rule_group.rules_source.rules_string
        return state.rules

    def _update_rule_group(self, arn: str, params: Dict[str, Any]) -> None:
        logger.info(f"Updating NetworkFirewall Rule Group: {arn}")
        for attempt in range(2):
            params["UpdateToken"] = self.describe(arn)["UpdateToken"]
            try:
                self.client.update_rule_group(**params)
                return
            except ClientError as e:
                if aws_error_code(e) == "InvalidTokenException" and attempt == 0:
                    logger.warning(f"Stale update token for {arn}, retrying")
                    continue
                raise from_client_error(e, f"UpdateRuleGroup ({arn})") from e

    def _update_tags(self, arn: str, old: Dict[str, str], new: Dict[str, str]) -> None:
        removed = sorted(key for key in old if key not in new)
        changed = {key: value for key, value in new.items() if old.get(key) != value}
        try:
            if removed:
                logger.debug(f"UntagResource {arn}: {removed}")
                self.client.untag_resource(ResourceArn=arn, TagKeys=removed)
            if changed:
                logger.debug(f"TagResource {arn}: {sorted(changed)}")
                self.client.tag_resource(ResourceArn=arn, Tags=expand_tags(changed))
        except ClientError as e:
            raise from_client_error(e, f"updating tags ({arn})") from e

    # Delete

    def delete(self, arn: str, wait: bool = True) -> None:
        logger.info(f"Deleting NetworkFirewall Rule Group: {arn}")
        try:
            self.client.delete_rule_group(RuleGroupArn=arn)
        except ClientError as e:
            if is_not_found(e):
                return
            raise from_client_error(e, f"DeleteRuleGroup ({arn})") from e
        if wait:
            self.wait_deleted(arn)

    def wait_deleted(self, arn: str, timeout: Optional[float] = None) -> None:
        """Poll until ``arn`` is not found; raises RuleGroupTimeoutError."""
        timeout = self.settings.delete_timeout_seconds if timeout is None else timeout
        deadline = time.monotonic() + timeout
        while True:
            try:
                status = self.describe(arn)["RuleGroupResponse"].get("RuleGroupStatus")
            except RuleGroupNotFoundError:
                logger.debug(f"NetworkFirewall Rule Group ({arn}) deleted")
                return
            if time.monotonic() >= deadline:
                raise RuleGroupTimeoutError(
                    f"timeout after {timeout}s waiting for NetworkFirewall Rule Group ({arn}) delete "
                    f"(status: {status})"
                )
            time.sleep(self.settings.poll_interval_seconds)

    # List / import

    def list_rule_groups(self) -> List[Dict[str, str]]:
        """Every rule group in the region as ``{"Name", "Arn"}`` items."""
        results: List[Dict[str, str]] = []
        params: Dict[str, Any] = {"MaxResults": self.settings.list_page_size}
        while True:
            try:
                page = self.client.list_rule_groups(**params)
            except ClientError as e:
                raise from_client_error(e, "ListRuleGroups") from e
            results.extend(page.get("RuleGroups", []))
            token = page.get("NextToken")
            if not token:
                return results
            params["NextToken"] = token

    def import_resource(self, arn: str) -> RuleGroupResource:
        """Read ``arn`` into a fresh state; raises RuleGroupNotFoundError."""
        state = self.read(arn)
        if state is None:
            raise RuleGroupNotFoundError(arn)
        return state

    # Plan / apply

    def plan(
        self,
        config: Optional[RuleGroupResource],
        state: Optional[RuleGroupResource],
        address: Optional[str] = None,
    ) -> Plan:
        return plan_resource(config, state, address)

    def apply(
        self,
        config: Optional[RuleGroupResource],
        state: Optional[RuleGroupResource],
        plan: Optional[Plan] = None,
    ) -> Optional[RuleGroupResource]:
        """Carry out ``plan`` (computed when not given) and return the new state."""
        plan = plan or self.plan(config, state)
        if plan.action == PlanAction.NO_OP:
            return state
        if plan.action == PlanAction.CREATE:
            return self.create(config)
        if plan.action == PlanAction.UPDATE:
            return self.update(state, config)
        if plan.action == PlanAction.REPLACE:
            logger.info(f"Replacing NetworkFirewall Rule Group {state.arn}: {plan.changed_paths()}")
            self.delete(state.arn)
            return self.create(config)
        self.delete(state.arn)
        return None
