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

"""Bulk cleanup of leftover rule groups."""

from typing import List, Optional

from ..consts import SWEEP_SKIP_ERROR_CODES
from ..exceptions import RuleGroupError, SweepError
from ..utils.logger import get_logger
from .rule_group_manager import RuleGroupManager

logger = get_logger(__name__)


def sweep_rule_groups(
    manager: RuleGroupManager, name_prefix: Optional[str] = None, dry_run: bool = False
) -> List[str]:
    """Delete every rule group in the manager's region whose name starts with ``name_prefix``.

    Deletions are issued first and waited on afterwards. Failures are
    collected and raised together as a SweepError once every group has been
    attempted. A region where the service is unavailable or access is denied
    is skipped with a warning.

    Returns:
        ARNs of the rule groups deleted (or, with ``dry_run``, that would be).
    """
    try:
        rule_groups = manager.list_rule_groups()
    except RuleGroupError as e:
        if e.aws_code in SWEEP_SKIP_ERROR_CODES:
            logger.warning(f"Skipping NetworkFirewall Rule Group sweep for {manager.region}: {e}")
            return []
        raise SweepError([e]) from e

    targets = [
        group["Arn"] for group in rule_groups if not name_prefix or group.get("Name", "").startswith(name_prefix)
    ]
    if dry_run:
        logger.info(f"Would sweep {len(targets)} NetworkFirewall Rule Group(s) in {manager.region}")
        return targets

    errors: List[Exception] = []
    pending: List[str] = []
    for arn in targets:
        try:
            manager.delete(arn, wait=False)
            pending.append(arn)
        except RuleGroupError as e:
            errors.append(RuleGroupError(f"error deleting NetworkFirewall Rule Group ({arn}): {e}", e.error_code))

    deleted: List[str] = []
    for arn in pending:
        try:
            manager.wait_deleted(arn)
            deleted.append(arn)
        except RuleGroupError as e:
            errors.append(e)

    logger.info(f"Swept {len(deleted)} NetworkFirewall Rule Group(s) in {manager.region}")
    if errors:
        raise SweepError(errors)
    return deleted
