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

"""Attribute diffing and plan computation for rule group resources."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..models.rule_group_models import RuleGroupResource
from .schema import MAP_ATTRIBUTES, SET_ATTRIBUTES, canonical_key, canonicalize, is_empty


class PlanAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    REPLACE = "replace"
    DELETE = "delete"
    NO_OP = "no-op"


@dataclass
class AttributeChange:
    """A single attribute difference between state and configuration.

    ``add`` and ``remove`` describe set members, ``update`` describes a scalar
    (or ordered value) whose content changed.
    """

    path: str
    action: str
    before: Any = None
    after: Any = None
    force_new: bool = False


@dataclass
class Plan:
    action: PlanAction
    changes: List[AttributeChange] = field(default_factory=list)
    address: Optional[str] = None

    @property
    def empty(self) -> bool:
        return self.action == PlanAction.NO_OP

    @property
    def requires_replace(self) -> bool:
        return any(change.force_new for change in self.changes)

    def changed_paths(self) -> List[str]:
        return [change.path for change in self.changes]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "action": self.action.value,
            "changes": [asdict(change) for change in self.changes],
        }


def comparable_attributes(
    resource: RuleGroupResource, config: RuleGroupResource, actual: bool = False
) -> Dict[str, Any]:
    """Project ``resource`` onto the attributes ``config`` manages.

    Computed attributes are dropped. ``rule_group`` is only compared when the
    configuration sets it and leaves ``rules`` unset. On the state side
    ``rules`` is taken from the service's ``rules_string`` so out-of-band
    edits show up as drift.
    """
    attributes = resource.attributes()
    for name in RuleGroupResource.computed_fields:
        attributes.pop(name, None)
    if config.rule_group is None or config.rules:
        attributes.pop("rule_group", None)
    if config.rules:
        if actual and resource.rule_group is not None and resource.rule_group.rules_source.rules_string:
            attributes["rules"] = resource.rule_group.rules_source.rules_string
    else:
        attributes.pop("rules", None)
    return canonicalize(attributes)


def diff_attributes(before: Any, after: Any, path: str = "") -> List[AttributeChange]:
    """Recursively diff two canonical attribute trees."""
    changes: List[AttributeChange] = []
    _diff_value(path, path.rsplit(".", 1)[-1], before, after, changes)
    return changes


def _diff_value(path: str, name: str, before: Any, after: Any, changes: List[AttributeChange]) -> None:
    if is_empty(before) and is_empty(after):
        return
    if isinstance(before, dict) or isinstance(after, dict):
        if not path or name in MAP_ATTRIBUTES or not (is_empty(before) or is_empty(after)):
            before, after = before or {}, after or {}
            for key in sorted(set(before) | set(after)):
                _diff_value(_join(path, key), key, before.get(key), after.get(key), changes)
            return
    if isinstance(before, list) or isinstance(after, list):
        if name in SET_ATTRIBUTES:
            _diff_set(path, before or [], after or [], changes)
            return
    if before != after:
        if is_empty(before):
            changes.append(AttributeChange(path, "add", None, after))
        elif is_empty(after):
            changes.append(AttributeChange(path, "remove", before, None))
        else:
            changes.append(AttributeChange(path, "update", before, after))


def _diff_set(path: str, before: List[Any], after: List[Any], changes: List[AttributeChange]) -> None:
    before_keys = {canonical_key(item): item for item in before}
    after_keys = {canonical_key(item): item for item in after}
    for key in sorted(set(before_keys) - set(after_keys)):
        changes.append(AttributeChange(path, "remove", before_keys[key], None))
    for key in sorted(set(after_keys) - set(before_keys)):
        changes.append(AttributeChange(path, "add", None, after_keys[key]))


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _root(path: str) -> str:
    return path.split(".", 1)[0]


def plan_resource(
    config: Optional[RuleGroupResource],
    state: Optional[RuleGroupResource],
    address: Optional[str] = None,
) -> Plan:
    """Compute the plan that moves ``state`` to ``config``.

    A missing ``state`` plans a create, a missing ``config`` plans a delete.
    Any change to a force-new attribute turns an update into a replace.
    """
    if config is None and state is None:
        return Plan(PlanAction.NO_OP, address=address)
    if config is None:
        return Plan(PlanAction.DELETE, address=address)
    if state is None:
        desired = comparable_attributes(config, config)
        return Plan(PlanAction.CREATE, diff_attributes({}, desired), address=address)

    changes = diff_attributes(
        comparable_attributes(state, config, actual=True),
        comparable_attributes(config, config),
    )
    for change in changes:
        change.force_new = _root(change.path) in RuleGroupResource.force_new_fields
    if not changes:
        return Plan(PlanAction.NO_OP, address=address)
    if any(change.force_new for change in changes):
        return Plan(PlanAction.REPLACE, changes, address=address)
    return Plan(PlanAction.UPDATE, changes, address=address)
