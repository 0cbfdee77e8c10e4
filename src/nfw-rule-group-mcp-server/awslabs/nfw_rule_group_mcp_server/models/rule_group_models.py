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

"""Rule group attribute tree models.

The models mirror the ``aws_networkfirewall_rule_group`` configuration schema:
single nested blocks are plain model fields, repeated blocks and value sets
are lists. Configuration parsers produce a list for every block, so models
listed in ``block_fields`` accept a zero- or one-element list in place of the
block itself.
"""

from typing import Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..consts import (
    MAX_CAPACITY,
    MAX_DESCRIPTION_LENGTH,
    MAX_NAME_LENGTH,
    MAX_STATELESS_PRIORITY,
    MAX_VARIABLE_KEY_LENGTH,
    MIN_CAPACITY,
    MIN_STATELESS_PRIORITY,
    CUSTOM_ACTION_NAME_PATTERN,
    RULE_GROUP_NAME_PATTERN,
    RULE_VARIABLE_KEY_PATTERN,
    STATELESS_STANDARD_ACTIONS,
    GeneratedRulesType,
    RuleGroupType,
    RuleOrder,
    StatefulAction,
    StatefulRuleDirection,
    StatefulRuleProtocol,
    TargetType,
    TCPFlag,
)
from ..utils.validation import (
    validate_cidr_block,
    validate_header_address,
    validate_header_port,
    validate_port,
    validate_port_set_entry,
)


def _check_variable_key(value: str) -> str:
    if len(value) > MAX_VARIABLE_KEY_LENGTH or not RULE_VARIABLE_KEY_PATTERN.match(value):
        raise ValueError(f"invalid rule variable key: {value!r}")
    return value


def _to_str(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return str(int(value)) if float(value).is_integer() else str(value)
    return value


class ConfigBlock(BaseModel):
    """Base for every nested configuration block."""

    model_config = ConfigDict(extra="forbid", use_enum_values=True, validate_default=True)

    block_fields: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="before")
    @classmethod
    def _unwrap_single_blocks(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not cls.block_fields:
            return data
        data = dict(data)
        for name in cls.block_fields:
            value = data.get(name)
            if isinstance(value, list):
                if len(value) > 1:
                    raise ValueError(f"at most one {name} block is allowed, got {len(value)}")
                data[name] = value[0] if value else None
        return data


# Rule variables


class IPSet(ConfigBlock):
    definition: List[str] = Field(..., min_length=1)

    @field_validator("definition")
    @classmethod
    def _check_cidrs(cls, value: List[str]) -> List[str]:
        for cidr in value:
            if not validate_cidr_block(cidr):
                raise ValueError(f"invalid CIDR in ip_set definition: {cidr!r}")
        return value


class IPSetEntry(ConfigBlock):
    block_fields: ClassVar[Tuple[str, ...]] = ("ip_set",)

    key: str
    ip_set: IPSet

    @field_validator("key")
    @classmethod
    def _check_key(cls, value: str) -> str:
        return _check_variable_key(value)


class PortSet(ConfigBlock):
    definition: List[str] = Field(..., min_length=1)

    @field_validator("definition", mode="before")
    @classmethod
    def _coerce_ports(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [_to_str(v) for v in value]
        return value

    @field_validator("definition")
    @classmethod
    def _check_ports(cls, value: List[str]) -> List[str]:
        for port in value:
            if not validate_port_set_entry(port):
                raise ValueError(f"invalid port in port_set definition: {port!r}")
        return value


class PortSetEntry(ConfigBlock):
    block_fields: ClassVar[Tuple[str, ...]] = ("port_set",)

    key: str
    port_set: PortSet

    @field_validator("key")
    @classmethod
    def _check_key(cls, value: str) -> str:
        return _check_variable_key(value)


class RuleVariables(ConfigBlock):
    ip_sets: List[IPSetEntry] = Field(default_factory=list)
    port_sets: List[PortSetEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_keys(self) -> "RuleVariables":
        for label, entries in (("ip_sets", self.ip_sets), ("port_sets", self.port_sets)):
            keys = [entry.key for entry in entries]
            if len(keys) != len(set(keys)):
                raise ValueError(f"duplicate keys in {label}: {sorted(keys)}")
        return self


# Stateful rule sources


class RulesSourceList(ConfigBlock):
    generated_rules_type: GeneratedRulesType
    target_types: List[TargetType] = Field(..., min_length=1)
    targets: List[str] = Field(..., min_length=1)


class Header(ConfigBlock):
    destination: str
    destination_port: str
    direction: StatefulRuleDirection
    protocol: StatefulRuleProtocol
    source: str
    source_port: str

    @field_validator("destination_port", "source_port", mode="before")
    @classmethod
    def _coerce_port(cls, value: Any) -> Any:
        return _to_str(value)

    @field_validator("destination", "source")
    @classmethod
    def _check_address(cls, value: str) -> str:
        if not validate_header_address(value):
            raise ValueError(f"invalid header address: {value!r}")
        return value

    @field_validator("destination_port", "source_port")
    @classmethod
    def _check_port(cls, value: str) -> str:
        if not validate_header_port(value):
            raise ValueError(f"invalid header port: {value!r}")
        return value


class RuleOption(ConfigBlock):
    keyword: str = Field(..., min_length=1)
    settings: List[str] = Field(default_factory=list)


class StatefulRule(ConfigBlock):
    block_fields: ClassVar[Tuple[str, ...]] = ("header",)

    action: StatefulAction
    header: Header
    rule_option: List[RuleOption] = Field(..., min_length=1)


# Stateless rule sources


class Dimension(ConfigBlock):
    value: str

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, value: Any) -> Any:
        return _to_str(value)


class PublishMetricAction(ConfigBlock):
    dimension: List[Dimension] = Field(..., min_length=1)


class ActionDefinition(ConfigBlock):
    block_fields: ClassVar[Tuple[str, ...]] = ("publish_metric_action",)

    publish_metric_action: PublishMetricAction


class CustomAction(ConfigBlock):
    block_fields: ClassVar[Tuple[str, ...]] = ("action_definition",)

    action_name: str
    action_definition: ActionDefinition

    @field_validator("action_name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not CUSTOM_ACTION_NAME_PATTERN.match(value) or len(value) > MAX_NAME_LENGTH:
            raise ValueError(f"invalid custom action name: {value!r}")
        return value


class Address(ConfigBlock):
    address_definition: str

    @field_validator("address_definition")
    @classmethod
    def _check_cidr(cls, value: str) -> str:
        if not validate_cidr_block(value):
            raise ValueError(f"invalid address_definition: {value!r}")
        return value


class PortRange(ConfigBlock):
    from_port: int
    to_port: Optional[int] = None

    @model_validator(mode="after")
    def _check_range(self) -> "PortRange":
        if self.to_port is None:
            self.to_port = self.from_port
        if not (validate_port(self.from_port) and validate_port(self.to_port)) or self.from_port > self.to_port:
            raise ValueError(f"invalid port range: {self.from_port}-{self.to_port}")
        return self


class TCPFlagField(ConfigBlock):
    flags: List[TCPFlag] = Field(..., min_length=1)
    masks: List[TCPFlag] = Field(default_factory=list)


class MatchAttributes(ConfigBlock):
    destination: List[Address] = Field(default_factory=list)
    destination_port: List[PortRange] = Field(default_factory=list)
    protocols: List[int] = Field(default_factory=list)
    source: List[Address] = Field(default_factory=list)
    source_port: List[PortRange] = Field(default_factory=list)
    tcp_flag: List[TCPFlagField] = Field(default_factory=list)

    @field_validator("protocols")
    @classmethod
    def _check_protocols(cls, value: List[int]) -> List[int]:
        for protocol in value:
            if not 0 <= protocol <= 255:
                raise ValueError(f"invalid IP protocol number: {protocol}")
        return value


class RuleDefinition(ConfigBlock):
    block_fields: ClassVar[Tuple[str, ...]] = ("match_attributes",)

    actions: List[str] = Field(..., min_length=1)
    match_attributes: MatchAttributes


class StatelessRule(ConfigBlock):
    block_fields: ClassVar[Tuple[str, ...]] = ("rule_definition",)

    priority: int = Field(..., ge=MIN_STATELESS_PRIORITY, le=MAX_STATELESS_PRIORITY)
    rule_definition: RuleDefinition


class StatelessRulesAndCustomActions(ConfigBlock):
    custom_action: List[CustomAction] = Field(default_factory=list)
    stateless_rule: List[StatelessRule] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _check_actions(self) -> "StatelessRulesAndCustomActions":
        custom = {action.action_name for action in self.custom_action}
        priorities = [rule.priority for rule in self.stateless_rule]
        if len(priorities) != len(set(priorities)):
            raise ValueError("stateless_rule priorities must be unique")
        for rule in self.stateless_rule:
            for action in rule.rule_definition.actions:
                if action not in STATELESS_STANDARD_ACTIONS and action not in custom:
                    raise ValueError(f"stateless rule action {action!r} is neither a standard nor a custom action")
        return self


class RulesSource(ConfigBlock):
    block_fields: ClassVar[Tuple[str, ...]] = ("rules_source_list", "stateless_rules_and_custom_actions")

    rules_source_list: Optional[RulesSourceList] = None
    rules_string: Optional[str] = None
    stateful_rule: List[StatefulRule] = Field(default_factory=list)
    stateless_rules_and_custom_actions: Optional[StatelessRulesAndCustomActions] = None

    @model_validator(mode="after")
    def _exactly_one_source(self) -> "RulesSource":
        configured = [
            name
            for name, present in (
                ("rules_source_list", self.rules_source_list is not None),
                ("rules_string", bool(self.rules_string)),
                ("stateful_rule", bool(self.stateful_rule)),
                ("stateless_rules_and_custom_actions", self.stateless_rules_and_custom_actions is not None),
            )
            if present
        ]
        if len(configured) != 1:
            raise ValueError(f"rules_source requires exactly one rule source, got {configured or 'none'}")
        return self


class StatefulRuleOptions(ConfigBlock):
    rule_order: RuleOrder


class RuleGroup(ConfigBlock):
    block_fields: ClassVar[Tuple[str, ...]] = ("rule_variables", "rules_source", "stateful_rule_options")

    rule_variables: Optional[RuleVariables] = None
    rules_source: RulesSource
    stateful_rule_options: Optional[StatefulRuleOptions] = None


class RuleGroupResource(ConfigBlock):
    """An ``aws_networkfirewall_rule_group`` resource: configuration or state.

    ``arn``, ``update_token`` and ``tags_all`` are computed by the service and
    are only populated on resources read back from it. ``rules`` is never
    returned by the service, so it is only populated from configuration.
    """

    block_fields: ClassVar[Tuple[str, ...]] = ("rule_group",)
    computed_fields: ClassVar[Tuple[str, ...]] = ("arn", "update_token", "tags_all")
    force_new_fields: ClassVar[Tuple[str, ...]] = ("name", "type", "capacity")

    name: str
    type: RuleGroupType
    capacity: int = Field(..., ge=MIN_CAPACITY, le=MAX_CAPACITY)
    description: Optional[str] = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)
    rules: Optional[str] = None
    rule_group: Optional[RuleGroup] = None
    tags: Dict[str, str] = Field(default_factory=dict)

    arn: Optional[str] = None
    update_token: Optional[str] = None
    tags_all: Dict[str, str] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if len(value) > MAX_NAME_LENGTH or not RULE_GROUP_NAME_PATTERN.match(value):
            raise ValueError(f"invalid rule group name: {value!r}")
        return value

    @field_validator("tags", "tags_all", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {str(k): _to_str(v) for k, v in value.items()}
        return value

    @model_validator(mode="after")
    def _check_sources(self) -> "RuleGroupResource":
        if not self.rules and self.rule_group is None:
            raise ValueError("one of rules or rule_group must be configured")
        if self.type == RuleGroupType.STATELESS.value:
            if self.rules:
                raise ValueError("rules is only valid for STATEFUL rule groups")
            if self.rule_group is not None and self.rule_group.rules_source.stateless_rules_and_custom_actions is None:
                raise ValueError("STATELESS rule groups require stateless_rules_and_custom_actions")
        elif self.rule_group is not None and self.rule_group.rules_source.stateless_rules_and_custom_actions:
            raise ValueError("stateless_rules_and_custom_actions is only valid for STATELESS rule groups")
        return self

    @property
    def id(self) -> Optional[str]:
        return self.arn

    def attributes(self) -> Dict[str, Any]:
        """Return the attribute tree as plain data, omitting unset optionals."""
        return self.model_dump(exclude_none=True)
