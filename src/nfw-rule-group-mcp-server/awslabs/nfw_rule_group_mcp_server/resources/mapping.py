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

"""Mapping between the rule group attribute tree and Network Firewall API shapes.

``expand_*`` functions turn configuration models into request parameters,
``flatten_*`` functions turn ``DescribeRuleGroup`` output back into attribute
dictionaries that validate as ``RuleGroupResource``.
"""

from typing import Any, Dict, List, Optional

from ..models.rule_group_models import (
    MatchAttributes,
    RuleGroup,
    RulesSource,
    RuleVariables,
    StatelessRulesAndCustomActions,
)

# Expand


def expand_rule_group(rule_group: RuleGroup) -> Dict[str, Any]:
    """Build the ``RuleGroup`` request structure."""
    result: Dict[str, Any] = {"RulesSource": expand_rules_source(rule_group.rules_source)}
    if rule_group.rule_variables is not None:
        result["RuleVariables"] = expand_rule_variables(rule_group.rule_variables)
    if rule_group.stateful_rule_options is not None:
        result["StatefulRuleOptions"] = {"RuleOrder": rule_group.stateful_rule_options.rule_order}
    return result


def expand_rule_variables(variables: RuleVariables) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    if variables.ip_sets:
        result["IPSets"] = {entry.key: {"Definition": list(entry.ip_set.definition)} for entry in variables.ip_sets}
    if variables.port_sets:
        result["PortSets"] = {
            entry.key: {"Definition": list(entry.port_set.definition)} for entry in variables.port_sets
        }
    return result


def expand_rules_source(source: RulesSource) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    if source.rules_source_list is not None:
        result["RulesSourceList"] = {
            "GeneratedRulesType": source.rules_source_list.generated_rules_type,
            "TargetTypes": list(source.rules_source_list.target_types),
            "Targets": list(source.rules_source_list.targets),
        }
    if source.rules_string:
        result["RulesString"] = source.rules_string
    if source.stateful_rule:
        result["StatefulRules"] = [
            {
                "Action": rule.action,
                "Header": {
                    "Destination": rule.header.destination,
                    "DestinationPort": rule.header.destination_port,
                    "Direction": rule.header.direction,
                    "Protocol": rule.header.protocol,
                    "Source": rule.header.source,
                    "SourcePort": rule.header.source_port,
                },
                "RuleOptions": [
                    _without_empty({"Keyword": option.keyword, "Settings": list(option.settings)})
                    for option in rule.rule_option
                ],
            }
            for rule in source.stateful_rule
        ]
    if source.stateless_rules_and_custom_actions is not None:
        result["StatelessRulesAndCustomActions"] = expand_stateless_rules_and_custom_actions(
            source.stateless_rules_and_custom_actions
        )
    return result


def expand_stateless_rules_and_custom_actions(block: StatelessRulesAndCustomActions) -> Dict[str, Any]:
    result: Dict[str, Any] = {
        "StatelessRules": [
            {
                "Priority": rule.priority,
                "RuleDefinition": {
                    "Actions": list(rule.rule_definition.actions),
                    "MatchAttributes": expand_match_attributes(rule.rule_definition.match_attributes),
                },
            }
            for rule in block.stateless_rule
        ]
    }
    if block.custom_action:
        result["CustomActions"] = [
            {
                "ActionName": action.action_name,
                "ActionDefinition": {
                    "PublishMetricAction": {
                        "Dimensions": [
                            {"Value": dimension.value}
                            for dimension in action.action_definition.publish_metric_action.dimension
                        ]
                    }
                },
            }
            for action in block.custom_action
        ]
    return result


def expand_match_attributes(match: MatchAttributes) -> Dict[str, Any]:
    result = {
        "Destinations": [{"AddressDefinition": a.address_definition} for a in match.destination],
        "DestinationPorts": [{"FromPort": p.from_port, "ToPort": p.to_port} for p in match.destination_port],
        "Protocols": list(match.protocols),
        "Sources": [{"AddressDefinition": a.address_definition} for a in match.source],
        "SourcePorts": [{"FromPort": p.from_port, "ToPort": p.to_port} for p in match.source_port],
        "TCPFlags": [_without_empty({"Flags": list(f.flags), "Masks": list(f.masks)}) for f in match.tcp_flag],
    }
    return _without_empty(result)


def expand_tags(tags: Dict[str, str]) -> List[Dict[str, str]]:
    return [{"Key": key, "Value": value} for key, value in sorted(tags.items())]


def _without_empty(values: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if value not in (None, [], {})}


# Flatten


def flatten_rule_group_output(output: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten ``DescribeRuleGroup`` output into resource attributes."""
    response = output["RuleGroupResponse"]
    attributes: Dict[str, Any] = {
        "arn": response["RuleGroupArn"],
        "name": response["RuleGroupName"],
        "type": response["Type"],
        "capacity": response["Capacity"],
        "description": response.get("Description"),
        "update_token": output.get("UpdateToken"),
        "tags_all": flatten_tags(response.get("Tags")),
    }
    if output.get("RuleGroup"):
        attributes["rule_group"] = flatten_rule_group(output["RuleGroup"])
    return attributes


def flatten_rule_group(rule_group: Dict[str, Any]) -> Dict[str, Any]:
    result: Dict[str, Any] = {"rules_source": flatten_rules_source(rule_group.get("RulesSource") or {})}
    if rule_group.get("RuleVariables"):
        result["rule_variables"] = flatten_rule_variables(rule_group["RuleVariables"])
    if (rule_group.get("StatefulRuleOptions") or {}).get("RuleOrder"):
        result["stateful_rule_options"] = {"rule_order": rule_group["StatefulRuleOptions"]["RuleOrder"]}
    return result


def flatten_rule_variables(variables: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "ip_sets": [
            {"key": key, "ip_set": {"definition": list(value.get("Definition", []))}}
            for key, value in (variables.get("IPSets") or {}).items()
        ],
        "port_sets": [
            {"key": key, "port_set": {"definition": list(value.get("Definition", []))}}
            for key, value in (variables.get("PortSets") or {}).items()
        ],
    }


def flatten_rules_source(source: Dict[str, Any]) -> Dict[str, Any]:
    result: Dict[str, Any] = {"stateful_rule": []}
    if source.get("RulesSourceList"):
        source_list = source["RulesSourceList"]
        result["rules_source_list"] = {
            "generated_rules_type": source_list["GeneratedRulesType"],
            "target_types": list(source_list.get("TargetTypes", [])),
            "targets": list(source_list.get("Targets", [])),
        }
    if source.get("RulesString"):
        result["rules_string"] = source["RulesString"]
    for rule in source.get("StatefulRules") or []:
        header = rule["Header"]
        result["stateful_rule"].append(
            {
                "action": rule["Action"],
                "header": {
                    "destination": header["Destination"],
                    "destination_port": header["DestinationPort"],
                    "direction": header["Direction"],
                    "protocol": header["Protocol"],
                    "source": header["Source"],
                    "source_port": header["SourcePort"],
                },
                "rule_option": [
                    {"keyword": option["Keyword"], "settings": list(option.get("Settings", []))}
                    for option in rule.get("RuleOptions", [])
                ],
            }
        )
    if source.get("StatelessRulesAndCustomActions"):
        result["stateless_rules_and_custom_actions"] = flatten_stateless_rules_and_custom_actions(
            source["StatelessRulesAndCustomActions"]
        )
    return result


def flatten_stateless_rules_and_custom_actions(block: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "custom_action": [
            {
                "action_name": action["ActionName"],
                "action_definition": {
                    "publish_metric_action": {
                        "dimension": [
                            {"value": dimension["Value"]}
                            for dimension in action["ActionDefinition"]["PublishMetricAction"]["Dimensions"]
                        ]
                    }
                },
            }
            for action in block.get("CustomActions") or []
        ],
        "stateless_rule": [
            {
                "priority": rule["Priority"],
                "rule_definition": {
                    "actions": list(rule["RuleDefinition"]["Actions"]),
                    "match_attributes": flatten_match_attributes(rule["RuleDefinition"]["MatchAttributes"]),
                },
            }
            for rule in block.get("StatelessRules") or []
        ],
    }


def flatten_match_attributes(match: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "destination": [{"address_definition": a["AddressDefinition"]} for a in match.get("Destinations", [])],
        "destination_port": [_flatten_port_range(p) for p in match.get("DestinationPorts", [])],
        "protocols": list(match.get("Protocols", [])),
        "source": [{"address_definition": a["AddressDefinition"]} for a in match.get("Sources", [])],
        "source_port": [_flatten_port_range(p) for p in match.get("SourcePorts", [])],
        "tcp_flag": [
            {"flags": list(f.get("Flags", [])), "masks": list(f.get("Masks", []))} for f in match.get("TCPFlags", [])
        ],
    }


def _flatten_port_range(port_range: Dict[str, Any]) -> Dict[str, Any]:
    return {"from_port": port_range["FromPort"], "to_port": port_range.get("ToPort")}


def flatten_tags(tags: Optional[List[Dict[str, str]]]) -> Dict[str, str]:
    return {tag["Key"]: tag["Value"] for tag in tags or []}
