"""Tests for the rule group attribute models."""

import pytest
from pydantic import ValidationError

from awslabs.nfw_rule_group_mcp_server.models.rule_group_models import (
    Header,
    PortRange,
    PortSet,
    RuleGroup,
    RuleGroupResource,
    RulesSource,
    RuleVariables,
    StatelessRulesAndCustomActions,
)

RULES = "pass ip any any -> any any (sid:1;)"
SOURCE_LIST = {"generated_rules_type": "ALLOWLIST", "target_types": ["HTTP_HOST"], "targets": ["a.example.com"]}


def stateless_block(actions, custom_actions=None, priorities=(1,)):
    return {
        "custom_action": custom_actions or [],
        "stateless_rule": [
            {
                "priority": priority,
                "rule_definition": [{"actions": actions, "match_attributes": [{"protocols": [6]}]}],
            }
            for priority in priorities
        ],
    }


class TestRuleGroupResource:
    def test_rules_only(self):
        resource = RuleGroupResource(name="example", type="STATEFUL", capacity=100, rules=RULES)
        assert resource.rule_group is None
        assert resource.tags == {}
        assert resource.id is None

    def test_single_block_lists_are_unwrapped(self):
        resource = RuleGroupResource.model_validate(
            {
                "name": "example",
                "type": "STATEFUL",
                "capacity": 100,
                "rule_group": [{"rules_source": [{"rules_string": RULES}]}],
            }
        )
        assert isinstance(resource.rule_group, RuleGroup)
        assert resource.rule_group.rules_source.rules_string == RULES

    def test_empty_block_list_means_unset(self):
        resource = RuleGroupResource.model_validate(
            {"name": "example", "type": "STATEFUL", "capacity": 100, "rules": RULES, "rule_group": []}
        )
        assert resource.rule_group is None

    def test_requires_rules_or_rule_group(self):
        with pytest.raises(ValidationError, match="one of rules or rule_group must be configured"):
            RuleGroupResource(name="example", type="STATEFUL", capacity=100)

    @pytest.mark.parametrize("name", ["", "has space", "under_score", "x" * 129])
    def test_invalid_names(self, name):
        with pytest.raises(ValidationError):
            RuleGroupResource(name=name, type="STATEFUL", capacity=100, rules=RULES)

    @pytest.mark.parametrize("capacity", [0, 30001])
    def test_capacity_bounds(self, capacity):
        with pytest.raises(ValidationError):
            RuleGroupResource(name="example", type="STATEFUL", capacity=capacity, rules=RULES)

    def test_invalid_type(self):
        with pytest.raises(ValidationError):
            RuleGroupResource(name="example", type="STATEFULL", capacity=100, rules=RULES)

    def test_rules_not_allowed_for_stateless(self):
        with pytest.raises(ValidationError, match="rules is only valid for STATEFUL"):
            RuleGroupResource(name="example", type="STATELESS", capacity=100, rules=RULES)

    def test_stateless_requires_stateless_rules(self):
        with pytest.raises(ValidationError, match="STATELESS rule groups require"):
            RuleGroupResource.model_validate(
                {
                    "name": "example",
                    "type": "STATELESS",
                    "capacity": 100,
                    "rule_group": {"rules_source": {"rules_string": RULES}},
                }
            )

    def test_stateful_rejects_stateless_rules(self):
        with pytest.raises(ValidationError, match="only valid for STATELESS"):
            RuleGroupResource.model_validate(
                {
                    "name": "example",
                    "type": "STATEFUL",
                    "capacity": 100,
                    "rule_group": {
                        "rules_source": {"stateless_rules_and_custom_actions": stateless_block(["aws:pass"])}
                    },
                }
            )

    def test_tag_values_are_strings(self):
        resource = RuleGroupResource(name="example", type="STATEFUL", capacity=100, rules=RULES, tags={"Cost": 10})
        assert resource.tags == {"Cost": "10"}

    def test_attributes_omit_unset_optionals(self):
        resource = RuleGroupResource(name="example", type="STATEFUL", capacity=100, rules=RULES)
        attributes = resource.attributes()
        assert "description" not in attributes
        assert "rule_group" not in attributes
        assert attributes["rules"] == RULES


class TestRulesSource:
    def test_exactly_one_source(self):
        with pytest.raises(ValidationError, match="exactly one rule source"):
            RulesSource(rules_string=RULES, rules_source_list=SOURCE_LIST)

    def test_no_source(self):
        with pytest.raises(ValidationError, match="got none"):
            RulesSource()

    def test_rules_source_list_enums(self):
        with pytest.raises(ValidationError):
            RulesSource(rules_source_list={**SOURCE_LIST, "generated_rules_type": "MAYBE"})


class TestHeader:
    def test_numeric_ports_become_strings(self):
        header = Header(
            destination="124.1.1.24/32",
            destination_port=53,
            direction="ANY",
            protocol="TCP",
            source="$HOME_NET",
            source_port="1990:1994",
        )
        assert header.destination_port == "53"
        assert header.source_port == "1990:1994"

    @pytest.mark.parametrize(
        "field,value",
        [("destination", "not-an-address"), ("source_port", "70000"), ("destination_port", "20:10")],
    )
    def test_invalid_values(self, field, value):
        values = {
            "destination": "ANY",
            "destination_port": "ANY",
            "direction": "FORWARD",
            "protocol": "IP",
            "source": "ANY",
            "source_port": "ANY",
        }
        values[field] = value
        with pytest.raises(ValidationError):
            Header(**values)


class TestRuleVariables:
    def test_duplicate_keys(self):
        with pytest.raises(ValidationError, match="duplicate keys in ip_sets"):
            RuleVariables.model_validate(
                {
                    "ip_sets": [
                        {"key": "HOME", "ip_set": [{"definition": ["10.0.0.0/16"]}]},
                        {"key": "HOME", "ip_set": [{"definition": ["10.1.0.0/16"]}]},
                    ]
                }
            )

    def test_invalid_key(self):
        with pytest.raises(ValidationError, match="invalid rule variable key"):
            RuleVariables.model_validate({"ip_sets": [{"key": "1bad", "ip_set": {"definition": ["10.0.0.0/16"]}}]})

    def test_port_set_coerces_numbers(self):
        assert PortSet(definition=[443, "8000:8080"]).definition == ["443", "8000:8080"]

    def test_port_set_rejects_any(self):
        with pytest.raises(ValidationError):
            PortSet(definition=["ANY"])

    def test_ip_set_requires_cidrs(self):
        with pytest.raises(ValidationError, match="invalid CIDR"):
            RuleVariables.model_validate({"ip_sets": [{"key": "HOME", "ip_set": {"definition": ["10.0.0.1"]}}]})


class TestStatelessRules:
    def test_custom_action_reference(self):
        block = StatelessRulesAndCustomActions.model_validate(
            stateless_block(
                ["aws:pass", "example"],
                custom_actions=[
                    {
                        "action_name": "example",
                        "action_definition": [{"publish_metric_action": [{"dimension": [{"value": 2}]}]}],
                    }
                ],
            )
        )
        assert block.custom_action[0].action_definition.publish_metric_action.dimension[0].value == "2"

    def test_unknown_action(self):
        with pytest.raises(ValidationError, match="neither a standard nor a custom action"):
            StatelessRulesAndCustomActions.model_validate(stateless_block(["undefined"]))

    def test_duplicate_priorities(self):
        with pytest.raises(ValidationError, match="priorities must be unique"):
            StatelessRulesAndCustomActions.model_validate(stateless_block(["aws:drop"], priorities=(1, 1)))

    def test_priority_bounds(self):
        with pytest.raises(ValidationError):
            StatelessRulesAndCustomActions.model_validate(stateless_block(["aws:drop"], priorities=(0,)))

    def test_port_range_defaults_to_single_port(self):
        assert PortRange(from_port=53).to_port == 53

    def test_port_range_order(self):
        with pytest.raises(ValidationError, match="invalid port range"):
            PortRange(from_port=100, to_port=10)
