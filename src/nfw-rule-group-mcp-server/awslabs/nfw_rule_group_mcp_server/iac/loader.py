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

"""Builds desired rule group resources from configuration text."""

from typing import Any, Dict

from pydantic import ValidationError

from ..consts import RESOURCE_TYPE
from ..exceptions import RuleGroupValidationError
from ..models.rule_group_models import RuleGroupResource
from .hcl_parser import parse_hcl


def resource_address(name: str) -> str:
    return f"{RESOURCE_TYPE}.{name}"


def _format_validation_error(address: str, error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        problems.append(f"{location}: {item['msg']}")
    return f"{address}: " + "; ".join(problems)


def load_configuration(content: str) -> Dict[str, RuleGroupResource]:
    """Parse ``content`` and validate every rule group resource it declares.

    Returns:
        Resources keyed by address, e.g. ``aws_networkfirewall_rule_group.test``.

    Raises:
        ConfigurationParseError: the text is not valid configuration.
        RuleGroupValidationError: a resource is of an unsupported type or
            fails schema validation.
    """
    document = parse_hcl(content)
    resources: Dict[str, RuleGroupResource] = {}
    for resource_type, by_name in document.get("resource", {}).items():
        if resource_type != RESOURCE_TYPE:
            raise RuleGroupValidationError(f"unsupported resource type {resource_type!r}")
        for name, body in by_name.items():
            address = resource_address(name)
            resources[address] = build_resource(address, body)
    return resources


def build_resource(address: str, body: Dict[str, Any]) -> RuleGroupResource:
    computed = [name for name in RuleGroupResource.computed_fields if name in body]
    if computed:
        raise RuleGroupValidationError(f"{address}: computed attributes cannot be configured: {computed}")
    try:
        return RuleGroupResource.model_validate(body)
    except ValidationError as e:
        raise RuleGroupValidationError(_format_validation_error(address, e)) from e
