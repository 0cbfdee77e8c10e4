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

"""Flat ``path -> string`` view of a resource state.

Lists and nested blocks are rendered with a ``.#`` count and numeric indexes
(``rule_group.0.rules_source.#``), maps with a ``.%`` count and their keys
(``tags.Name``). Set-typed lists are indexed in canonical order, so indexes
are stable but carry no meaning of their own.
"""

from typing import Any, Dict

from ..models.rule_group_models import RuleGroupResource
from ..resources.schema import MAP_ATTRIBUTES, canonicalize


def to_flatmap(resource: RuleGroupResource) -> Dict[str, str]:
    attributes = canonicalize(resource.attributes())
    flat: Dict[str, str] = {}
    if resource.arn:
        flat["id"] = resource.arn
    for name, value in attributes.items():
        _flatten(flat, name, name, value)
    return flat


def _flatten(flat: Dict[str, str], key: str, name: str, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, dict):
        if name in MAP_ATTRIBUTES:
            flat[f"{key}.%"] = str(len(value))
            for map_key, item in value.items():
                flat[f"{key}.{map_key}"] = _scalar(item)
            return
        # Single nested block
        value = [value]
    if isinstance(value, list):
        flat[f"{key}.#"] = str(len(value))
        for index, item in enumerate(value):
            item_key = f"{key}.{index}"
            if isinstance(item, dict):
                for child, child_value in item.items():
                    _flatten(flat, f"{item_key}.{child}", child, child_value)
            else:
                flat[item_key] = _scalar(item)
        return
    flat[key] = _scalar(value)


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
