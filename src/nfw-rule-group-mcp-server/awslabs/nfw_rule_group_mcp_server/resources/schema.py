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

"""Collection semantics of the rule group attribute tree."""

import json
from typing import Any, Final, List

# Attribute names whose values are unordered sets. Any other list compares in order.
SET_ATTRIBUTES: Final[frozenset] = frozenset(
    {
        # rule_variables
        "ip_sets",
        "port_sets",
        "definition",
        # rules_source_list
        "target_types",
        "targets",
        # stateful rules
        "stateful_rule",
        "rule_option",
        "settings",
        # stateless rules and custom actions
        "custom_action",
        "dimension",
        "stateless_rule",
        "actions",
        "destination",
        "destination_port",
        "source",
        "source_port",
        "protocols",
        "tcp_flag",
        "flags",
        "masks",
    }
)

# Attributes holding string maps rather than nested blocks
MAP_ATTRIBUTES: Final[frozenset] = frozenset({"tags", "tags_all"})


def canonical_key(value: Any) -> str:
    """Stable, order-insensitive identity of a set member."""
    return json.dumps(canonicalize(value), sort_keys=True, default=str)


def canonicalize(value: Any, name: str = "") -> Any:
    """Return ``value`` with every set-typed list sorted and de-duplicated."""
    if isinstance(value, dict):
        return {key: canonicalize(item, key) for key, item in value.items()}
    if isinstance(value, list):
        items = [canonicalize(item) for item in value]
        if name in SET_ATTRIBUTES:
            return _unique_sorted(items)
        return items
    return value


def _unique_sorted(items: List[Any]) -> List[Any]:
    by_key = {}
    for item in items:
        by_key.setdefault(canonical_key(item), item)
    return [by_key[key] for key in sorted(by_key)]


def is_empty(value: Any) -> bool:
    """Zero values compare equal to an absent attribute."""
    return value is None or value == "" or value == [] or value == {}
